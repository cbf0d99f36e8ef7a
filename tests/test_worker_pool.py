"""Test bounded concurrent draining and exactly-once completion"""

import asyncio
import random

import pytest

from playlist_exporter.core.worker_pool import WorkerPool


class Recorder:
    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.seen: list[int] = []
        self.in_flight = 0
        self.peak = 0
        self.completions: list = []
        self.failures: list = []
        self.progress: list[tuple[int, int]] = []

    async def handle(self, item: int) -> None:
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            await asyncio.sleep(random.uniform(0, 0.005))
            self.seen.append(item)
            if item in self.fail_on:
                raise RuntimeError(f"item {item} failed")
        finally:
            self.in_flight -= 1

    def pool(self, **kwargs) -> WorkerPool:
        return WorkerPool(
            self.handle,
            on_complete=self.completions.append,
            on_failure=lambda item, e: self.failures.append(item),
            on_progress=lambda done, total: self.progress.append((done, total)),
            **kwargs,
        )


class TestWorkerPool:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("count", [0, 1, 50])
    async def test_completion_fires_exactly_once(self, count):
        recorder = Recorder()
        result = await recorder.pool(concurrency=15).run(range(count))

        assert len(recorder.completions) == 1
        assert result.total == count
        assert result.attempted == count
        assert sorted(recorder.seen) == list(range(count))

    @pytest.mark.asyncio
    async def test_completion_comes_after_every_item(self):
        recorder = Recorder()
        attempted_at_completion = []
        pool = WorkerPool(
            recorder.handle,
            concurrency=15,
            on_complete=lambda result: attempted_at_completion.append(len(recorder.seen)),
        )
        await pool.run(range(50))
        assert attempted_at_completion == [50]

    @pytest.mark.asyncio
    async def test_empty_pool_spawns_no_workers(self):
        calls = []

        async def handler(item):
            calls.append(item)

        completions = []
        result = await WorkerPool(handler, on_complete=completions.append).run([])
        assert calls == []
        assert len(completions) == 1
        assert result.failed == 0

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self):
        recorder = Recorder()
        await recorder.pool(concurrency=15).run(range(50))
        assert 1 < recorder.peak <= 15

    @pytest.mark.asyncio
    async def test_each_item_is_handled_once(self):
        recorder = Recorder()
        await recorder.pool(concurrency=15).run(range(50))
        assert len(recorder.seen) == len(set(recorder.seen)) == 50

    @pytest.mark.asyncio
    async def test_one_failure_is_isolated(self):
        recorder = Recorder(fail_on={7})
        result = await recorder.pool(concurrency=15).run(range(50))

        assert result.succeeded == 49
        assert result.failed == 1
        assert result.failures[0][0] == 7
        assert isinstance(result.failures[0][1], RuntimeError)
        assert recorder.failures == [7]
        assert len(recorder.completions) == 1

    @pytest.mark.asyncio
    async def test_progress_counts_up_to_total(self):
        recorder = Recorder(fail_on={0})
        await recorder.pool(concurrency=4).run(range(10))
        assert [done for done, _ in recorder.progress] == list(range(1, 11))
        assert all(total == 10 for _, total in recorder.progress)

    @pytest.mark.asyncio
    async def test_timeout_counts_as_failure(self):
        async def handler(item):
            if item == 1:
                await asyncio.sleep(10)

        completions = []
        result = await WorkerPool(
            handler, concurrency=2, timeout=0.05, on_complete=completions.append
        ).run([0, 1, 2])

        assert result.succeeded == 2
        assert [item for item, _ in result.failures] == [1]
        assert isinstance(result.failures[0][1], asyncio.TimeoutError)
        assert len(completions) == 1

    def test_concurrency_must_be_positive(self):
        async def handler(item):
            pass

        with pytest.raises(ValueError):
            WorkerPool(handler, concurrency=0)
