"""Test configuration and fixtures"""

from pathlib import Path

import pytest

from playlist_exporter.core.track_pipeline import TrackPipeline
from playlist_exporter.media import MediaFetcher, Tagger
from playlist_exporter.models.stats import ExportStats

from .fakes import CopyTranscoder, FakeCatalogClient, FakeSession


@pytest.fixture
def catalog():
    return FakeCatalogClient()


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def fetcher(session):
    return MediaFetcher(max_workers=15, session=session)


@pytest.fixture
def transcoder():
    return CopyTranscoder()


@pytest.fixture
def scratch_dir(tmp_path) -> Path:
    path = tmp_path / "tmp"
    path.mkdir()
    return path


@pytest.fixture
def stats():
    return ExportStats()


@pytest.fixture
def pipeline(fetcher, transcoder, scratch_dir, stats):
    return TrackPipeline(fetcher, transcoder, Tagger(), scratch_dir, stats)
