"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator

# Target format -> converter output extension and display metadata
FORMAT_MAP = {
    "mp3": {"name": "MP3", "ext": "mp3", "color": "yellow"},
    "flac": {"name": "FLAC (lossless container)", "ext": "flac", "color": "green"},
}


def get_format_info(target_format: str) -> dict[str, str]:
    """Gets all information for a given target format from the central map."""
    return FORMAT_MAP.get(
        target_format, {"name": "Unknown", "ext": target_format, "color": "white"}
    )


class ExportConfig(BaseModel):
    """A validated configuration model for the application."""

    # Catalog server
    server: str
    private_key: str

    # Export Settings
    output_dir: str = "download"
    scratch_dir: str = "tmp"
    max_workers: int = 15
    target_format: str = "mp3"
    converter_path: str = ""
    track_timeout: float | None = None

    # Internal fields not loaded from INI file
    config_path: str = Field(..., repr=False)

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True
        str_strip_whitespace = True

    @field_validator("server")
    @classmethod
    def validate_server(cls, v: str) -> str:
        """Ensures the server address is an http(s) URL without a trailing slash."""
        if not v:
            raise ValueError(
                'Server address not provided. Set "server" in the config file '
                'or the "PB_SERVER" environment variable.'
            )
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Server address must start with http:// or https://: {v}")
        return v.rstrip("/")

    @field_validator("private_key")
    @classmethod
    def validate_private_key(cls, v: str) -> str:
        if not v:
            raise ValueError(
                'Private key not provided. Set "private_key" in the config file '
                'or the "PB_KEY" environment variable.'
            )
        return v

    @field_validator("max_workers")
    @classmethod
    def validate_workers(cls, v: int) -> int:
        """Ensures a reasonable number of workers."""
        if v < 1 or v > 32:
            raise ValueError("Max workers must be between 1 and 32.")
        return v

    @field_validator("target_format")
    @classmethod
    def validate_target_format(cls, v: str) -> str:
        v = v.lower().lstrip(".")
        if v not in FORMAT_MAP:
            raise ValueError(
                f"Target format must be one of {', '.join(FORMAT_MAP)}, got: {v}"
            )
        return v

    @field_validator("track_timeout")
    @classmethod
    def validate_track_timeout(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("Track timeout must be a positive number of seconds.")
        return v

    @model_validator(mode="after")
    def validate_directories(self) -> "ExportConfig":
        """The scratch area is wiped on every run, so it must not overlap the output tree."""
        if not self.output_dir or not self.scratch_dir:
            raise ValueError("Output and scratch directories cannot be empty.")
        output = Path(self.output_dir).expanduser().resolve()
        scratch = Path(self.scratch_dir).expanduser().resolve()
        if scratch == output:
            raise ValueError("Scratch directory must differ from the output directory.")
        if scratch in output.parents or output in scratch.parents:
            raise ValueError(
                "Scratch and output directories must not contain one another: "
                f"'{self.scratch_dir}', '{self.output_dir}'"
            )
        return self

    @property
    def extension(self) -> str:
        return get_format_info(self.target_format)["ext"]

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path"}
        return {key for key in cls.model_fields if key not in internal_fields}
