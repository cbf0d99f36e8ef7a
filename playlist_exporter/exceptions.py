"""
Defines custom exceptions for the application to allow for more specific error handling.

Per-track failures derive from `TrackError` and are isolated by the worker pool.
Everything else is fatal at startup.
"""


class ExporterError(Exception):
    """Base exception for all application-specific errors."""


class TrackError(ExporterError):
    """Base class for failures that abort a single track but not the run."""


class TransportError(TrackError):
    """Raised when a network fetch fails or returns a non-2xx status."""


class UnsupportedFormatError(TrackError):
    """Raised when fetched audio declares a MIME type outside the known table."""


class MetadataLoadError(TrackError):
    """Raised when a track's title/artist metadata cannot be loaded."""


class ScratchWriteError(TrackError):
    """Raised when raw audio cannot be written to the scratch directory."""


class ExternalToolError(TrackError):
    """Raised when the audio converter exits non-zero or cannot be spawned."""


class TagWriteError(TrackError):
    """Raised when metadata tags cannot be written to the finished file."""


class ConfigurationError(ExporterError):
    """Raised for issues related to configuration loading or validation."""


class AuthenticationError(ExporterError):
    """Raised when the catalog server rejects the configured private key."""


class ConverterNotFoundError(ExporterError):
    """Raised when no audio converter executable can be located."""
