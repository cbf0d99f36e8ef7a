"""
Media Processing Layer.

This package is responsible for all media file operations, including
fetching, transcoding and metadata tagging.
"""

from .fetcher import MediaFetcher, classify_content_type
from .tagger import Tagger
from .transcoder import Transcoder, locate_converter

__all__ = [
    "MediaFetcher",
    "Tagger",
    "Transcoder",
    "classify_content_type",
    "locate_converter",
]
