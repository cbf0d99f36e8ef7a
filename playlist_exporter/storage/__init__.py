"""
Storage Layer.

This package handles persistence of the application's configuration.
"""

from .config_manager import ConfigManager

__all__ = ["ConfigManager"]
