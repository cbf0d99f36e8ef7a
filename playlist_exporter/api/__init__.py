"""
Catalog API Layer.

This package handles all communication with the Pipe Bomb catalog server.
"""

from .auth import CatalogAuthenticator
from .client import CatalogClient

__all__ = ["CatalogAuthenticator", "CatalogClient"]
