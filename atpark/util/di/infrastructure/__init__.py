"""Swappable infrastructure components.

The production variants are imported here so they are registered as
subclasses of their component base.
"""

from atpark.util.di.infrastructure.bluesky import BlueskyProvider, ProdBlueskyProvider
from atpark.util.di.infrastructure.storage import ProdStorageProvider, StorageProvider

__all__ = [
    "BlueskyProvider",
    "ProdBlueskyProvider",
    "ProdStorageProvider",
    "StorageProvider",
]
