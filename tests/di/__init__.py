"""Mock providers for testing."""

from .bluesky import MockBlueskyProvider
from .storage import MockStorageProvider
from .container import build_test_container

__all__ = [
    "MockBlueskyProvider",
    "MockStorageProvider",
    "build_test_container",
]
