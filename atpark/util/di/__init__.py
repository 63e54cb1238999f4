"""Dependency injection wiring.

Every entry of ``PROVIDERS`` is either a concrete provider, used as-is, or a
component base whose subclasses are its production and mock variants (told
apart by ``__is_mock__``). Mock variants live under ``tests/di`` and only
exist once that package is imported.
"""

from collections.abc import Iterable

from atpark.util.di.application import ProdApplicationProvider
from atpark.util.di.base import Component, ProviderBase
from atpark.util.di.core import ProdConfigProvider
from atpark.util.di.domain import ProdDomainProvider
from atpark.util.di.infrastructure import (
    BlueskyProvider,
    ProdBlueskyProvider,
    ProdStorageProvider,
    StorageProvider,
)

PROVIDERS: list[type[ProviderBase]] = [
    ProdConfigProvider,
    ProdDomainProvider,
    ProdApplicationProvider,
    BlueskyProvider,
    StorageProvider,
]


def components() -> set[Component]:
    """Names of the swappable components."""
    return {base.__mock_component__ for base in PROVIDERS if base.__mock_component__}


def get_provider(base: type[ProviderBase], use_mock: bool = False) -> type[ProviderBase]:
    """Resolve a ``PROVIDERS`` entry to the class to instantiate.

    Raises:
        ValueError: If the component has no variant of the requested kind
    """
    variants = {bool(c.__is_mock__): c for c in base.__subclasses__()}
    if not variants:
        return base
    if use_mock not in variants:
        kind = "mock" if use_mock else "production"
        raise ValueError(f"No {kind} provider for {base.__mock_component__ or base.__name__}")
    return variants[use_mock]


def select_providers(mocked: Iterable[Component] = ()) -> list[ProviderBase]:
    """One provider instance per ``PROVIDERS`` entry, mocking the named components."""
    mocked = set(mocked)
    return [
        get_provider(base, use_mock=base.__mock_component__ in mocked)()
        for base in PROVIDERS
    ]


__all__ = [
    "PROVIDERS",
    "BlueskyProvider",
    "Component",
    "ProdApplicationProvider",
    "ProdBlueskyProvider",
    "ProdConfigProvider",
    "ProdDomainProvider",
    "ProdStorageProvider",
    "ProviderBase",
    "StorageProvider",
    "components",
    "get_provider",
    "select_providers",
]
