"""Test container with every component mocked unless asked otherwise."""

from dishka import AsyncContainer, make_async_container
from dishka.integrations.fastapi import FastapiProvider

from atpark.util.di import Component, components, select_providers


def build_test_container(unmock: set[Component] | None = None) -> AsyncContainer:
    """Build a container for tests.

    Args:
        unmock: Components to run with their production providers

    Raises:
        ValueError: If ``unmock`` names an unknown component

    Examples:
        # Everything in memory
        container = build_test_container()

        # Real httpx broker and storage clients
        container = build_test_container(unmock={"storage"})
    """
    unmock = unmock or set()
    known = components()
    unknown = unmock - known
    if unknown:
        raise ValueError(f"Unknown components: {sorted(unknown)}")

    return make_async_container(*select_providers(known - unmock), FastapiProvider())
