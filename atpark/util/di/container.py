"""Production container and FastAPI wiring."""

from dishka import AsyncContainer, make_async_container
from dishka.integrations.fastapi import FastapiProvider, setup_dishka
from fastapi import FastAPI

from atpark.util.di import select_providers


def create_container() -> AsyncContainer:
    """Container with every component in its production variant.

    Settings are read from the environment when first resolved.
    """
    return make_async_container(*select_providers(), FastapiProvider())


def setup_di(app: FastAPI, container: AsyncContainer) -> None:
    """Attach ``container`` to ``app`` so routes can use ``FromDishka``."""
    setup_dishka(container, app)
