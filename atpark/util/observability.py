"""Logfire setup.

Domain services, controllers and use cases call ``logfire`` directly:

    with logfire.span("feed_controller.refresh", generation=generation):
        ...
    logfire.warn("Feed degraded", error=failure.error)
"""

import logfire
from fastapi import FastAPI

from atpark.config import ObservabilitySettings, Settings

SERVICE_VERSION = "0.1.0"


def should_send(observability: ObservabilitySettings) -> bool:
    """An explicit OBSERVABILITY__SEND_TO_LOGFIRE wins, else send iff a token is set."""
    if observability.send_to_logfire is not None:
        return observability.send_to_logfire
    return bool(observability.logfire_token)


def configure_logfire(settings: Settings, service_name: str = "atpark") -> None:
    """Configure logfire for this process; console output is always on."""
    send = should_send(settings.observability)

    logfire.configure(
        service_name=service_name,
        service_version=SERVICE_VERSION,
        environment=settings.environment,
        send_to_logfire=send,
        token=settings.observability.logfire_token,
        console=logfire.ConsoleOptions(
            colors="auto",
            span_style="show-parents",
            verbose=settings.debug,
        ),
    )

    logfire.info(
        "Logfire configured",
        service=service_name,
        environment=settings.environment,
        send_to_logfire=send,
    )


def instrument_fastapi(app: FastAPI) -> None:
    """Trace every broker request; headers are left out of the spans."""
    logfire.instrument_fastapi(app, capture_headers=False)
