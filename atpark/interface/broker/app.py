"""Upload broker FastAPI application."""

from collections.abc import Awaitable, Callable

import logfire
from dishka import AsyncContainer
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse, PlainTextResponse

from atpark.interface.broker import routes
from atpark.util.di.container import create_container, setup_di
from atpark.util.observability import instrument_fastapi

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-Requested-With",
}
PREFLIGHT_MAX_AGE = "86400"  # 24 hours


async def cors_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Answer preflights on any path and put CORS headers on every response.

    Browsers upload from arbitrary origins, so preflights are answered
    without checking ``Origin``. Anything but POST is refused, and any
    unhandled error becomes a JSON 500.
    """
    if request.method == "OPTIONS":
        return Response(
            status_code=status.HTTP_204_NO_CONTENT,
            headers={**CORS_HEADERS, "Access-Control-Max-Age": PREFLIGHT_MAX_AGE},
        )

    if request.method != "POST":
        response: Response = PlainTextResponse(
            "Method not allowed", status_code=status.HTTP_405_METHOD_NOT_ALLOWED
        )
    else:
        try:
            response = await call_next(request)
        except Exception as e:
            logfire.exception("Unhandled error in upload broker", path=request.url.path)
            response = JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"success": False, "error": str(e) or "Internal server error"},
            )

    response.headers.update(CORS_HEADERS)
    return response


def create_broker_app(container: AsyncContainer | None = None) -> FastAPI:
    """Create the upload broker application.

    Note: Logfire should be configured before calling this function.
    In production, scripts/start_broker.py handles this.

    Args:
        container: DI container (production container when None)
    """
    app_instance = FastAPI(
        title="AT Park Upload Broker",
        description="Issues presigned upload URLs for AT Park photos",
        version="0.1.0",
    )

    instrument_fastapi(app_instance)

    app_instance.middleware("http")(cors_middleware)

    setup_di(app_instance, container or create_container())

    app_instance.include_router(routes.router)

    return app_instance


# Create app instance for uvicorn
# Note: Logfire must be configured before this module is imported
app = create_broker_app()
