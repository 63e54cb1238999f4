#!/usr/bin/env python3
"""Run the upload broker under uvicorn.

Refuses to start without bucket credentials so a misconfigured deployment
fails here instead of on the first upload.
"""

import sys

import logfire
import uvicorn

from atpark.config import Settings
from atpark.util.logging import setup_logging
from atpark.util.observability import configure_logfire

REQUIRED_STORAGE = ("bucket", "access_key_id", "secret_access_key")


def main() -> int:
    settings = Settings()
    setup_logging(settings)
    configure_logfire(settings, service_name="atpark-upload-broker")

    missing = [name for name in REQUIRED_STORAGE if not getattr(settings.storage, name)]
    if missing:
        logfire.error(
            "Upload broker not configured",
            missing=[f"STORAGE__{name.upper()}" for name in missing],
        )
        return 1

    logfire.info(
        "Starting upload broker",
        host=settings.host,
        port=settings.port,
        bucket=settings.storage.bucket,
        public_bucket_url=settings.storage.public_bucket_url,
    )
    try:
        # Importing the app module builds the container, so logfire must be ready first
        uvicorn.run(
            "atpark.interface.broker.app:app",
            host=settings.host,
            port=settings.port,
            log_level="debug" if settings.debug else "info",
        )
    except Exception as e:
        logfire.exception("Upload broker crashed", error_type=type(e).__name__)
        raise
    return 0


if __name__ == "__main__":
    sys.exit(main())
