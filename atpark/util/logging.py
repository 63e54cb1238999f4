"""stdlib logging setup for the broker process and the adapters."""

import logging
import sys

from atpark.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Request-level chatter from the HTTP and S3 clients
QUIET_LOGGERS = ("httpx", "httpcore", "botocore", "boto3", "urllib3")


def log_level(settings: Settings) -> int:
    """Debug when asked for, warnings only under test, info otherwise."""
    if settings.debug:
        return logging.DEBUG
    if settings.environment == "test":
        return logging.WARNING
    return logging.INFO


def setup_logging(settings: Settings) -> None:
    """Route all logging to stdout at the level ``settings`` calls for."""
    level = log_level(settings)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logging.getLogger(__name__).info(
        f"Logging at {logging.getLevelName(level)} ({settings.environment})"
    )
