"""Domain value objects for AT Park."""

from atpark.domain.error import ErrorKind, NetworkHop
from atpark.domain.value.result import Failure, Result, Success
from atpark.domain.value.types import (
    PHOTO_COLLECTION,
    AtUri,
    Visibility,
)

__all__ = [
    "PHOTO_COLLECTION",
    "AtUri",
    "ErrorKind",
    "NetworkHop",
    "Visibility",
    # Results
    "Failure",
    "Result",
    "Success",
]
