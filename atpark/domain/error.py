"""Domain layer errors.

Adapters raise these; services convert them into ``Failure`` results at
their boundary.
"""

from enum import Enum
from typing import ClassVar


class ErrorKind(str, Enum):
    """Failure taxonomy carried by every failed result."""

    VALIDATION = "validation"
    AUTH = "auth"
    NETWORK = "network"
    PROTOCOL = "protocol"
    NOT_IMPLEMENTED = "not_implemented"


class NetworkHop(str, Enum):
    """Which remote a network or protocol failure came from."""

    BROKER_GRANT = "broker_grant"
    BINARY_UPLOAD = "binary_upload"
    REPOSITORY = "repository"


class DomainError(Exception):
    """Base domain error."""

    kind: ClassVar[ErrorKind] = ErrorKind.PROTOCOL

    def __init__(self, message: str, hop: NetworkHop | None = None):
        super().__init__(message)
        self.hop = hop


class ValidationError(DomainError):
    """Bad or missing input, detected before any network call."""

    kind = ErrorKind.VALIDATION


class AuthError(DomainError):
    """Credential rejection or missing session."""

    kind = ErrorKind.AUTH


class NotAuthenticatedError(AuthError):
    """Raised when an operation needs a live session and there is none."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class SessionExpiredError(AuthError):
    """The access token was rejected as expired; a refresh may recover."""

    pass


class NetworkError(DomainError):
    """Remote unreachable or timed out."""

    kind = ErrorKind.NETWORK

    def __init__(self, message: str, hop: NetworkHop):
        super().__init__(message, hop)


class ProtocolError(DomainError):
    """Malformed or unexpected response from a trusted remote."""

    kind = ErrorKind.PROTOCOL


class NotImplementedFeatureError(DomainError):
    """Feature exists in the model but has no backend yet."""

    kind = ErrorKind.NOT_IMPLEMENTED
