"""Tagged success/failure envelope returned by every service operation."""

from typing import Generic, Literal, TypeVar, Union

from typing_extensions import TypeAliasType

from atpark.domain.error import DomainError, ErrorKind, NetworkHop
from atpark.domain.value.common import ValueObject

T = TypeVar("T")


class Success(ValueObject, Generic[T]):
    """Successful outcome carrying the produced value."""

    success: Literal[True] = True
    data: T


class Failure(ValueObject):
    """Failed outcome carrying a human-readable message and its taxonomy.

    Attributes:
        error: Message suitable for showing inline to the user
        kind: Error taxonomy member
        hop: Remote that failed, for network and protocol errors
    """

    success: Literal[False] = False
    error: str
    kind: ErrorKind
    hop: NetworkHop | None = None

    @classmethod
    def from_error(cls, exc: DomainError) -> "Failure":
        """Build a failure from a domain error."""
        return cls(error=str(exc), kind=exc.kind, hop=exc.hop)


# Subscriptable as Result[X] in annotations
Result = TypeAliasType("Result", Union[Success[T], Failure], type_params=(T,))
