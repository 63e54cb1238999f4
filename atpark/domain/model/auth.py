"""Authentication state exposed for access gating."""

from enum import Enum

from atpark.domain.model.common import DomainModel
from atpark.domain.model.user import User


class AuthStatus(str, Enum):
    """Tri-state authentication status."""

    PENDING = "pending"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class AuthState(DomainModel):
    """Snapshot of the authentication state."""

    status: AuthStatus = AuthStatus.PENDING
    user: User | None = None
    is_loading: bool = True
    error: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.status == AuthStatus.AUTHENTICATED
