"""Authenticated session with a personal data server."""

from datetime import datetime

from atpark.domain.model.common import DomainModel
from atpark.domain.model.user import User


class Session(DomainModel):
    """Live credentials for one account.

    Attributes:
        did: Stable account identifier
        handle: Human-readable alias at login time
        access_jwt: Bearer token for XRPC calls
        refresh_jwt: Token used to mint a new access token
        pds_url: Personal data server hosting the repository
        expires_at: When the refresh token stops working (None if unknown)
    """

    did: str
    handle: str
    access_jwt: str
    refresh_jwt: str
    pds_url: str
    expires_at: datetime | None = None

    def to_user(self) -> User:
        """Minimal user derived from the session."""
        return User(did=self.did, handle=self.handle)
