"""Session state for the logged-in account."""

from datetime import datetime, timezone

from atpark.domain.model.session import Session


class InMemorySessionStore:
    """In-memory store for the single live session.

    The session only lives as long as the process; after a restart the
    user logs in again.

    Attributes:
        _session: The live session, if any
    """

    def __init__(self) -> None:
        """Initialize empty session store."""
        self._session: Session | None = None

    def save(self, session: Session) -> None:
        """Replace the live session."""
        self._session = session

    def get(self) -> Session | None:
        """Return the live session.

        Automatically drops a session whose refresh token has expired.
        """
        session = self._session

        if (
            session
            and session.expires_at
            and session.expires_at < datetime.now(timezone.utc)
        ):
            self.clear()
            return None

        return session

    def clear(self) -> None:
        """Forget the live session."""
        self._session = None
