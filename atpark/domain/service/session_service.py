"""Session and repository domain service.

Owns the authentication lifecycle of the single process-wide session and the
photo record operations against the current account's repository.
"""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol, TypeVar

import logfire

from atpark.domain.error import (
    AuthError,
    DomainError,
    NetworkHop,
    NotAuthenticatedError,
    NotImplementedFeatureError,
    ProtocolError,
    SessionExpiredError,
    ValidationError,
)
from atpark.domain.model.photo import PhotoDraft, PhotoRecord
from atpark.domain.model.session import Session
from atpark.domain.model.share import Share
from atpark.domain.model.user import User
from atpark.domain.value import PHOTO_COLLECTION, Failure, Result, Success
from atpark.domain.value.common import ValueObject

from .base import Service

T = TypeVar("T")

# listRecords accepts at most 100 records per page
MAX_PAGE_SIZE = 100


class RepoRecord(ValueObject):
    """A raw record as listed by the repository."""

    uri: str
    value: dict[str, Any]


class RecordPage(ValueObject):
    """One page of a listRecords call."""

    records: list[RepoRecord]
    cursor: str | None = None


class AtProtoClient:
    """Network client interface for the AT Protocol.

    Implementations raise domain errors: ``AuthError`` for rejected
    credentials, ``SessionExpiredError`` for an expired access token,
    ``NetworkError`` for unreachable or timed out calls and
    ``ProtocolError`` for anything malformed.
    """

    async def create_session(self, identifier: str, password: str) -> Session:
        """Log in with a handle/DID/email and an app password."""
        raise NotImplementedError

    async def refresh_session(self, session: Session) -> Session:
        """Exchange the refresh token for a new session."""
        raise NotImplementedError

    async def delete_session(self, session: Session) -> None:
        """Revoke the session remotely."""
        raise NotImplementedError

    async def get_profile(self, session: Session, actor: str) -> User:
        """Fetch the profile of ``actor`` (DID or handle)."""
        raise NotImplementedError

    async def create_record(
        self, session: Session, collection: str, record: dict[str, Any]
    ) -> str:
        """Create a record in the session's repository and return its URI."""
        raise NotImplementedError

    async def list_records(
        self,
        session: Session,
        repo: str,
        collection: str,
        limit: int,
        cursor: str | None = None,
    ) -> RecordPage:
        """List records of ``collection`` in ``repo``, newest first."""
        raise NotImplementedError


class SessionStore(Protocol):
    """Holder of the single live session."""

    def get(self) -> Session | None:
        """Return the live session, or None if absent or expired."""
        ...

    def save(self, session: Session) -> None:
        """Replace the live session."""
        ...

    def clear(self) -> None:
        """Forget the live session."""
        ...


class SessionService(Service):
    """Domain service for authentication and photo record operations."""

    def __init__(self, client: AtProtoClient, session_store: SessionStore) -> None:
        """Initialize session service.

        Args:
            client: AT Protocol network client
            session_store: Store holding the live session
        """
        self.client = client
        self.session_store = session_store

    def is_authenticated(self) -> bool:
        """Whether a live session exists. Never touches the network."""
        return self.session_store.get() is not None

    def get_did(self) -> str | None:
        """DID of the logged-in account, if any."""
        session = self.session_store.get()
        return session.did if session else None

    async def login(self, identifier: str, password: str) -> Result[User]:
        """Create a session.

        Args:
            identifier: Handle, DID or email
            password: Account or app password

        Returns:
            Minimal user (did, handle) on success
        """
        with logfire.span("session_service.login", identifier=identifier):
            try:
                session = await self.client.create_session(identifier, password)
            except DomainError as e:
                logfire.warn(
                    "Login failed",
                    identifier=identifier,
                    kind=e.kind.value,
                    error=str(e),
                )
                return Failure.from_error(e)

            # The remote can answer 2xx without establishing an identity
            if not session.did:
                logfire.warn("Login returned no identity", identifier=identifier)
                return Failure.from_error(AuthError("Failed to establish session"))

            self.session_store.save(session)
            logfire.info("Session established", did=session.did, handle=session.handle)
            return Success(data=session.to_user())

    async def logout(self) -> None:
        """Drop the local session and revoke it remotely.

        The local session is cleared even if the remote revoke fails.
        """
        session = self.session_store.get()
        self.session_store.clear()
        if session is None:
            return

        with logfire.span("session_service.logout", did=session.did):
            try:
                await self.client.delete_session(session)
            except DomainError as e:
                logfire.warn(
                    "Remote session revoke failed, local session cleared anyway",
                    did=session.did,
                    error=str(e),
                )

    async def get_profile(self, did: str) -> Result[User]:
        """Fetch a user profile by DID.

        Args:
            did: Account to look up

        Returns:
            User with display name and avatar when the remote has them
        """
        with logfire.span("session_service.get_profile", did=did):
            try:
                user = await self._with_session(
                    lambda session: self.client.get_profile(session, did)
                )
            except DomainError as e:
                logfire.warn("Profile fetch failed", did=did, error=str(e))
                return Failure.from_error(e)

            return Success(data=user)

    async def create_photo(self, draft: PhotoDraft) -> Result[PhotoRecord]:
        """Publish a photo record to the current account's repository.

        Args:
            draft: Client-supplied photo fields

        Returns:
            The record with its repository-assigned URI and author
        """
        with logfire.span(
            "session_service.create_photo",
            image=draft.image,
            tags=draft.tags,
            visibility=draft.visibility.value,
        ):
            try:
                if not self.is_authenticated():
                    raise NotAuthenticatedError()
                self._validate_image_url(draft.image, "Image URL is required")
                if draft.thumbnail is not None:
                    self._validate_image_url(draft.thumbnail, "Thumbnail URL is empty")

                payload = draft.to_record()
                uri = await self._with_session(
                    lambda session: self.client.create_record(
                        session, PHOTO_COLLECTION, payload
                    )
                )
                try:
                    record = PhotoRecord.from_record(uri, payload)
                except ValueError as e:
                    raise ProtocolError(
                        f"Repository returned an invalid record URI: {uri}",
                        hop=NetworkHop.REPOSITORY,
                    ) from e
            except DomainError as e:
                logfire.warn("Photo creation failed", kind=e.kind.value, error=str(e))
                return Failure.from_error(e)

            logfire.info("Photo created", uri=record.uri, author_did=record.author_did)
            return Success(data=record)

    async def list_photos(
        self, limit: int = 50, cursor: str | None = None
    ) -> Result[list[PhotoRecord]]:
        """List photos of the current account, newest first.

        Args:
            limit: Maximum records to return (1-100)
            cursor: Resume after this record key; None or empty for the first page

        Returns:
            Photos in repository order
        """
        with logfire.span("session_service.list_photos", limit=limit, cursor=cursor):
            try:
                if not 1 <= limit <= MAX_PAGE_SIZE:
                    raise ValidationError(
                        f"Page size must be between 1 and {MAX_PAGE_SIZE}"
                    )

                async def fetch(session: Session) -> RecordPage:
                    return await self.client.list_records(
                        session,
                        repo=session.did,
                        collection=PHOTO_COLLECTION,
                        limit=limit,
                        cursor=cursor or None,
                    )

                page = await self._with_session(fetch)
                photos = self._map_records(page)
            except DomainError as e:
                logfire.warn("Listing photos failed", kind=e.kind.value, error=str(e))
                return Failure.from_error(e)

            logfire.info("Photos listed", count=len(photos))
            return Success(data=photos)

    async def create_share(self, photo_uri: str, shared_with: list[str]) -> Result[Share]:
        """Share a photo with other accounts (not implemented)."""
        _ = (photo_uri, shared_with)
        if not self.is_authenticated():
            return Failure.from_error(NotAuthenticatedError())
        return Failure.from_error(
            NotImplementedFeatureError("Sharing is not implemented yet")
        )

    async def _with_session(self, operation: Callable[[Session], Awaitable[T]]) -> T:
        """Run an operation with the live session, refreshing it once if expired.

        Raises:
            NotAuthenticatedError: If there is no live session
            DomainError: Whatever the operation or the refresh raises
        """
        session = self.session_store.get()
        if session is None:
            raise NotAuthenticatedError()

        try:
            return await operation(session)
        except SessionExpiredError:
            logfire.info("Access token expired, refreshing session", did=session.did)

        try:
            refreshed = await self.client.refresh_session(session)
        except AuthError:
            # Refresh token rejected: the session is gone for good
            self.session_store.clear()
            logfire.warn("Session refresh rejected, session dropped", did=session.did)
            raise

        self.session_store.save(refreshed)
        return await operation(refreshed)

    @staticmethod
    def _validate_image_url(url: str, missing_message: str) -> None:
        """Reject anything that is not a fetchable HTTPS reference.

        Raises:
            ValidationError: If the URL is empty, inline data or not HTTPS
        """
        if not url:
            raise ValidationError(missing_message)
        if url.startswith("data:"):
            raise ValidationError(
                "Cannot store data URLs in repository records. "
                "Upload the image to object storage first."
            )
        if not url.startswith("https://"):
            raise ValidationError(
                "Invalid image URL. Images must be hosted on a secure (https) server."
            )

    @staticmethod
    def _map_records(page: RecordPage) -> list[PhotoRecord]:
        """Map listed records into photos.

        Raises:
            ProtocolError: If any record is malformed
        """
        photos = []
        for item in page.records:
            try:
                photos.append(PhotoRecord.from_record(item.uri, item.value))
            except ValueError as e:
                raise ProtocolError(
                    f"Malformed photo record {item.uri}: {e}",
                    hop=NetworkHop.REPOSITORY,
                ) from e
        return photos
