"""Bluesky XRPC client adapter."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

import httpx
import jwt

from atpark.adapter.bluesky.identity import (
    DIDDocument,
    IdentityResolutionError,
    get_pds_endpoint,
)
from atpark.domain.error import (
    AuthError,
    DomainError,
    NetworkError,
    NetworkHop,
    ProtocolError,
    SessionExpiredError,
)
from atpark.domain.model.session import Session
from atpark.domain.model.user import User
from atpark.domain.service.session_service import AtProtoClient, RecordPage, RepoRecord

logger = logging.getLogger(__name__)

# XRPC error names that mean the access token must be refreshed
EXPIRED_TOKEN_ERRORS = {"ExpiredToken"}


class HttpxAtProtoClient(AtProtoClient):
    """AT Protocol client speaking XRPC over HTTPS.

    Login goes to the configured entryway; every other call goes to the PDS
    named in the account's DID document.
    """

    def __init__(
        self,
        service_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize XRPC client.

        Args:
            service_url: Entryway used for login (e.g., "https://bsky.social")
            timeout: Deadline for each call, in seconds
            transport: Optional httpx transport (used by tests)
        """
        self._service_url = service_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def create_session(self, identifier: str, password: str) -> Session:
        data = await self._call(
            "POST",
            self._service_url,
            "com.atproto.server.createSession",
            json={"identifier": identifier, "password": password},
        )
        session = self._session_from(data, pds_url=self._service_url)
        logger.info(f"Session created for {session.handle} ({session.did}) on {session.pds_url}")
        return session

    async def refresh_session(self, session: Session) -> Session:
        data = await self._call(
            "POST",
            session.pds_url,
            "com.atproto.server.refreshSession",
            token=session.refresh_jwt,
        )
        refreshed = self._session_from(data, pds_url=session.pds_url)
        if refreshed.did != session.did:
            raise ProtocolError(
                f"Refreshed session belongs to {refreshed.did}, expected {session.did}",
                hop=NetworkHop.REPOSITORY,
            )
        logger.info(f"Session refreshed for {session.did}")
        return refreshed

    async def delete_session(self, session: Session) -> None:
        await self._call(
            "POST",
            session.pds_url,
            "com.atproto.server.deleteSession",
            token=session.refresh_jwt,
        )
        logger.info(f"Session revoked for {session.did}")

    async def get_profile(self, session: Session, actor: str) -> User:
        data = await self._call(
            "GET",
            session.pds_url,
            "app.bsky.actor.getProfile",
            token=session.access_jwt,
            params={"actor": actor},
        )
        did = data.get("did")
        if not isinstance(did, str) or not did:
            raise ProtocolError(
                "Profile response is missing did", hop=NetworkHop.REPOSITORY
            )

        return User(
            did=did,
            handle=data.get("handle") or "",
            display_name=data.get("displayName") or None,
            avatar=data.get("avatar") or None,
        )

    async def create_record(
        self, session: Session, collection: str, record: dict[str, Any]
    ) -> str:
        data = await self._call(
            "POST",
            session.pds_url,
            "com.atproto.repo.createRecord",
            token=session.access_jwt,
            json={"repo": session.did, "collection": collection, "record": record},
        )
        uri = data.get("uri")
        if not isinstance(uri, str) or not uri:
            raise ProtocolError(
                "createRecord response is missing uri", hop=NetworkHop.REPOSITORY
            )

        logger.debug(f"Created record {uri}")
        return uri

    async def list_records(
        self,
        session: Session,
        repo: str,
        collection: str,
        limit: int,
        cursor: str | None = None,
    ) -> RecordPage:
        params: dict[str, Any] = {"repo": repo, "collection": collection, "limit": limit}
        if cursor:
            params["cursor"] = cursor

        data = await self._call(
            "GET",
            session.pds_url,
            "com.atproto.repo.listRecords",
            token=session.access_jwt,
            params=params,
        )

        raw_records = data.get("records")
        if not isinstance(raw_records, list):
            raise ProtocolError(
                "listRecords response is missing records", hop=NetworkHop.REPOSITORY
            )

        records = []
        for raw in raw_records:
            if (
                not isinstance(raw, dict)
                or not isinstance(raw.get("uri"), str)
                or not isinstance(raw.get("value"), dict)
            ):
                raise ProtocolError(
                    "listRecords returned a malformed record", hop=NetworkHop.REPOSITORY
                )
            records.append(RepoRecord(uri=raw["uri"], value=raw["value"]))

        logger.debug(f"Listed {len(records)} records of {collection} in {repo}")
        return RecordPage(records=records, cursor=data.get("cursor") or None)

    async def _call(
        self,
        method: str,
        base_url: str,
        nsid: str,
        token: str | None = None,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make one XRPC call and translate failures into domain errors.

        Raises:
            SessionExpiredError: If the token has expired
            AuthError: If the credentials were rejected
            NetworkError: If the server is unreachable or timed out
            ProtocolError: For any other failure or malformed body
        """
        url = f"{base_url}/xrpc/{nsid}"
        headers = {"Authorization": f"Bearer {token}"} if token else {}

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.request(
                    method, url, headers=headers, json=json, params=params
                )
        except httpx.TimeoutException as e:
            logger.warning(f"{nsid} timed out after {self._timeout}s")
            raise NetworkError(
                f"Request to {nsid} timed out", hop=NetworkHop.REPOSITORY
            ) from e
        except httpx.TransportError as e:
            logger.warning(f"{nsid} failed to connect: {e}")
            raise NetworkError(
                f"Network error: failed to reach {base_url}", hop=NetworkHop.REPOSITORY
            ) from e

        logger.debug(f"{nsid} response status: {response.status_code}")

        body: Any = None
        if response.content:
            try:
                body = response.json()
            except ValueError:
                body = None

        if response.status_code >= 400:
            error = body.get("error") if isinstance(body, dict) else None
            message = body.get("message") if isinstance(body, dict) else None
            logger.error(
                f"{nsid} failed (status {response.status_code}): {body or response.text}"
            )

            if error in EXPIRED_TOKEN_ERRORS:
                raise SessionExpiredError(message or "Token has expired")
            if response.status_code == 401:
                raise AuthError(message or "Authentication required")
            raise ProtocolError(
                f"{nsid} failed ({response.status_code}): {message or error or response.reason_phrase}",
                hop=NetworkHop.REPOSITORY,
            )

        if not response.content:
            return {}
        if not isinstance(body, dict):
            raise ProtocolError(
                f"{nsid} returned a non-JSON response", hop=NetworkHop.REPOSITORY
            )
        return body

    @staticmethod
    def _session_from(data: dict[str, Any], pds_url: str) -> Session:
        """Build a session from a createSession/refreshSession response.

        A response without a DID yields a session with an empty ``did``; the
        caller decides what that means.
        """
        did = data.get("did") or ""
        access_jwt = data.get("accessJwt") or ""
        refresh_jwt = data.get("refreshJwt") or ""
        if did and (not access_jwt or not refresh_jwt):
            raise ProtocolError(
                "Session response is missing tokens", hop=NetworkHop.REPOSITORY
            )

        handle = data.get("handle") or ""
        did_doc = data.get("didDoc")
        if isinstance(did_doc, dict):
            try:
                document = DIDDocument.model_validate(did_doc)
                handle = handle or document.handle or ""
                pds_url = get_pds_endpoint(document)
            except (IdentityResolutionError, ValueError) as e:
                logger.warning(f"Using configured service for {did}: {e}")

        return Session(
            did=did,
            handle=handle,
            access_jwt=access_jwt,
            refresh_jwt=refresh_jwt,
            pds_url=pds_url.rstrip("/"),
            expires_at=token_expiry(refresh_jwt),
        )


def token_expiry(token: str) -> datetime | None:
    """Read the ``exp`` claim of a JWT without verifying it.

    The PDS is the only party that can verify its tokens; the client only
    uses the expiry to drop a session that can no longer be refreshed.
    """
    if not token:
        return None

    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError:
        return None

    exp = claims.get("exp")
    if not isinstance(exp, (int, float)):
        return None
    return datetime.fromtimestamp(exp, tz=timezone.utc)


# Mock implementation for testing
class MockAtProtoClient(AtProtoClient):
    """In-memory personal data server for development and testing.

    Knows one account by default (``alice.test`` / ``hunter2``). Record keys
    increase with every write and listings are newest first.
    """

    PDS_URL = "https://pds.mock.test"

    def __init__(self) -> None:
        """Initialize mock PDS without network configuration."""
        self.accounts: dict[str, tuple[str, str]] = {
            "alice.test": ("did:plc:abc", "hunter2"),
        }
        self.profiles: dict[str, User] = {
            "did:plc:abc": User(
                did="did:plc:abc",
                handle="alice.test",
                display_name="Alice",
                avatar="https://cdn.mock.test/avatar/alice.jpg",
            ),
        }
        self.records: dict[str, dict[str, dict[str, Any]]] = {}
        self.calls: list[str] = []
        self.access_tokens: set[str] = set()
        self.refresh_tokens: set[str] = set()
        self._failures: dict[str, list[DomainError]] = {}
        self._held_listings: list[asyncio.Event] = []
        self._seq = 0

    def fail_next(self, operation: str, error: DomainError) -> None:
        """Make the next call of ``operation`` raise ``error``."""
        self._failures.setdefault(operation, []).append(error)

    def hold_next_listing(self) -> asyncio.Event:
        """Block the next list_records call until the returned event is set."""
        gate = asyncio.Event()
        self._held_listings.append(gate)
        return gate

    def expire_access_tokens(self) -> None:
        """Invalidate every issued access token (refresh still works)."""
        self.access_tokens.clear()

    def revoke_refresh_tokens(self) -> None:
        """Invalidate every issued refresh token."""
        self.refresh_tokens.clear()

    def count(self, operation: str) -> int:
        """How many times ``operation`` was called."""
        return self.calls.count(operation)

    async def create_session(self, identifier: str, password: str) -> Session:
        self._enter("create_session")
        for handle, (did, secret) in self.accounts.items():
            if identifier in (handle, did) and password == secret:
                return self._issue(did, handle)
        raise AuthError("Invalid identifier or password")

    async def refresh_session(self, session: Session) -> Session:
        self._enter("refresh_session")
        if session.refresh_jwt not in self.refresh_tokens:
            raise SessionExpiredError("Token has been revoked")
        self.refresh_tokens.discard(session.refresh_jwt)
        return self._issue(session.did, session.handle)

    async def delete_session(self, session: Session) -> None:
        self._enter("delete_session")
        self.refresh_tokens.discard(session.refresh_jwt)

    async def get_profile(self, session: Session, actor: str) -> User:
        self._enter("get_profile")
        self._authorize(session)
        for user in self.profiles.values():
            if actor in (user.did, user.handle):
                return user
        raise ProtocolError(f"Profile not found: {actor}", hop=NetworkHop.REPOSITORY)

    async def create_record(
        self, session: Session, collection: str, record: dict[str, Any]
    ) -> str:
        self._enter("create_record")
        self._authorize(session)
        self._seq += 1
        rkey = f"3k{self._seq:011d}"
        uri = f"at://{session.did}/{collection}/{rkey}"
        self.records.setdefault(uri.rsplit("/", 1)[0], {})[rkey] = dict(record)
        return uri

    async def list_records(
        self,
        session: Session,
        repo: str,
        collection: str,
        limit: int,
        cursor: str | None = None,
    ) -> RecordPage:
        self._enter("list_records")
        if self._held_listings:
            await self._held_listings.pop(0).wait()
        self._authorize(session)

        prefix = f"at://{repo}/{collection}"
        stored = self.records.get(prefix, {})
        rkeys = sorted(stored, reverse=True)
        if cursor:
            rkeys = [rkey for rkey in rkeys if rkey < cursor]
        page = rkeys[:limit]

        return RecordPage(
            records=[
                RepoRecord(uri=f"{prefix}/{rkey}", value=stored[rkey]) for rkey in page
            ],
            cursor=page[-1] if len(page) == limit else None,
        )

    def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        pending = self._failures.get(operation)
        if pending:
            raise pending.pop(0)

    def _authorize(self, session: Session) -> None:
        if session.access_jwt not in self.access_tokens:
            raise SessionExpiredError("Token has expired")

    def _issue(self, did: str, handle: str) -> Session:
        self._seq += 1
        session = Session(
            did=did,
            handle=handle,
            access_jwt=f"mock-access-{self._seq}",
            refresh_jwt=f"mock-refresh-{self._seq}",
            pds_url=self.PDS_URL,
        )
        self.access_tokens.add(session.access_jwt)
        self.refresh_tokens.add(session.refresh_jwt)
        return session
