"""Upload broker client adapter."""

import logging
from typing import Any

import httpx

from atpark.adapter.storage.presign import make_object_key
from atpark.domain.error import NetworkError, NetworkHop, ProtocolError
from atpark.domain.model.upload import UploadGrant
from atpark.domain.service.image_service import UploadBroker

logger = logging.getLogger(__name__)


class HttpxUploadBroker(UploadBroker):
    """Client for the upload broker's ``POST /`` grant endpoint."""

    def __init__(
        self,
        broker_url: str,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize broker client.

        Args:
            broker_url: Base URL of the broker
            timeout: Deadline for the grant request, in seconds
            transport: Optional httpx transport (used by tests)
        """
        self._broker_url = broker_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def get_upload_url(self, filename: str, content_type: str) -> UploadGrant:
        """Request a presigned upload URL.

        Raises:
            NetworkError: If the broker is unreachable, times out or answers non-2xx
            ProtocolError: If the broker answer is malformed or not successful
        """
        logger.debug(f"Requesting upload URL from {self._broker_url} for {filename} ({content_type})")

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    f"{self._broker_url}/",
                    json={"filename": filename, "contentType": content_type},
                )
        except httpx.TimeoutException as e:
            logger.error(f"Upload broker timed out after {self._timeout}s")
            raise NetworkError(
                "Request timed out. The upload broker may be unavailable.",
                hop=NetworkHop.BROKER_GRANT,
            ) from e
        except httpx.TransportError as e:
            logger.error(f"Network error with upload broker: {e}")
            raise NetworkError(
                "Network error: Failed to connect to the upload broker. "
                "Check if the broker URL is correct and accessible.",
                hop=NetworkHop.BROKER_GRANT,
            ) from e

        body: Any
        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code >= 400:
            detail = body.get("error") if isinstance(body, dict) else None
            logger.error(
                f"Upload broker error (status {response.status_code}): {detail or response.text}"
            )
            raise NetworkError(
                detail
                or f"Server error: {response.status_code} {response.reason_phrase}",
                hop=NetworkHop.BROKER_GRANT,
            )

        if not isinstance(body, dict):
            raise ProtocolError(
                "Failed to parse response from upload broker",
                hop=NetworkHop.BROKER_GRANT,
            )

        if not body.get("success"):
            raise ProtocolError(
                body.get("error") or "Failed to get upload URL",
                hop=NetworkHop.BROKER_GRANT,
            )

        data = body.get("data")
        fields = ("uploadUrl", "publicUrl", "key")
        if not isinstance(data, dict) or not all(
            isinstance(data.get(field), str) and data.get(field) for field in fields
        ):
            raise ProtocolError(
                "Upload broker response is missing uploadUrl, publicUrl or key",
                hop=NetworkHop.BROKER_GRANT,
            )

        logger.debug(f"Got upload grant for key {data['key']}")
        return UploadGrant(
            upload_url=data["uploadUrl"],
            public_url=data["publicUrl"],
            key=data["key"],
            content_type=content_type,
        )


# Mock implementation for testing
class InMemoryUploadBroker(UploadBroker):
    """Broker that mints grants locally, mirroring the real key format."""

    def __init__(
        self,
        public_bucket_url: str = "https://images.example.com",
        upload_base_url: str = "https://upload.mock.test",
    ) -> None:
        self.public_bucket_url = public_bucket_url.rstrip("/")
        self.upload_base_url = upload_base_url.rstrip("/")
        self.grants: list[UploadGrant] = []
        self._failures: list[Exception] = []

    def fail_next(self, error: Exception) -> None:
        """Make the next grant request raise ``error``."""
        self._failures.append(error)

    async def get_upload_url(self, filename: str, content_type: str) -> UploadGrant:
        if self._failures:
            raise self._failures.pop(0)

        key = make_object_key(filename)
        grant = UploadGrant(
            upload_url=f"{self.upload_base_url}/{key}",
            public_url=f"{self.public_bucket_url}/{key}",
            key=key,
            content_type=content_type,
        )
        self.grants.append(grant)
        return grant
