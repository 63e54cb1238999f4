"""Presigned upload URLs for S3-compatible object storage."""

import logging
import re
import secrets
import string
import time
from pathlib import PurePosixPath

from boto3.session import Session
from botocore.client import BaseClient
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

KEY_TOKEN_ALPHABET = string.ascii_lowercase + string.digits
KEY_TOKEN_LENGTH = 11

# Anything outside this set is replaced so the key needs no URL encoding
UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class PresignError(Exception):
    """Failed to produce a presigned URL."""

    pass


def make_object_key(filename: str, now_ms: int | None = None) -> str:
    """Mint a collision-resistant object key: ``<unixMillis>-<token>-<filename>``.

    Path components are stripped from ``filename`` so the key never nests,
    and characters that would need URL encoding become ``_``.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    token = "".join(secrets.choice(KEY_TOKEN_ALPHABET) for _ in range(KEY_TOKEN_LENGTH))
    name = PurePosixPath(filename.replace("\\", "/")).name
    name = UNSAFE_KEY_CHARS.sub("_", name) or "upload"
    return f"{now_ms}-{token}-{name}"


class ObjectPresigner:
    """Interface for minting single-use write URLs."""

    def presign_put(self, key: str, content_type: str) -> str:
        """Return a URL that accepts one PUT of ``key`` with ``content_type``.

        Raises:
            PresignError: If the URL cannot be produced
        """
        raise NotImplementedError


class S3Presigner(ObjectPresigner):
    """Presigner backed by a boto3 S3 client (works with R2 and Spaces)."""

    def __init__(
        self,
        bucket: str,
        endpoint_url: str | None,
        region: str,
        access_key_id: str,
        secret_access_key: str,
        expires_in: int = 3600,
        client: BaseClient | None = None,
    ):
        """Initialize presigner.

        Args:
            bucket: Target bucket
            endpoint_url: S3 API endpoint (None for AWS)
            region: Signing region ("auto" for R2)
            access_key_id: Access key with write permission on the bucket
            secret_access_key: Matching secret
            expires_in: URL lifetime in seconds
            client: Pre-built S3 client (used by tests)
        """
        self._bucket = bucket
        self._expires_in = expires_in
        self._client = client or Session().client(
            "s3",
            region_name=region,
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            config=Config(signature_version="s3v4"),
        )

    def presign_put(self, key: str, content_type: str) -> str:
        try:
            url = self._client.generate_presigned_url(
                "put_object",
                Params={
                    "Bucket": self._bucket,
                    "Key": key,
                    "ContentType": content_type,
                },
                ExpiresIn=self._expires_in,
                HttpMethod="PUT",
            )
        except (ClientError, BotoCoreError) as exc:
            logger.exception(f"Failed to presign upload for {key}")
            raise PresignError(f"Failed to generate upload URL: {exc}") from exc

        logger.debug(f"Presigned PUT for {key} (expires in {self._expires_in}s)")
        return url


# Mock implementation for testing
class InMemoryPresigner(ObjectPresigner):
    """Presigner returning fake URLs on a local host."""

    def __init__(self, base_url: str = "https://upload.mock.test") -> None:
        self.base_url = base_url.rstrip("/")
        self.issued: list[tuple[str, str]] = []
        self.error: str | None = None

    def presign_put(self, key: str, content_type: str) -> str:
        if self.error:
            raise PresignError(self.error)
        self.issued.append((key, content_type))
        return f"{self.base_url}/{key}?X-Amz-Expires=3600&X-Amz-SignedHeaders=content-type%3Bhost"
