"""Application configuration."""

from typing import Literal

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BlueskySettings(BaseModel):
    """AT Protocol network configuration."""

    # Entryway used for login; repository calls move to the PDS from the DID document
    service_url: str = "https://bsky.social"

    # Deadline for every XRPC call, in seconds
    timeout: float = 10.0


class UploadSettings(BaseModel):
    """Client-side upload configuration (broker grant + binary PUT)."""

    # Upload broker endpoint (POST / returns a presigned write URL)
    broker_url: str = "http://localhost:8787"

    # Deadline for the grant request
    grant_timeout: float = 15.0

    # Binary upload deadline is max(floor, size / min_throughput)
    upload_timeout_floor: float = 30.0
    min_throughput: int = 256 * 1024  # bytes per second

    @field_validator("broker_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class StorageSettings(BaseModel):
    """Object storage configuration (S3-compatible bucket behind the broker)."""

    # Public read base, e.g. https://pub-xxxx.r2.dev
    public_bucket_url: str = "https://images.example.com"

    # Presigning credentials, only needed by the broker process
    bucket: str | None = None
    endpoint_url: str | None = None
    region: str = "auto"
    access_key_id: str | None = None
    secret_access_key: str | None = None

    # Lifetime of a presigned upload URL
    url_expiry_seconds: int = 3600

    @field_validator("public_bucket_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class FeedSettings(BaseModel):
    """Photo feed configuration."""

    page_size: int = 50

    # Size of the synthetic batch shown when the repository is unreachable
    placeholder_batch_size: int = 12


class ObservabilitySettings(BaseModel):
    """Observability configuration for Logfire."""

    # Logfire API token (optional - if not set, logs only go to console)
    # Can be set via OBSERVABILITY__LOGFIRE_TOKEN env var
    logfire_token: str | None = None

    # If None, sends when a token is present, otherwise console-only
    send_to_logfire: bool | None = None


class Settings(BaseSettings):
    """Application settings.

    Set environment variables to override, nested values use ``__``:

        UPLOAD__BROKER_URL=https://upload-broker.example.workers.dev
        STORAGE__PUBLIC_BUCKET_URL=https://pub-1234.r2.dev
        STORAGE__BUCKET=photos
        STORAGE__ENDPOINT_URL=https://<account>.r2.cloudflarestorage.com
        BLUESKY__SERVICE_URL=https://bsky.social
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",  # Allows UPLOAD__BROKER_URL syntax
    )

    environment: Literal["test", "development", "staging", "production"] = "development"
    debug: bool = False

    # Broker HTTP server binding
    host: str = "0.0.0.0"
    port: int = 8787

    bluesky: BlueskySettings = BlueskySettings()
    upload: UploadSettings = UploadSettings()
    storage: StorageSettings = StorageSettings()
    feed: FeedSettings = FeedSettings()
    observability: ObservabilitySettings = ObservabilitySettings()
