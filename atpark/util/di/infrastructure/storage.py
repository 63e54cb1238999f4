"""Object storage infrastructure providers."""

from dishka import Scope, provide

from atpark.adapter.storage.broker import HttpxUploadBroker
from atpark.adapter.storage.object_store import HttpxObjectStorage
from atpark.adapter.storage.presign import ObjectPresigner, S3Presigner
from atpark.config import Settings, StorageSettings
from atpark.domain.service import ObjectStorage, UploadBroker
from atpark.util.di.base import ProviderBase
from atpark.util.error import ConfigurationError


class StorageProvider(ProviderBase):
    """Storage component base."""

    __mock_component__ = "storage"


class ProdStorageProvider(StorageProvider):
    """Production storage provider (httpx clients, boto3 presigner)."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_upload_broker(self, settings: Settings) -> UploadBroker:
        """Provide client for the upload broker."""
        return HttpxUploadBroker(
            broker_url=settings.upload.broker_url,
            timeout=settings.upload.grant_timeout,
        )

    @provide(scope=Scope.APP)
    def get_object_storage(self, settings: Settings) -> ObjectStorage:
        """Provide binary uploader."""
        return HttpxObjectStorage(
            timeout_floor=settings.upload.upload_timeout_floor,
            min_throughput=settings.upload.min_throughput,
        )

    @provide(scope=Scope.APP)
    def get_presigner(self, storage: StorageSettings) -> ObjectPresigner:
        """Provide S3 presigner (broker process only).

        Raises:
            ConfigurationError: If bucket or credentials are not configured
        """
        missing = [
            name
            for name in ("bucket", "access_key_id", "secret_access_key")
            if not getattr(storage, name)
        ]
        if missing:
            raise ConfigurationError(
                "Missing storage configuration: "
                + ", ".join(f"STORAGE__{name.upper()}" for name in missing)
            )

        return S3Presigner(
            bucket=storage.bucket,
            endpoint_url=storage.endpoint_url,
            region=storage.region,
            access_key_id=storage.access_key_id,
            secret_access_key=storage.secret_access_key,
            expires_in=storage.url_expiry_seconds,
        )
