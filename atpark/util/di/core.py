"""Settings providers (never mocked; tests configure through the environment)."""

from dishka import Scope, provide

from atpark.config import FeedSettings, Settings, StorageSettings
from atpark.util.di.base import ProviderBase


class ProdConfigProvider(ProviderBase):
    """Settings read once per container, plus the groups other providers need."""

    scope = Scope.APP

    @provide
    def provide_settings(self) -> Settings:
        return Settings()

    @provide
    def provide_storage_settings(self, settings: Settings) -> StorageSettings:
        """Bucket and presigning settings, shared by the broker and its routes."""
        return settings.storage

    @provide
    def provide_feed_settings(self, settings: Settings) -> FeedSettings:
        return settings.feed
