"""Photo sharing (modelled, no backend yet)."""

from pydantic import Field

from atpark.domain.model.common import DomainModel


class Share(DomainModel):
    """Grant of access to a photo for a set of accounts."""

    uri: str
    photo_uri: str
    shared_with: list[str] = Field(default_factory=list)
    expires_at: str | None = None
    created_at: str
