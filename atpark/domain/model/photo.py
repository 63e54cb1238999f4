"""Photo records.

A photo is a metadata record in the author's repository pointing at an image
hosted in object storage. Records are append-only: changing tags means
publishing a new record, never updating an existing one.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import Field

from atpark.domain.model.common import DomainModel
from atpark.domain.value import PHOTO_COLLECTION, AtUri, Visibility


class PhotoDraft(DomainModel):
    """Fields supplied by the client when publishing a photo.

    ``uri`` and ``author_did`` are deliberately absent: the repository
    assigns them.
    """

    image: str
    thumbnail: str | None = None
    tags: list[str] = Field(default_factory=list)
    location: str | None = None
    visibility: Visibility = Visibility.PUBLIC
    description: str | None = None
    created_at: str | None = None

    def to_record(self) -> dict[str, Any]:
        """Build the repository payload for this draft.

        Absent optional fields are omitted; ``createdAt`` defaults to now (UTC).
        """
        record: dict[str, Any] = {
            "$type": PHOTO_COLLECTION,
            "image": self.image,
            "thumbnail": self.thumbnail,
            "tags": list(self.tags),
            "location": self.location,
            "visibility": self.visibility.value,
            "description": self.description,
            "createdAt": self.created_at
            or datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        }
        return {key: value for key, value in record.items() if value is not None}


class PhotoRecord(DomainModel):
    """A published photo as stored in the repository."""

    uri: str
    author_did: str
    image: str
    thumbnail: str | None = None
    tags: list[str] = Field(default_factory=list)
    location: str | None = None
    visibility: Visibility = Visibility.PUBLIC
    description: str | None = None
    created_at: str

    @property
    def rkey(self) -> str:
        """Record key within the author's repository (used as the cursor)."""
        return self.uri.rstrip("/").rsplit("/", 1)[-1]

    @classmethod
    def from_record(cls, uri: str, value: dict[str, Any]) -> "PhotoRecord":
        """Map a repository record into a PhotoRecord.

        The author is taken from the URI's repo component, never from the
        stored value.

        Raises:
            ValueError: If the URI or the value is malformed
        """
        at_uri = AtUri.parse(uri)
        image = value.get("image")
        if not isinstance(image, str):
            raise ValueError(f"Record {uri} has no image URL")

        return cls(
            uri=uri,
            author_did=at_uri.repo,
            image=image,
            thumbnail=value.get("thumbnail"),
            tags=value.get("tags") or [],
            location=value.get("location"),
            visibility=value.get("visibility") or Visibility.PUBLIC,
            description=value.get("description"),
            created_at=value.get("createdAt") or "",
        )

    def to_draft(self, **changes: Any) -> PhotoDraft:
        """Copy this record's client-supplied fields into a new draft."""
        fields = self.model_dump(exclude={"uri", "author_did"})
        fields.update(changes)
        return PhotoDraft(**fields)


def normalize_tags(tags: list[str]) -> list[str]:
    """Trim tags, dropping empty ones and duplicates (first occurrence wins)."""
    seen: set[str] = set()
    normalized = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.add(tag)
            normalized.append(tag)
    return normalized
