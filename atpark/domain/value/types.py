"""Domain value objects for AT Park.

Value objects are immutable and defined by their values, not identity.
"""

from enum import Enum

from atpark.domain.value.common import ValueObject

# Record kind holding every photo in a user's repository
PHOTO_COLLECTION = "app.dogpark.photo"


class Visibility(str, Enum):
    """Who a photo is meant for."""

    PUBLIC = "public"
    PRIVATE = "private"
    SHARED = "shared"


class AtUri(ValueObject):
    """Record locator of the form ``at://<repo>/<collection>/<rkey>``.

    Assigned by the repository on create; the only way to address a record.
    """

    repo: str
    collection: str
    rkey: str

    @classmethod
    def parse(cls, uri: str) -> "AtUri":
        """Parse an at:// URI.

        Raises:
            ValueError: If the URI does not have three path components
        """
        if not uri.startswith("at://"):
            raise ValueError(f"Not an at:// URI: {uri}")
        parts = uri[len("at://") :].split("/")
        if len(parts) != 3 or not all(parts):
            raise ValueError(f"Expected at://<repo>/<collection>/<rkey>, got: {uri}")
        repo, collection, rkey = parts
        return cls(repo=repo, collection=collection, rkey=rkey)

    def __str__(self) -> str:
        return f"at://{self.repo}/{self.collection}/{self.rkey}"
