"""Image upload values."""

import mimetypes
from pathlib import Path

from atpark.domain.model.common import DomainModel


class ImageFile(DomainModel):
    """A local image selected for upload."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, path: str | Path, content_type: str | None = None) -> "ImageFile":
        """Read an image from disk, guessing its content type from the name."""
        path = Path(path)
        guessed, _ = mimetypes.guess_type(path.name)
        return cls(
            filename=path.name,
            content_type=content_type or guessed or "application/octet-stream",
            data=path.read_bytes(),
        )


class UploadGrant(DomainModel):
    """Single-use write credential issued by the upload broker.

    ``content_type`` is the type the grant was requested for; the binary
    upload must send exactly this type.
    """

    upload_url: str
    public_url: str
    key: str
    content_type: str


class UploadedImage(DomainModel):
    """Stable reference to an uploaded image."""

    url: str
    key: str
