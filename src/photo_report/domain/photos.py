"""Domain models for ingested photos and their inputs."""

import base64
import binascii
import itertools
import mimetypes
import time
from dataclasses import dataclass
from pathlib import Path

_DATA_URL_PREFIX = "data:image/"

_photo_ids = itertools.count(time.time_ns() // 1000)


def new_photo_id() -> int:
    """Return a process-unique photo id."""
    return next(_photo_ids)


@dataclass(frozen=True)
class InputBlob:
    """Candidate input file selected by the user."""

    name: str
    media_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    def head(self, length: int = 12) -> bytes:
        """Return the first bytes of the payload."""
        return self.data[:length]

    @classmethod
    def from_path(
        cls, path: str | Path, media_type: str | None = None
    ) -> "InputBlob":
        """Read a file from disk, guessing its media type from the extension."""
        file_path = Path(path)
        guessed, _ = mimetypes.guess_type(file_path.name)
        return cls(
            name=file_path.name,
            media_type=media_type or guessed or "application/octet-stream",
            data=file_path.read_bytes(),
        )


@dataclass(frozen=True)
class ImageAsset:
    """Encoded image buffer with its media type."""

    media_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    def to_data_url(self) -> str:
        """Encode the asset as a base64 data URL."""
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.media_type};base64,{encoded}"

    @classmethod
    def from_data_url(cls, url: str) -> "ImageAsset":
        """Decode a base64 image data URL.

        Raises ValueError when the text is not an embedded image payload.
        """
        if not url.startswith(_DATA_URL_PREFIX):
            raise ValueError("Not an image data URL")
        header, sep, payload = url.partition(",")
        if not sep or not header.endswith(";base64"):
            raise ValueError("Image data URL must be base64 encoded")
        media_type = header[len("data:") : -len(";base64")]
        try:
            data = base64.b64decode(payload, validate=True)
        except binascii.Error as exc:
            raise ValueError("Invalid base64 payload") from exc
        if not data:
            raise ValueError("Empty image payload")
        return cls(media_type=media_type, data=data)


@dataclass(frozen=True)
class PhotoRecord:
    """One ingested photo with its encoded assets and annotations."""

    id: int
    original_asset: ImageAsset | None
    thumbnail_asset: ImageAsset | None = None
    location: str = ""
    comment: str = ""
