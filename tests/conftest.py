"""Shared test fixtures."""

import io
import threading
import time
from dataclasses import dataclass, field

import pytest
from PIL import Image

from photo_report.config import Settings
from photo_report.containers import AppContainer, build_container
from photo_report.domain.photos import ImageAsset, InputBlob, PhotoRecord
from photo_report.services.cache import MemoryCache
from photo_report.services.codec import ImageCodec
from photo_report.services.ingestion import IngestionPipeline
from photo_report.services.state_store import StateStore
from photo_report.services.validation import FileValidator

_MEDIA_TYPES = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "GIF": "image/gif",
    "WEBP": "image/webp",
}


def make_image_bytes(
    fmt: str = "JPEG",
    size: tuple[int, int] = (40, 30),
    color: tuple[int, int, int] = (200, 80, 40),
) -> bytes:
    """Encode a solid-color image in memory."""
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


def make_blob(
    name: str = "photo.jpg",
    fmt: str = "JPEG",
    size: tuple[int, int] = (40, 30),
    media_type: str | None = None,
) -> InputBlob:
    return InputBlob(
        name=name,
        media_type=media_type or _MEDIA_TYPES[fmt],
        data=make_image_bytes(fmt, size),
    )


def make_record(photo_id: int, location: str = "", comment: str = "") -> PhotoRecord:
    return PhotoRecord(
        id=photo_id,
        original_asset=ImageAsset("image/jpeg", make_image_bytes()),
        location=location,
        comment=comment,
    )


def decoded_size(asset: ImageAsset) -> tuple[int, int]:
    with Image.open(io.BytesIO(asset.data)) as image:
        return image.size


@dataclass
class RecordingSubscriber:
    """Subscriber that records every transition it sees."""

    calls: list[tuple[object, object]] = field(default_factory=list)

    def __call__(self, new_state, old_state) -> None:
        self.calls.append((new_state, old_state))


@dataclass
class TrackingCodec(ImageCodec):
    """Codec that records decode concurrency and can slow down given inputs."""

    delays: dict[bytes, float] = field(default_factory=dict)
    default_delay: float = 0.01
    events: list[tuple[str, bytes]] = field(default_factory=list)
    active: int = 0
    max_active: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def decode(self, data: bytes) -> Image.Image:
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
            self.events.append(("start", data))
        try:
            time.sleep(self.delays.get(data, self.default_delay))
            return super().decode(data)
        finally:
            with self._lock:
                self.active -= 1
                self.events.append(("end", data))

    def thumbnail(self, asset: ImageAsset, size: int | None = None) -> ImageAsset:
        # background thumbnails must not count towards ingestion concurrency
        return ImageCodec(thumbnail_size=self.thumbnail_size).thumbnail(asset, size)


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def store() -> StateStore:
    return StateStore()


@pytest.fixture
def cache() -> MemoryCache:
    return MemoryCache()


@pytest.fixture
def pipeline(store: StateStore, cache: MemoryCache) -> IngestionPipeline:
    return IngestionPipeline(
        store=store,
        validator=FileValidator(),
        codec=ImageCodec(),
        cache=cache,
    )


@pytest.fixture
def container(settings: Settings) -> AppContainer:
    return build_container(settings)
