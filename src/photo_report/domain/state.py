"""Application state snapshot for a photo report."""

import datetime
from dataclasses import dataclass, field, fields
from typing import Literal

from photo_report.domain.photos import PhotoRecord

Orientation = Literal["portrait", "landscape"]
FontFamily = Literal["sans-serif", "serif"]
FontWeight = Literal["normal", "bold"]
ImageQuality = Literal["high", "highest"]
ImageDisplayMode = Literal["trim", "fit"]

PHOTOS_PER_PAGE_CHOICES = (1, 2, 3, 4, 6, 8)
ORIENTATIONS = ("portrait", "landscape")
FONT_FAMILIES = ("sans-serif", "serif")
FONT_WEIGHTS = ("normal", "bold")
IMAGE_QUALITIES = ("high", "highest")
IMAGE_DISPLAY_MODES = ("trim", "fit")

MIN_FONT_SIZE = 6
MAX_FONT_SIZE = 20

_CHOICES: dict[str, tuple[object, ...]] = {
    "photos_per_page": PHOTOS_PER_PAGE_CHOICES,
    "orientation": ORIENTATIONS,
    "font_family": FONT_FAMILIES,
    "font_weight": FONT_WEIGHTS,
    "image_quality": IMAGE_QUALITIES,
    "image_display_mode": IMAGE_DISPLAY_MODES,
}


def clamp_font_size(value: int) -> int:
    """Clamp a font size into the printable range."""
    return min(max(int(value), MIN_FONT_SIZE), MAX_FONT_SIZE)


def is_iso_date(value: str) -> bool:
    """Return True for a YYYY-MM-DD calendar date."""
    if not isinstance(value, str):
        return False
    try:
        datetime.date.fromisoformat(value)
    except ValueError:
        return False
    return len(value) == len("YYYY-MM-DD")


@dataclass(frozen=True)
class AppState:
    """Immutable snapshot describing the whole report being built."""

    site_name: str = ""
    person_name: str = ""
    date: str = ""
    photos_per_page: int = 4
    orientation: Orientation = "portrait"
    font_family: FontFamily = "sans-serif"
    font_size: int = 10
    font_weight: FontWeight = "normal"
    image_quality: ImageQuality = "high"
    image_display_mode: ImageDisplayMode = "trim"
    photos: tuple[PhotoRecord, ...] = field(default_factory=tuple)
    zoom_level: float = 1.0

    def __post_init__(self) -> None:
        # bool is an int subclass, so True would pass as photos_per_page=1
        for name in ("photos_per_page", "font_size"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
        zoom = self.zoom_level
        if isinstance(zoom, bool) or not isinstance(zoom, int | float):
            raise ValueError(f"zoom_level must be a number, got {zoom!r}")
        for name, choices in _CHOICES.items():
            value = getattr(self, name)
            if value not in choices:
                raise ValueError(f"{name} must be one of {choices}, got {value!r}")
        if self.date and not is_iso_date(self.date):
            raise ValueError(f"date must be YYYY-MM-DD or empty, got {self.date!r}")
        if not zoom > 0:
            raise ValueError("zoom_level must be positive")
        object.__setattr__(self, "font_size", clamp_font_size(self.font_size))
        object.__setattr__(self, "photos", tuple(self.photos))

    def photo_ids(self) -> list[int]:
        return [photo.id for photo in self.photos]

    def find_photo(self, photo_id: int) -> PhotoRecord | None:
        for photo in self.photos:
            if photo.id == photo_id:
                return photo
        return None


STATE_FIELDS = frozenset(item.name for item in fields(AppState))
