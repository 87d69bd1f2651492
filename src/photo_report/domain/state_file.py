"""Pydantic models for the persisted state file."""

import html
import math

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from photo_report.config import (
    MAX_COMMENT_LENGTH,
    MAX_FILE_COUNT,
    MAX_LOCATION_LENGTH,
    MAX_PERSON_NAME_LENGTH,
    MAX_SITE_NAME_LENGTH,
)
from photo_report.domain.photos import ImageAsset
from photo_report.domain.state import (
    FONT_FAMILIES,
    FONT_WEIGHTS,
    IMAGE_DISPLAY_MODES,
    IMAGE_QUALITIES,
    ORIENTATIONS,
    PHOTOS_PER_PAGE_CHOICES,
    AppState,
    clamp_font_size,
    is_iso_date,
)

_DEFAULTS = AppState()

_CHOICES: dict[str, tuple[object, ...]] = {
    "photos_per_page": PHOTOS_PER_PAGE_CHOICES,
    "orientation": ORIENTATIONS,
    "font_family": FONT_FAMILIES,
    "font_weight": FONT_WEIGHTS,
    "image_quality": IMAGE_QUALITIES,
    "image_display_mode": IMAGE_DISPLAY_MODES,
}

_TEXT_LIMITS = {
    "site_name": MAX_SITE_NAME_LENGTH,
    "person_name": MAX_PERSON_NAME_LENGTH,
    "location": MAX_LOCATION_LENGTH,
    "comment": MAX_COMMENT_LENGTH,
}


def sanitize_text(value: object, max_length: int | None = None) -> str:
    """HTML-escape user text, truncating the visible text to max_length.

    Already escaped input is unescaped first, so applying this twice yields
    the same string.
    """
    if not isinstance(value, str):
        return ""
    text = html.unescape(value)
    if max_length is not None:
        text = text[:max_length]
    return html.escape(text, quote=False)


def _to_number(value: object) -> float | None:
    """Coerce JSON numbers and numeric strings; zero and NaN count as missing."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number) or number == 0:
        return None
    return number


def is_embedded_image(url: str) -> bool:
    """Return True when the text decodes as a base64 image data URL."""
    try:
        ImageAsset.from_data_url(url)
    except ValueError:
        return False
    return True


class _StateFileModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )


class PersistedPhoto(_StateFileModel):
    """Photo entry of the persisted state file."""

    id: int | None = None
    url: str = ""
    location: str = ""
    comment: str = ""

    @field_validator("location", "comment", mode="before")
    @classmethod
    def _sanitize_text(cls, value: object, info: ValidationInfo) -> str:
        return sanitize_text(value, _TEXT_LIMITS[info.field_name])

    @field_validator("id", mode="before")
    @classmethod
    def _integer_id(cls, value: object) -> int | None:
        number = _to_number(value)
        if number is None or not number.is_integer():
            return None
        return int(number)

    @field_validator("url", mode="before")
    @classmethod
    def _image_url(cls, value: object) -> str:
        if isinstance(value, str) and value.startswith("data:image/"):
            return value
        return ""


class PersistedState(_StateFileModel):
    """Top-level object of the persisted state file."""

    site_name: str = ""
    person_name: str = ""
    date: str = ""
    photos_per_page: int = _DEFAULTS.photos_per_page
    orientation: str = _DEFAULTS.orientation
    font_family: str = _DEFAULTS.font_family
    font_size: int = _DEFAULTS.font_size
    font_weight: str = _DEFAULTS.font_weight
    image_quality: str = _DEFAULTS.image_quality
    image_display_mode: str = _DEFAULTS.image_display_mode
    photos: list[PersistedPhoto] = []
    zoom_level: float = _DEFAULTS.zoom_level

    @field_validator("site_name", "person_name", mode="before")
    @classmethod
    def _sanitize_text(cls, value: object, info: ValidationInfo) -> str:
        return sanitize_text(value, _TEXT_LIMITS[info.field_name])

    @field_validator("date", mode="before")
    @classmethod
    def _calendar_date(cls, value: object) -> str:
        if isinstance(value, str) and is_iso_date(value):
            return value
        return ""

    @field_validator(
        "photos_per_page",
        "orientation",
        "font_family",
        "font_weight",
        "image_quality",
        "image_display_mode",
        mode="before",
    )
    @classmethod
    def _known_choice(cls, value: object, info: ValidationInfo) -> object:
        if info.field_name == "photos_per_page":
            number = _to_number(value)
            value = int(number) if number is not None and number.is_integer() else None
        if value in _CHOICES[info.field_name]:
            return value
        return getattr(_DEFAULTS, info.field_name)

    @field_validator("font_size", mode="before")
    @classmethod
    def _clamped_font_size(cls, value: object) -> int:
        number = _to_number(value)
        if number is None:
            return _DEFAULTS.font_size
        return clamp_font_size(int(number))

    @field_validator("zoom_level", mode="before")
    @classmethod
    def _positive_zoom(cls, value: object) -> float:
        number = _to_number(value)
        if number is None or number < 0:
            return _DEFAULTS.zoom_level
        return number

    @field_validator("photos", mode="before")
    @classmethod
    def _bounded_photos(cls, value: object) -> list[object]:
        if not isinstance(value, list):
            return []
        return [
            item
            for item in value[:MAX_FILE_COUNT]
            if isinstance(item, dict | PersistedPhoto)
        ]

    @field_validator("photos", mode="after")
    @classmethod
    def _embedded_photos(cls, value: list[PersistedPhoto]) -> list[PersistedPhoto]:
        return [photo for photo in value if is_embedded_image(photo.url)]
