"""Saving and loading report state as JSON."""

import html
import json
import logging
import re
from collections.abc import Callable
from pathlib import Path

from pydantic import ValidationError

from photo_report.config import MAX_STATE_FILE_SIZE
from photo_report.domain.photos import ImageAsset, PhotoRecord, new_photo_id
from photo_report.domain.state import AppState
from photo_report.domain.state_file import PersistedPhoto, PersistedState

DEFAULT_FILE_NAME = "現場データ.json"

_UNSAFE_FILE_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')

_logger = logging.getLogger(__name__)


class StateFileError(ValueError):
    """Raised when a state file cannot be read as a report."""


def to_persisted(state: AppState) -> PersistedState:
    """Build the file model; photos without an original asset are omitted."""
    return PersistedState(
        site_name=state.site_name,
        person_name=state.person_name,
        date=state.date,
        photos_per_page=state.photos_per_page,
        orientation=state.orientation,
        font_family=state.font_family,
        font_size=state.font_size,
        font_weight=state.font_weight,
        image_quality=state.image_quality,
        image_display_mode=state.image_display_mode,
        photos=[
            PersistedPhoto(
                id=photo.id,
                url=photo.original_asset.to_data_url(),
                location=photo.location,
                comment=photo.comment,
            )
            for photo in state.photos
            if photo.original_asset is not None
        ],
        zoom_level=state.zoom_level,
    )


def from_persisted(
    persisted: PersistedState, id_factory: Callable[[], int] = new_photo_id
) -> AppState:
    """Convert the file model into state, assigning ids where missing or reused."""
    photos: list[PhotoRecord] = []
    seen: set[int] = set()
    for entry in persisted.photos:
        photo_id = entry.id
        while photo_id is None or photo_id in seen:
            photo_id = id_factory()
        seen.add(photo_id)
        photos.append(
            PhotoRecord(
                id=photo_id,
                original_asset=ImageAsset.from_data_url(entry.url),
                location=entry.location,
                comment=entry.comment,
            )
        )
    return AppState(
        site_name=persisted.site_name,
        person_name=persisted.person_name,
        date=persisted.date,
        photos_per_page=persisted.photos_per_page,
        orientation=persisted.orientation,
        font_family=persisted.font_family,
        font_size=persisted.font_size,
        font_weight=persisted.font_weight,
        image_quality=persisted.image_quality,
        image_display_mode=persisted.image_display_mode,
        photos=tuple(photos),
        zoom_level=persisted.zoom_level,
    )


def sanitize_state(state: AppState) -> AppState:
    """Apply the load-time sanitization to an in-memory state."""
    return from_persisted(to_persisted(state))


def dump_state(state: AppState) -> str:
    """Serialize state to the JSON file format."""
    return to_persisted(state).model_dump_json(by_alias=True, indent=2)


def load_state(
    content: str | bytes, max_size: int = MAX_STATE_FILE_SIZE
) -> AppState:
    """Parse and sanitize a state file.

    Raises StateFileError for oversized, empty, malformed or non-object input.
    """
    raw_bytes = content.encode("utf-8") if isinstance(content, str) else content
    if len(raw_bytes) > max_size:
        raise StateFileError(f"State file exceeds {max_size} bytes")
    if not raw_bytes.strip():
        raise StateFileError("State file is empty")
    try:
        payload = json.loads(raw_bytes)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise StateFileError("State file is not valid JSON") from exc
    if not isinstance(payload, dict):
        raise StateFileError("State file must contain a JSON object")
    try:
        persisted = PersistedState.model_validate(payload)
    except ValidationError as exc:
        raise StateFileError("State file has an invalid structure") from exc
    return from_persisted(persisted)


def safe_file_name(name: str) -> str:
    """Reduce text to a single .json file name with no directory parts."""
    stem = _UNSAFE_FILE_CHARS.sub("_", html.unescape(name)).strip().lstrip(".")
    stem = stem.removesuffix(".json").strip()
    return f"{stem}.json" if stem else DEFAULT_FILE_NAME


def default_file_name(state: AppState) -> str:
    return safe_file_name(state.site_name)


def write_state_file(path: str | Path, state: AppState) -> Path:
    """Write state as JSON, returning the written path."""
    target = Path(path)
    target.write_text(dump_state(state), encoding="utf-8")
    _logger.info("Saved report state to %s", target)
    return target


def read_state_file(
    path: str | Path, max_size: int = MAX_STATE_FILE_SIZE
) -> AppState:
    """Read a .json state file no larger than max_size bytes."""
    source = Path(path)
    if source.suffix.lower() != ".json":
        raise StateFileError(f"Only .json files can be loaded: {source.name}")
    if source.stat().st_size > max_size:
        raise StateFileError(f"State file exceeds {max_size} bytes")
    state = load_state(source.read_bytes(), max_size=max_size)
    _logger.info("Loaded report state from %s (%s photos)", source, len(state.photos))
    return state
