"""Observable application state with bounded undo history."""

import dataclasses
import logging
from collections import deque
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field

from photo_report.config import HISTORY_LIMIT, MAX_FILE_COUNT
from photo_report.domain.photos import PhotoRecord
from photo_report.domain.state import STATE_FIELDS, AppState

Subscriber = Callable[[AppState, AppState], None]

_PHOTO_FIELDS = frozenset(item.name for item in dataclasses.fields(PhotoRecord))

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StateValidation:
    """Advisory validation result; never blocks a state change."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


class StateStore:
    """Owns the single AppState and notifies subscribers of transitions.

    Snapshots are frozen, so subscribers and history entries can never observe
    a state that is still being changed.
    """

    def __init__(
        self,
        initial: AppState | None = None,
        history_limit: int = HISTORY_LIMIT,
        max_file_count: int = MAX_FILE_COUNT,
    ) -> None:
        self._state = initial or AppState()
        self._history: deque[AppState] = deque(maxlen=history_limit)
        self._subscribers: list[Subscriber] = []
        self.max_file_count = max_file_count

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def history_size(self) -> int:
        return len(self._history)

    def get(self, key: str) -> object:
        """Return a single state field."""
        if key not in STATE_FIELDS:
            raise KeyError(key)
        return getattr(self._state, key)

    def update(
        self, changes: Mapping[str, object], record_history: bool = True
    ) -> AppState:
        """Merge changes into a new snapshot and notify subscribers.

        Raises ValueError for unknown fields or values outside their allowed set.
        """
        unknown = set(changes) - STATE_FIELDS
        if unknown:
            raise ValueError(f"Unknown state fields: {sorted(unknown)}")
        old_state = self._state
        new_state = dataclasses.replace(old_state, **changes)
        if "photos" in changes:
            _ensure_unique_ids(new_state.photos)
        self._state = new_state
        if record_history:
            self._history.append(old_state)
        self._notify(new_state, old_state)
        return new_state

    def set(self, key: str, value: object, record_history: bool = True) -> AppState:
        return self.update({key: value}, record_history=record_history)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback and return a function that unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            self.unsubscribe(callback)

        return unsubscribe

    def unsubscribe(self, callback: Subscriber) -> None:
        self._subscribers = [item for item in self._subscribers if item != callback]

    def undo(self) -> bool:
        """Restore the most recent history entry; False when there is none."""
        if not self._history:
            return False
        current = self._state
        self._state = self._history.pop()
        self._notify(self._state, current)
        return True

    def reset(self) -> None:
        """Return to the default state and forget history."""
        old_state = self._state
        self._state = AppState()
        self._history.clear()
        self._notify(self._state, old_state)

    def clear_history(self) -> None:
        self._history.clear()

    def validate(self) -> StateValidation:
        """Report problems with the current state without changing it."""
        result = StateValidation()
        if not self._state.site_name.strip():
            result.warnings.append("Site name is empty")
        if not self._state.person_name.strip():
            result.warnings.append("Person name is empty")
        if not self._state.photos:
            result.warnings.append("No photos have been added")
        if len(self._state.photos) > self.max_file_count:
            result.errors.append(
                f"Too many photos (limit {self.max_file_count} photos)"
            )
        return result

    def append_photos(
        self, records: Iterable[PhotoRecord], record_history: bool = True
    ) -> AppState:
        """Append records after the existing photos, keeping their order."""
        photos = (*self._state.photos, *records)
        return self.update({"photos": photos}, record_history=record_history)

    def update_photo(
        self, photo_id: int, record_history: bool = True, **changes: object
    ) -> PhotoRecord | None:
        """Replace fields of one photo; returns None if the photo is gone."""
        unknown = set(changes) - (_PHOTO_FIELDS - {"id"})
        if unknown:
            raise ValueError(f"Unknown photo fields: {sorted(unknown)}")
        updated: PhotoRecord | None = None
        photos = []
        for photo in self._state.photos:
            if photo.id == photo_id:
                updated = dataclasses.replace(photo, **changes)
                photos.append(updated)
            else:
                photos.append(photo)
        if updated is not None:
            self.update({"photos": tuple(photos)}, record_history=record_history)
        return updated

    def remove_photo(self, photo_id: int) -> PhotoRecord | None:
        """Remove one photo and return it; None if it was not present."""
        removed = self._state.find_photo(photo_id)
        if removed is None:
            return None
        photos = tuple(photo for photo in self._state.photos if photo.id != photo_id)
        self.update({"photos": photos})
        return removed

    def move_photo(self, photo_id: int, new_index: int) -> bool:
        """Move one photo to a new position in print order."""
        photos = list(self._state.photos)
        for index, photo in enumerate(photos):
            if photo.id == photo_id:
                break
        else:
            return False
        target = min(max(new_index, 0), len(photos) - 1)
        if target == index:
            return False
        photos.insert(target, photos.pop(index))
        self.update({"photos": tuple(photos)})
        return True

    def _notify(self, new_state: AppState, old_state: AppState) -> None:
        for callback in list(self._subscribers):
            try:
                callback(new_state, old_state)
            except Exception:
                _logger.exception("State subscriber %r failed", callback)


def _ensure_unique_ids(photos: Iterable[PhotoRecord]) -> None:
    seen: set[int] = set()
    for photo in photos:
        if photo.id in seen:
            raise ValueError(f"Duplicate photo id: {photo.id}")
        seen.add(photo.id)
