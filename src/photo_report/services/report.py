"""Report-level operations combining ingestion, state and layout."""

import dataclasses
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from photo_report.config import (
    MAX_COMMENT_LENGTH,
    MAX_LOCATION_LENGTH,
    MAX_PERSON_NAME_LENGTH,
    MAX_SITE_NAME_LENGTH,
    MAX_STATE_FILE_SIZE,
)
from photo_report.domain.layout import Page
from photo_report.domain.photos import InputBlob, PhotoRecord
from photo_report.domain.state import AppState
from photo_report.domain.state_file import sanitize_text
from photo_report.services.cache import MemoryCache
from photo_report.services.ingestion import IngestionPipeline, IngestionResult
from photo_report.services.layout import LayoutEngine
from photo_report.services.state_file import (
    default_file_name,
    read_state_file,
    safe_file_name,
    write_state_file,
)
from photo_report.services.state_store import StateStore

_NAME_LIMITS = {
    "site_name": MAX_SITE_NAME_LENGTH,
    "person_name": MAX_PERSON_NAME_LENGTH,
}

_logger = logging.getLogger(__name__)


@dataclass
class ReportService:
    """Entry point used by the presentation layer."""

    store: StateStore
    pipeline: IngestionPipeline
    cache: MemoryCache
    layout_engine: LayoutEngine
    max_state_file_size: int = MAX_STATE_FILE_SIZE

    async def add_files(self, blobs: Sequence[InputBlob]) -> IngestionResult:
        """Ingest files and log a summary of the outcome."""
        result = await self.pipeline.ingest(blobs)
        if result.processed_count:
            _logger.info("Added %s photos", result.processed_count)
        if result.error_count:
            _logger.warning("%s files could not be added", result.error_count)
        warning = self.cache.memory_warning()
        if warning:
            _logger.warning(warning)
        return result

    def update_settings(self, **changes: object) -> AppState:
        """Apply report settings, sanitizing the free-text names."""
        for name, limit in _NAME_LIMITS.items():
            if name in changes:
                changes[name] = sanitize_text(changes[name], limit)
        return self.store.update(changes)

    def edit_photo(
        self,
        photo_id: int,
        location: str | None = None,
        comment: str | None = None,
    ) -> PhotoRecord | None:
        """Update a photo's annotations; returns None if the photo is gone."""
        changes: dict[str, object] = {}
        if location is not None:
            changes["location"] = sanitize_text(location, MAX_LOCATION_LENGTH)
        if comment is not None:
            changes["comment"] = sanitize_text(comment, MAX_COMMENT_LENGTH)
        if not changes:
            return self.store.state.find_photo(photo_id)
        return self.store.update_photo(photo_id, **changes)

    def remove_photo(self, photo_id: int) -> bool:
        """Remove a photo and evict its cached assets."""
        removed = self.store.remove_photo(photo_id)
        self.cache.remove(photo_id)
        if removed is None:
            return False
        _logger.info("Removed photo %s", photo_id)
        return True

    def move_photo(self, photo_id: int, new_index: int) -> bool:
        return self.store.move_photo(photo_id, new_index)

    async def undo(self) -> bool:
        """Restore the previous state, reattaching thumbnails it lacks.

        Thumbnails that are neither on the record nor in the cache are
        regenerated in the background.
        """
        if not self.store.undo():
            return False
        self.pipeline.schedule_thumbnails(self.store.state.photos)
        return True

    def pages(self) -> list[Page]:
        """Lay out the current state as printable pages."""
        return self.layout_engine.build_pages(self.store.state)

    def check_printable(self) -> list[str]:
        """Return the problems that block printing; empty when ready."""
        state = self.store.state
        errors = []
        if not state.site_name.strip():
            errors.append("Enter a site name")
        if not state.person_name.strip():
            errors.append("Enter a person name")
        if not state.photos:
            errors.append("Add at least one photo")
        return errors

    def save(self, directory: str | Path, file_name: str | None = None) -> Path:
        """Write the report into directory, named after the site by default.

        The name is reduced to a plain file name, so the file always lands
        directly inside directory.
        """
        state = self.store.state
        name = safe_file_name(file_name) if file_name else default_file_name(state)
        target = Path(directory) / name
        return write_state_file(target, state)

    async def load(self, path: str | Path) -> AppState:
        """Replace the current report with a saved one.

        Thumbnails are regenerated in the background.
        """
        loaded = read_state_file(path, max_size=self.max_state_file_size)
        self.cache.clear()
        changes = {
            item.name: getattr(loaded, item.name) for item in dataclasses.fields(loaded)
        }
        state = self.store.update(changes)
        self.pipeline.schedule_thumbnails(state.photos)
        return state

    async def close(self) -> None:
        """Release image buffers before teardown."""
        await self.pipeline.wait_for_thumbnails()
        released = self.cache.release_all(self.store.state.photos)
        self.store.update({"photos": tuple(released)}, record_history=False)
        self.store.clear_history()
