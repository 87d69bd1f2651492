"""Bounded-concurrency ingestion of selected image files."""

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from functools import partial

from photo_report.config import MAX_CONCURRENT_UPLOADS, MAX_FILE_COUNT
from photo_report.domain.errors import ErrorCode, PhotoAppError, classify_error
from photo_report.domain.photos import InputBlob, PhotoRecord, new_photo_id
from photo_report.services.cache import CachedAsset, MemoryCache
from photo_report.services.codec import QUALITY_PROFILES, ImageCodec, QualityProfile
from photo_report.services.state_store import StateStore
from photo_report.services.validation import FileValidator, Rejection

_logger = logging.getLogger(__name__)


class IngestionStage(StrEnum):
    """Per-file progression through the pipeline."""

    VALIDATING = "validating"
    DECODING = "decoding"
    COMPRESSING = "compressing"
    RECORDED = "recorded"
    REJECTED = "rejected"


@dataclass(frozen=True)
class IngestionResult:
    """Outcome of one ingest call, in input order."""

    accepted: tuple[PhotoRecord, ...] = ()
    rejected: tuple[Rejection, ...] = ()

    @property
    def processed_count(self) -> int:
        return len(self.accepted)

    @property
    def error_count(self) -> int:
        return len(self.rejected)


@dataclass
class IngestionPipeline:
    """Validates, compresses and records photos in fixed-size groups."""

    store: StateStore
    validator: FileValidator
    codec: ImageCodec
    cache: MemoryCache
    max_file_count: int = MAX_FILE_COUNT
    max_concurrent: int = MAX_CONCURRENT_UPLOADS
    id_factory: Callable[[], int] = new_photo_id
    on_progress: Callable[[int, int], None] | None = None
    _reserved: int = 0
    _thumbnail_tasks: dict[int, asyncio.Task[None]] = field(default_factory=dict)

    async def ingest(self, blobs: Sequence[InputBlob]) -> IngestionResult:
        """Ingest a batch; failures are reported per file, never raised.

        Slots for the whole batch are reserved before the first await, so
        concurrent calls cannot push the photo count past the limit together.
        """
        current_count = len(self.store.state.photos) + self._reserved
        if current_count + len(blobs) > self.max_file_count:
            _logger.warning(
                "Rejected batch of %s files: %s present or pending, limit %s",
                len(blobs),
                current_count,
                self.max_file_count,
            )
            error = self._too_many_files(current_count, len(blobs))
            return IngestionResult(
                rejected=tuple(Rejection(blob=blob, error=error) for blob in blobs)
            )

        self._reserved += len(blobs)
        try:
            accepted, rejected = await self._ingest_groups(blobs)
        finally:
            self._reserved -= len(blobs)

        _logger.info(
            "Ingested %s of %s files (%s rejected)",
            len(accepted),
            len(blobs),
            len(rejected),
        )
        return IngestionResult(accepted=tuple(accepted), rejected=tuple(rejected))

    async def wait_for_thumbnails(self) -> None:
        """Wait until every scheduled thumbnail has settled."""
        while self._thumbnail_tasks:
            await asyncio.gather(
                *self._thumbnail_tasks.values(), return_exceptions=True
            )

    def schedule_thumbnails(self, records: Sequence[PhotoRecord]) -> None:
        """Give records without a thumbnail one, reusing cached thumbnails."""
        for record in records:
            if record.thumbnail_asset is not None or record.original_asset is None:
                continue
            cached = self.cache.get(record.id)
            if cached is not None and cached.thumbnail is not None:
                self.store.update_photo(
                    record.id, record_history=False, thumbnail_asset=cached.thumbnail
                )
            else:
                self._schedule_thumbnail(record)

    async def _ingest_groups(
        self, blobs: Sequence[InputBlob]
    ) -> tuple[list[PhotoRecord], list[Rejection]]:
        profile = QUALITY_PROFILES[self.store.state.image_quality]
        accepted: list[PhotoRecord] = []
        rejected: list[Rejection] = []
        settled = 0

        def settle(_task: asyncio.Task[PhotoRecord | Rejection]) -> None:
            nonlocal settled
            settled += 1
            self._report_progress(settled, len(blobs))

        for start in range(0, len(blobs), self.max_concurrent):
            group = blobs[start : start + self.max_concurrent]
            tasks = []
            async with asyncio.TaskGroup() as task_group:
                for blob in group:
                    task = task_group.create_task(self._process(blob, profile))
                    task.add_done_callback(settle)
                    tasks.append(task)
            recorded: list[tuple[InputBlob, PhotoRecord]] = []
            for blob, task in zip(group, tasks, strict=True):
                outcome = task.result()
                if isinstance(outcome, Rejection):
                    rejected.append(outcome)
                else:
                    recorded.append((blob, outcome))
            records = self._within_limit(recorded, rejected)
            if records:
                self.store.append_photos(records)
                accepted.extend(records)
                for record in records:
                    self._schedule_thumbnail(record)
        return accepted, rejected

    def _within_limit(
        self,
        recorded: list[tuple[InputBlob, PhotoRecord]],
        rejected: list[Rejection],
    ) -> list[PhotoRecord]:
        # photos can still be added outside the pipeline, e.g. by loading a file
        current_count = len(self.store.state.photos)
        room = max(self.max_file_count - current_count, 0)
        if len(recorded) > room:
            error = self._too_many_files(current_count, len(recorded))
            for blob, _ in recorded[room:]:
                rejected.append(
                    Rejection(blob=blob, error=error, stage=IngestionStage.RECORDED)
                )
            _logger.warning(
                "Dropped %s compressed photos over the limit", len(recorded) - room
            )
        return [record for _, record in recorded[:room]]

    def _too_many_files(self, current: int, requested: int) -> PhotoAppError:
        return PhotoAppError(
            f"Too many files (limit {self.max_file_count})",
            ErrorCode.TOO_MANY_FILES,
            {"current": current, "requested": requested},
        )

    def _report_progress(self, done: int, total: int) -> None:
        if self.on_progress is None:
            return
        try:
            self.on_progress(done, total)
        except Exception:
            _logger.exception("Progress callback %r failed", self.on_progress)

    async def _process(
        self, blob: InputBlob, profile: QualityProfile
    ) -> PhotoRecord | Rejection:
        stage = IngestionStage.VALIDATING
        try:
            self.validator.validate(blob)
            stage = IngestionStage.DECODING
            image = await asyncio.to_thread(self.codec.decode, blob.data)
            stage = IngestionStage.COMPRESSING
            asset = await asyncio.to_thread(self.codec.compress, image, profile)
        except Exception as exc:
            error = classify_error(exc, context=f"{stage} {blob.name}")
            _logger.warning(
                "%s %s while %s: %s (%s)",
                blob.name,
                IngestionStage.REJECTED,
                stage,
                error.code,
                error,
            )
            return Rejection(blob=blob, error=error, stage=stage)
        _logger.debug(
            "%s %s (%s bytes)", blob.name, IngestionStage.RECORDED, asset.size
        )
        return PhotoRecord(id=self._next_id(), original_asset=asset)

    def _next_id(self) -> int:
        existing = set(self.store.state.photo_ids())
        photo_id = self.id_factory()
        while photo_id in existing:
            photo_id = self.id_factory()
        return photo_id

    def _schedule_thumbnail(self, record: PhotoRecord) -> None:
        if record.id in self._thumbnail_tasks:
            return
        task = asyncio.create_task(self._attach_thumbnail(record))
        self._thumbnail_tasks[record.id] = task
        task.add_done_callback(partial(self._forget_thumbnail_task, record.id))

    def _forget_thumbnail_task(self, photo_id: int, task: asyncio.Task[None]) -> None:
        if self._thumbnail_tasks.get(photo_id) is task:
            del self._thumbnail_tasks[photo_id]

    async def _attach_thumbnail(self, record: PhotoRecord) -> None:
        if record.original_asset is None:
            return
        try:
            thumbnail = await asyncio.to_thread(
                self.codec.thumbnail, record.original_asset
            )
        except Exception:
            _logger.exception("Thumbnail generation failed for photo %s", record.id)
            return
        updated = self.store.update_photo(
            record.id, record_history=False, thumbnail_asset=thumbnail
        )
        if updated is None:
            _logger.debug("Photo %s was removed before its thumbnail", record.id)
            return
        self.cache.put(
            record.id,
            CachedAsset(original=updated.original_asset, thumbnail=thumbnail),
        )
