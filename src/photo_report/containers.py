"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from photo_report.app_logging import configure_logging
from photo_report.config import Settings
from photo_report.services.cache import MemoryCache
from photo_report.services.codec import ImageCodec
from photo_report.services.ingestion import IngestionPipeline
from photo_report.services.layout import LayoutEngine
from photo_report.services.report import ReportService
from photo_report.services.state_store import StateStore
from photo_report.services.validation import FileValidator


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    store: StateStore
    validator: FileValidator
    codec: ImageCodec
    cache: MemoryCache
    pipeline: IngestionPipeline
    layout_engine: LayoutEngine
    report_service: ReportService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    configure_logging(resolved_settings.log_level)
    store = StateStore(
        history_limit=resolved_settings.history_limit,
        max_file_count=resolved_settings.max_file_count,
    )
    validator = FileValidator(max_file_size=resolved_settings.max_file_size)
    codec = ImageCodec(thumbnail_size=resolved_settings.thumbnail_size)
    cache = MemoryCache(max_size=resolved_settings.max_cache_size)
    pipeline = IngestionPipeline(
        store=store,
        validator=validator,
        codec=codec,
        cache=cache,
        max_file_count=resolved_settings.max_file_count,
        max_concurrent=resolved_settings.max_concurrent_uploads,
    )
    layout_engine = LayoutEngine()
    report_service = ReportService(
        store=store,
        pipeline=pipeline,
        cache=cache,
        layout_engine=layout_engine,
        max_state_file_size=resolved_settings.max_state_file_size,
    )

    async def close_resources() -> None:
        await report_service.close()

    return AppContainer(
        settings=resolved_settings,
        store=store,
        validator=validator,
        codec=codec,
        cache=cache,
        pipeline=pipeline,
        layout_engine=layout_engine,
        report_service=report_service,
        close_resources=close_resources,
    )
