"""Tests for container wiring."""

import asyncio

from photo_report.config import Settings
from photo_report.containers import build_container


def test_build_container_creates_services(settings: Settings) -> None:
    container = build_container(settings)

    assert container.report_service is not None
    assert container.pipeline.store is container.store
    assert container.report_service.cache is container.cache
    asyncio.run(container.close_resources())


def test_build_container_applies_settings() -> None:
    settings = Settings(
        max_file_count=5,
        max_concurrent_uploads=2,
        max_cache_size=7,
        thumbnail_size=32,
        history_limit=3,
        max_file_size=1024,
    )

    container = build_container(settings)

    assert container.pipeline.max_file_count == 5
    assert container.pipeline.max_concurrent == 2
    assert container.cache.max_size == 7
    assert container.codec.thumbnail_size == 32
    assert container.store.max_file_count == 5
    assert container.validator.max_file_size == 1024
    for size in range(6, 12):
        container.store.set("font_size", size)
    assert container.store.history_size == 3
