"""Pagination and grid layout for printed photo reports."""

import datetime
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from photo_report.domain.layout import GridSpec, Page, PageCell, PageHeader, PageStyle
from photo_report.domain.photos import PhotoRecord
from photo_report.domain.state import AppState

_logger = logging.getLogger(__name__)

# (portrait, landscape) grids keyed by photos per page
GRID_LAYOUTS: dict[int, tuple[GridSpec, GridSpec]] = {
    1: (GridSpec(1, 1), GridSpec(1, 1)),
    2: (GridSpec(1, 2), GridSpec(2, 1)),
    3: (GridSpec(1, 3), GridSpec(3, 1)),
    4: (GridSpec(2, 2), GridSpec(2, 2)),
    6: (GridSpec(2, 3), GridSpec(3, 2)),
    8: (GridSpec(2, 4), GridSpec(4, 2)),
}
DEFAULT_GRID_KEY = 4

# Japanese eras, newest first, with their Gregorian start dates
JAPANESE_ERAS: tuple[tuple[datetime.date, str], ...] = (
    (datetime.date(2019, 5, 1), "令和"),
    (datetime.date(1989, 1, 8), "平成"),
    (datetime.date(1926, 12, 25), "昭和"),
    (datetime.date(1912, 7, 30), "大正"),
    (datetime.date(1868, 9, 8), "明治"),
)


class LayoutError(ValueError):
    """Raised for layout input that cannot be paginated or formatted."""


def to_wareki(day: datetime.date) -> str:
    """Format a date in the Japanese era calendar, e.g. 令和6年10月19日."""
    for start, era in JAPANESE_ERAS:
        if day >= start:
            year = day.year - start.year + 1
            year_text = "元" if year == 1 else str(year)
            return f"{era}{year_text}年{day.month}月{day.day}日"
    raise ValueError(f"{day.isoformat()} predates the supported eras")


def to_gregorian(day: datetime.date) -> str:
    return f"{day.year}年{day.month}月{day.day}日"


def to_localized_date(iso_date: str) -> str:
    """Convert YYYY-MM-DD to a long-form era date; empty input yields ''."""
    if not iso_date:
        return ""
    try:
        day = datetime.date.fromisoformat(iso_date)
    except ValueError as exc:
        raise LayoutError(f"Invalid date: {iso_date!r}") from exc
    try:
        return to_wareki(day)
    except ValueError:
        _logger.warning("Era formatting failed for %s, using Gregorian", iso_date)
        return to_gregorian(day)


@dataclass
class LayoutEngine:
    """Splits photos into printable pages with per-page grid geometry."""

    def paginate(
        self, photos: Sequence[PhotoRecord], per_page: int
    ) -> list[list[PhotoRecord]]:
        """Chunk photos into consecutive pages; the last may be shorter."""
        if per_page <= 0:
            raise LayoutError(f"photos per page must be positive, got {per_page}")
        return [
            list(photos[start : start + per_page])
            for start in range(0, len(photos), per_page)
        ]

    def grid_for(self, per_page: int, orientation: str) -> GridSpec:
        """Look up the grid; unknown counts use the four-photo grid."""
        portrait, landscape = GRID_LAYOUTS.get(
            per_page, GRID_LAYOUTS[DEFAULT_GRID_KEY]
        )
        return landscape if orientation == "landscape" else portrait

    def build_pages(self, state: AppState) -> list[Page]:
        """Compute page descriptors for the presentation layer."""
        header = PageHeader(
            site_name=state.site_name,
            person_name=state.person_name,
            localized_date=to_localized_date(state.date),
        )
        style = PageStyle(
            orientation=state.orientation,
            font_family=state.font_family,
            font_size=state.font_size,
            font_weight=state.font_weight,
            image_display_mode=state.image_display_mode,
        )
        grid = self.grid_for(state.photos_per_page, state.orientation)
        return [
            Page(
                number=number,
                header=header,
                grid=grid,
                style=style,
                cells=tuple(
                    PageCell(
                        location=photo.location,
                        comment=photo.comment,
                        image_asset=photo.original_asset,
                    )
                    for photo in chunk
                ),
            )
            for number, chunk in enumerate(
                self.paginate(state.photos, state.photos_per_page), start=1
            )
        ]
