"""Print layout descriptors consumed by the presentation layer."""

from dataclasses import dataclass

from photo_report.domain.photos import ImageAsset


@dataclass(frozen=True)
class GridSpec:
    """Column/row arrangement of photos on one printed page."""

    columns: int
    rows: int

    @property
    def capacity(self) -> int:
        return self.columns * self.rows


@dataclass(frozen=True)
class PageHeader:
    """Header printed at the top of every page."""

    site_name: str
    person_name: str
    localized_date: str


@dataclass(frozen=True)
class PageCell:
    """One photo slot on a printed page."""

    location: str
    comment: str
    image_asset: ImageAsset | None


@dataclass(frozen=True)
class PageStyle:
    """Typography and image settings shared by every page."""

    orientation: str
    font_family: str
    font_size: int
    font_weight: str
    image_display_mode: str


@dataclass(frozen=True)
class Page:
    """Printable page with its header, grid and photo cells."""

    number: int
    header: PageHeader
    grid: GridSpec
    style: PageStyle
    cells: tuple[PageCell, ...]
