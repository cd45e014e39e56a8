"""Page geometry for the ReportLab canvas."""

from dataclasses import dataclass
from typing import Tuple

from reportlab.lib.pagesizes import A4, LETTER, landscape, portrait


PAGE_SIZES = {
    "A4": A4,  # 595.27 x 841.89 points
    "LETTER": LETTER,  # 612 x 792 points
}
DEFAULT_MARGIN = 36  # 0.5 inch margins


@dataclass
class Margins:
    """Page margins in points."""
    left: float = DEFAULT_MARGIN
    top: float = DEFAULT_MARGIN
    right: float = DEFAULT_MARGIN
    bottom: float = DEFAULT_MARGIN

    @classmethod
    def uniform(cls, margin: float) -> "Margins":
        return cls(margin, margin, margin, margin)


@dataclass
class PageLayout:
    """Defines the layout parameters for a page.

    Cursor positions handed to the table are measured from the top edge of
    the page downward; ReportLab measures from the bottom edge upward.
    """
    page_width: float = A4[0]
    page_height: float = A4[1]
    margins: Margins = None
    orientation: str = "portrait"  # "portrait" or "landscape"

    def __post_init__(self):
        if self.margins is None:
            self.margins = Margins()

    @classmethod
    def from_name(cls, name: str = "A4", orientation: str = "portrait", margins: Margins = None) -> "PageLayout":
        """Create a layout from a page size name and an orientation."""
        size = PAGE_SIZES.get(str(name).upper())
        if size is None:
            raise ValueError(f"Unknown page size {name!r}, expected one of {', '.join(PAGE_SIZES)}")
        if orientation == "landscape":
            size = landscape(size)
        elif orientation == "portrait":
            size = portrait(size)
        else:
            raise ValueError(f"Unknown orientation {orientation!r}")
        return cls(
            page_width=size[0],
            page_height=size[1],
            margins=margins or Margins(),
            orientation=orientation,
        )

    @classmethod
    def portrait(cls, name: str = "A4") -> "PageLayout":
        """Create a portrait layout."""
        return cls.from_name(name, "portrait")

    @classmethod
    def landscape(cls, name: str = "A4") -> "PageLayout":
        """Create a landscape layout."""
        return cls.from_name(name, "landscape")

    @property
    def pagesize(self) -> Tuple[float, float]:
        return (self.page_width, self.page_height)

    @property
    def content_width(self) -> float:
        return self.page_width - self.margins.left - self.margins.right

    @property
    def content_height(self) -> float:
        return self.page_height - self.margins.top - self.margins.bottom

    def to_pdf_y(self, y: float) -> float:
        """Convert a top-down y into ReportLab's bottom-up coordinates."""
        return self.page_height - y
