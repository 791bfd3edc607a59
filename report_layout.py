"""
Report layout for the ProofIQ ROI report template

Names every rectangle of templates/report.svg that gets dynamic content at
render time. Coordinates are in the SVG's authoring space (776 wide, origin
top-left, y down); PageTransform maps them onto the PDF page (origin
bottom-left, y up) using a single scale factor per render.

A replacement template must publish the same four regions and its
authoring width.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from constants import TEMPLATE_AUTHORING_WIDTH


@dataclass(frozen=True)
class OverlayRegion:
    """A named rectangle in template coordinates, with an optional text anchor."""
    name: str
    x: float
    y: float
    width: float
    height: float
    text_x: Optional[float] = None  # Left edge of the value text
    text_y: Optional[float] = None  # Baseline of the value text

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def right(self) -> float:
        return self.x + self.width


@dataclass(frozen=True)
class ReportLayout:
    """Overlay regions for one template.

    value_regions are keyed by the ROIResult field they display.
    """
    authoring_width: float
    value_regions: Dict[str, OverlayRegion]
    cta_region: OverlayRegion


@dataclass(frozen=True)
class PageTransform:
    """Template -> page coordinate mapping for one render."""
    scale: float
    page_height: float

    @classmethod
    def for_page(cls, page_width: int, page_height: int,
                 authoring_width: float = TEMPLATE_AUTHORING_WIDTH) -> "PageTransform":
        return cls(scale=page_width / authoring_width, page_height=page_height)

    def length(self, value: float) -> float:
        return value * self.scale

    def rect(self, region: OverlayRegion) -> Tuple[float, float, float, float]:
        """(x, y, width, height) on the page, y measured from the bottom edge."""
        width = region.width * self.scale
        height = region.height * self.scale
        x = region.x * self.scale
        y = self.page_height - (region.y * self.scale) - height
        return x, y, width, height

    def bounds(self, region: OverlayRegion) -> Tuple[float, float, float, float]:
        """(x1, y1, x2, y2) on the page, as used for link annotations."""
        x, y, width, height = self.rect(region)
        return x, y, x + width, y + height

    def text_origin(self, region: OverlayRegion) -> Tuple[float, float]:
        """Left baseline point of the region's value text."""
        text_x = region.text_x if region.text_x is not None else region.x
        text_y = region.text_y if region.text_y is not None else region.bottom
        return text_x * self.scale, self.page_height - (text_y * self.scale)


# Geometry of templates/report.svg
DEFAULT_LAYOUT = ReportLayout(
    authoring_width=TEMPLATE_AUTHORING_WIDTH,
    value_regions={
        'efficiency_gains': OverlayRegion(
            name='efficiency_gains',
            x=55, y=335, width=210, height=50,
            text_x=65, text_y=370,
        ),
        'compliance_accuracy': OverlayRegion(
            name='compliance_accuracy',
            x=285, y=335, width=210, height=50,
            text_x=295, text_y=370,
        ),
        'annual_value_save': OverlayRegion(
            name='annual_value_save',
            x=540, y=400, width=150, height=45,
            text_x=560, text_y=440,
        ),
    },
    cta_region=OverlayRegion(
        name='book_demo',
        x=55, y=560, width=240, height=52,
    ),
)
