"""
SVG Rasterizer for the ProofIQ ROI report

Converts the report's SVG template to a PNG at a target pixel width using
CairoSVG. Text elements are stripped first: the compositor draws all text
with embedded PDF fonts, so nothing font-dependent is baked into the raster.
"""

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from io import BytesIO
from pathlib import Path
from typing import Optional, Tuple, Union

import cairosvg
from lxml import etree
from PIL import Image

logger = logging.getLogger(__name__)

# Elements that carry rendered text; tspan/textPath only render inside <text>
TEXT_ELEMENTS = ('text',)

_LENGTH_RE = re.compile(r'^\s*([0-9]*\.?[0-9]+)\s*(px)?\s*$')


class ReportRenderError(Exception):
    """Raised when a report cannot be rendered."""


class TemplateError(ReportRenderError):
    """Raised when the report template is missing or corrupt.

    The template ships with the app, so this is a deployment defect rather
    than something a retry can fix.
    """


@dataclass(frozen=True)
class SvgTemplate:
    """Parsed, text-free SVG template. Read-only and safe to share."""
    svg_bytes: bytes
    native_width: float
    native_height: float

    def height_for_width(self, width: int) -> int:
        """Pixel height that keeps the template's aspect ratio at `width`."""
        return round(self.native_height * width / self.native_width)


@dataclass(frozen=True)
class RasterImage:
    """PNG bitmap with its exact pixel dimensions."""
    png: bytes
    width: int
    height: int


def _parse_length(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    match = _LENGTH_RE.match(value)
    if not match:
        return None
    return float(match.group(1))


def _native_size(root: etree._Element) -> Tuple[float, float]:
    """Template size from width/height attributes, falling back to viewBox."""
    width = _parse_length(root.get('width'))
    height = _parse_length(root.get('height'))

    if width is None or height is None:
        view_box = root.get('viewBox')
        if view_box:
            parts = view_box.replace(',', ' ').split()
            if len(parts) == 4:
                try:
                    width = width or float(parts[2])
                    height = height or float(parts[3])
                except ValueError:
                    raise TemplateError(f"Invalid viewBox on report template: {view_box!r}")

    if not width or not height:
        raise TemplateError("Report template has no usable width/height or viewBox")
    return width, height


def strip_text_layer(root: etree._Element) -> int:
    """Remove text elements from an SVG tree in place. Returns how many were removed."""
    removed = 0
    for tag in TEXT_ELEMENTS:
        for element in list(root.iter(f'{{*}}{tag}')):
            parent = element.getparent()
            if parent is None:
                continue
            parent.remove(element)
            removed += 1
    return removed


def parse_template(svg_source: Union[str, bytes]) -> SvgTemplate:
    """
    Parse SVG markup into a text-free template.

    Args:
        svg_source: SVG document as str or bytes

    Returns:
        SvgTemplate with text elements removed and native size resolved

    Raises:
        TemplateError: If the markup is not a usable SVG document
    """
    if isinstance(svg_source, str):
        svg_source = svg_source.encode('utf-8')
    if not svg_source or not svg_source.strip():
        raise TemplateError("Report template is empty")

    parser = etree.XMLParser(resolve_entities=False, no_network=True, remove_comments=True)
    try:
        root = etree.fromstring(svg_source, parser=parser)
    except etree.XMLSyntaxError as e:
        raise TemplateError(f"Report template is not valid XML: {e}") from e

    if etree.QName(root).localname != 'svg':
        raise TemplateError(f"Report template root is <{etree.QName(root).localname}>, expected <svg>")

    width, height = _native_size(root)
    removed = strip_text_layer(root)
    logger.debug(f"Parsed report template {width}x{height}, stripped {removed} text elements")

    return SvgTemplate(
        svg_bytes=etree.tostring(root),
        native_width=width,
        native_height=height,
    )


@lru_cache(maxsize=8)
def load_template(path: Union[str, Path]) -> SvgTemplate:
    """Load and parse a template file once per process."""
    path = Path(path)
    try:
        svg_source = path.read_bytes()
    except OSError as e:
        raise TemplateError(f"Report template not found or unreadable: {path}") from e
    logger.info(f"Loaded report template {path.name}")
    return parse_template(svg_source)


def rasterize(template: Union[SvgTemplate, str, bytes],
              target_width: Optional[int] = None) -> RasterImage:
    """
    Rasterize the template to PNG.

    Args:
        template: Parsed template, or raw SVG markup
        target_width: Output width in pixels; native width when omitted

    Returns:
        RasterImage whose height is round(native_height * width / native_width)

    Raises:
        TemplateError: If the template is malformed
        ReportRenderError: If rasterization fails
        ValueError: If target_width is not positive
    """
    if not isinstance(template, SvgTemplate):
        template = parse_template(template)

    if target_width is None:
        width = round(template.native_width)
    else:
        if target_width <= 0:
            raise ValueError(f"target_width must be positive, got {target_width}")
        width = int(target_width)
    height = template.height_for_width(width)

    try:
        png = cairosvg.svg2png(
            bytestring=template.svg_bytes,
            output_width=width,
            output_height=height,
        )
    except Exception as e:
        raise ReportRenderError(f"Failed to rasterize report template: {e}") from e

    with Image.open(BytesIO(png)) as image:
        actual_width, actual_height = image.size
    if (actual_width, actual_height) != (width, height):
        raise ReportRenderError(
            f"Rasterizer produced {actual_width}x{actual_height}, expected {width}x{height}"
        )

    return RasterImage(png=png, width=width, height=height)
