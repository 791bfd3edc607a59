"""
PDF Report Renderer for ProofIQ

Renders the one-page ROI report using ReportLab:
1. Rasterize the SVG template (text stripped) to a PNG at the target width
2. Place the PNG as a full-page background on a page of the same pixel size
3. Draw the computed ROI values over the value cards
4. Attach a clickable link over the "Book a Demo" button
"""

import logging
from io import BytesIO
from pathlib import Path
from typing import Optional, Union

from reportlab.lib.colors import HexColor
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from constants import (
    DEFAULT_REPORT_WIDTH,
    DEMO_BOOKING_URL,
    REPORT_COLORS,
    REPORT_TEMPLATE_PATH,
    REPORT_VALUE_FONT,
    REPORT_VALUE_FONT_SIZE,
)
from report_layout import DEFAULT_LAYOUT, PageTransform, ReportLayout
from roi_calculator import CalculatorInputs, ROIResult, calculate_roi, format_currency
from svg_rasterizer import (
    RasterImage,
    ReportRenderError,
    SvgTemplate,
    TemplateError,
    load_template,
    rasterize,
)

logger = logging.getLogger(__name__)


class ReportCompositor:
    """Compose the report PDF on top of a rasterized template"""

    def __init__(self, layout: ReportLayout = DEFAULT_LAYOUT):
        self.layout = layout

    def compose(
        self,
        raster: RasterImage,
        roi_result: Optional[ROIResult] = None,
        link_url: Optional[str] = DEMO_BOOKING_URL,
    ) -> bytes:
        """
        Build the single-page PDF.

        Args:
            raster: Template raster; the page takes its exact pixel size
            roi_result: Values to print on the cards, or None for a bare template
            link_url: Target of the call-to-action link, or None for no link

        Returns:
            PDF document bytes
        """
        if raster is None:
            raise ReportRenderError("Cannot compose report without a rasterized template")

        page_width, page_height = raster.width, raster.height
        transform = PageTransform.for_page(page_width, page_height, self.layout.authoring_width)

        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=(page_width, page_height))

        c.drawImage(ImageReader(BytesIO(raster.png)), 0, 0, width=page_width, height=page_height,
                    mask='auto')

        if roi_result is not None:
            self._draw_values(c, transform, roi_result)

        if link_url is not None:
            self._attach_link(c, transform, link_url)

        c.showPage()
        c.save()
        return buffer.getvalue()

    def _draw_values(self, c: canvas.Canvas, transform: PageTransform, roi_result: ROIResult):
        """Tint each value card and print its currency figure"""
        values = roi_result.to_dict()
        font_size = transform.length(REPORT_VALUE_FONT_SIZE)

        for field_name, region in self.layout.value_regions.items():
            x, y, width, height = transform.rect(region)
            c.setFillColor(HexColor(REPORT_COLORS['card_tint']))
            c.rect(x, y, width, height, fill=1, stroke=0)

            text_x, text_y = transform.text_origin(region)
            c.setFillColor(HexColor(REPORT_COLORS['value_text']))
            c.setFont(REPORT_VALUE_FONT, font_size)
            c.drawString(text_x, text_y, format_currency(values[field_name]))

    def _attach_link(self, c: canvas.Canvas, transform: PageTransform, link_url: str):
        """Borderless URI annotation over the CTA; the button itself is in the raster"""
        c.linkURL(link_url, transform.bounds(self.layout.cta_region), relative=0, thickness=0)


def render_report(
    template: Union[SvgTemplate, str, bytes, None] = None,
    target_width: Optional[int] = DEFAULT_REPORT_WIDTH,
    calculator_inputs: Optional[CalculatorInputs] = None,
    link_url: Optional[str] = DEMO_BOOKING_URL,
    layout: ReportLayout = DEFAULT_LAYOUT,
) -> bytes:
    """
    Render the ROI report: calculate -> rasterize -> compose.

    Args:
        template: Parsed template or SVG markup (default: bundled report.svg)
        target_width: Page width in pixels; None renders at the template's native size
        calculator_inputs: Lead's calculator values; None renders without figures
        link_url: Call-to-action target; None omits the link
        layout: Overlay regions matching the template

    Returns:
        Complete PDF bytes

    Raises:
        TemplateError: If the template is missing or corrupt
        ReportRenderError: If any rendering stage fails
    """
    if template is None:
        template = load_template(REPORT_TEMPLATE_PATH)

    roi_result = calculate_roi(calculator_inputs) if calculator_inputs is not None else None

    try:
        raster = rasterize(template, target_width)
        pdf_bytes = ReportCompositor(layout).compose(raster, roi_result, link_url)
    except (ReportRenderError, ValueError):
        raise
    except Exception as e:
        logger.exception("Report rendering failed")
        raise ReportRenderError(f"Failed to render ROI report: {e}") from e

    logger.info(
        f"Rendered ROI report {raster.width}x{raster.height}px "
        f"({len(pdf_bytes):,} bytes, values={'yes' if roi_result else 'no'})"
    )
    return pdf_bytes


def generate_roi_report(calculator_inputs: Optional[CalculatorInputs] = None,
                        width: int = DEFAULT_REPORT_WIDTH) -> BytesIO:
    """Convenience wrapper returning the bundled report as a BytesIO"""
    return BytesIO(render_report(target_width=width, calculator_inputs=calculator_inputs))


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Render a ProofIQ ROI report PDF")
    parser.add_argument("--template", type=Path, default=REPORT_TEMPLATE_PATH,
                        help="SVG template path")
    parser.add_argument("--width", type=int, default=DEFAULT_REPORT_WIDTH,
                        help="Page width in pixels (0 = native template width)")
    parser.add_argument("--output", type=Path, default=Path("roi_report.pdf"))
    parser.add_argument("--enrollments", type=float)
    parser.add_argument("--review-seconds", type=float)
    parser.add_argument("--orders", type=float)
    parser.add_argument("--penalty-cost", type=float)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s')

    inputs = CalculatorInputs.from_dict({
        'annual_lifeline_enrollments': args.enrollments,
        'average_review_time_seconds': args.review_seconds,
        'annual_order_volume': args.orders,
        'average_non_compliance_cost': args.penalty_cost,
    })
    if inputs is None:
        print("Calculator values incomplete - rendering bare template")

    try:
        pdf = render_report(
            template=load_template(args.template),
            target_width=args.width or None,
            calculator_inputs=inputs,
        )
    except TemplateError as e:
        print(f"✗ Template error: {e}")
        raise SystemExit(1)

    args.output.write_bytes(pdf)
    print(f"✓ Wrote {args.output} ({len(pdf):,} bytes)")
