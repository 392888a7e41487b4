"""Draw canvas-authored text overlays onto a template page."""

from __future__ import annotations

import logging
from io import BytesIO

from PyPDF2 import PageObject, PdfReader
from reportlab.pdfgen import canvas

from mergeflow_io.pdf_io import page_size
from mergeflow_io.schema import Row

from .fonts import FontCache
from .geometry import translate
from .layout import layout_multiline_text, parse_hex_color, substitute
from .models import OverlayDocument, TextElement

LOGGER = logging.getLogger(__name__)


def _draw_text(
    pdf: canvas.Canvas,
    element: TextElement,
    row: Row,
    page_width: float,
    page_height: float,
    canvas_width: float,
    fonts: FontCache,
) -> int:
    font = fonts.get(element.font_family)
    placement = translate(element, page_width, page_height, canvas_width, font)
    if placement is None:
        return 0

    lines = layout_multiline_text(
        substitute(row, element.index),
        font,
        placement.font_size,
        placement.bounds,
        placement.alignment,
    )
    if not lines:
        return 0

    pdf.setFont(font.name, placement.font_size)
    pdf.setFillColorRGB(*parse_hex_color(element.fill))
    for line in lines:
        pdf.drawString(line.x, line.y, line.text)
    return len(lines)


def render_overlay(
    row: Row,
    overlay: OverlayDocument,
    page_width: float,
    page_height: float,
    canvas_width: float | None,
    fonts: FontCache,
) -> bytes | None:
    """Render the overlay for one row as a single-page PDF.

    Returns ``None`` when there is nothing to draw.
    """

    if not canvas_width or not overlay.objects:
        return None

    buffer = BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=(page_width, page_height))
    drawn = 0
    for element in overlay.objects:
        if not isinstance(element, TextElement):
            LOGGER.debug("Skipping unsupported overlay element type %s", element.type)
            continue
        drawn += _draw_text(pdf, element, row, page_width, page_height, canvas_width, fonts)

    if not drawn:
        return None
    pdf.showPage()
    pdf.save()
    return buffer.getvalue()


def draw_overlay(
    page: PageObject,
    row: Row,
    overlay: OverlayDocument | None,
    canvas_width: float | None,
    fonts: FontCache,
) -> bool:
    """Stamp the row's overlay text onto ``page``; returns whether anything was drawn."""

    if overlay is None:
        return False
    width, height = page_size(page)
    data = render_overlay(row, overlay, width, height, canvas_width, fonts)
    if data is None:
        return False
    page.merge_page(PdfReader(BytesIO(data)).pages[0])
    return True
