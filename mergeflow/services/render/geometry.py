"""Canvas-pixel to PDF-point coordinate translation."""

from __future__ import annotations

from .fonts import FontHandle
from .models import Alignment, Bounds, Placement, TextElement

# Constant shift applied to every x coordinate to match the preview rendering.
X_NUDGE = 1.0
DEFAULT_FONT_SIZE = 16.0
DEFAULT_BOX = 100.0

_ALIGNMENTS: dict[str, Alignment] = {"left": "left", "center": "center", "right": "right"}


def resolve_alignment(value: str | None) -> Alignment:
    return _ALIGNMENTS.get(value or "", "left")


def baseline_offset(font: FontHandle, size: float) -> float:
    """Shift from the box bottom to the baseline: the descender depth at ``size``."""

    return font.height_at_size(size) - font.height_at_size(size, descender=False)


def translate(
    element: TextElement,
    page_width: float,
    page_height: float,
    canvas_width: float | None,
    font: FontHandle,
) -> Placement | None:
    """Map a canvas text box onto the page.

    The canvas anchors boxes at their top-left corner with y growing down;
    the page uses points from the bottom-left corner and draws text from its
    baseline. Returns ``None`` when no canvas width is known.
    """

    if not canvas_width:
        return None

    ratio = page_width / canvas_width
    size = (element.font_size or DEFAULT_FONT_SIZE) * ratio
    width = (element.width or DEFAULT_BOX) * ratio
    height = (element.height or DEFAULT_BOX) * ratio

    x = (element.left or 0.0) * ratio + X_NUDGE
    y = page_height - (element.top or 0.0) * ratio - (element.height or 0.0) * ratio
    y += baseline_offset(font, size)

    return Placement(
        bounds=Bounds(x=x, y=y, width=width, height=height),
        font_size=size,
        alignment=resolve_alignment(element.text_align),
        ratio=ratio,
    )
