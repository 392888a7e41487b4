"""Multi-line text layout and value substitution."""

from __future__ import annotations

import re
from typing import Any, List, Tuple

from mergeflow_io.schema import Row

from .fonts import FontHandle
from .models import Alignment, Bounds, LineLayout

LINE_SPACING = 1.2

_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_HEX_COLOR = re.compile(r"^#?([0-9a-f]{3}|[0-9a-f]{6})$", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s")


def substitute(row: Row, index: int) -> str:
    """Text drawn for column ``index``; empty when the row has no such column."""

    return row.text(index)


def parse_hex_color(value: Any) -> Tuple[float, float, float]:
    """Parse ``#rgb``/``#rrggbb`` into 0..1 RGB components; anything else is black."""

    match = _HEX_COLOR.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        return 0.0, 0.0, 0.0
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return tuple(int(digits[i : i + 2], 16) / 255.0 for i in (0, 2, 4))  # type: ignore[return-value]


def _last_whitespace(text: str) -> int:
    for idx in range(len(text) - 1, -1, -1):
        if _WHITESPACE.match(text[idx]):
            return idx
    return 0


def _split_out_line(text: str, max_width: float, font: FontHandle, size: float) -> Tuple[str, float, str | None]:
    """Take the longest whitespace-delimited prefix narrower than ``max_width``."""

    cut = len(text)
    while cut > 0:
        line = text[:cut]
        width = font.width_of(line, size)
        if width < max_width:
            remainder = text[cut:] or None
            return line, width, remainder
        cut = _last_whitespace(line)
    # Nothing fits; keep the whole input on one overflowing line.
    return text, font.width_of(text, size), None


def _line_x(bounds: Bounds, width: float, alignment: Alignment) -> float:
    if alignment == "center":
        return bounds.x + bounds.width / 2 - width / 2
    if alignment == "right":
        return bounds.x + bounds.width - width
    return bounds.x


def layout_multiline_text(
    text: str,
    font: FontHandle,
    size: float,
    bounds: Bounds,
    alignment: Alignment = "left",
) -> List[LineLayout]:
    """Wrap ``text`` into ``bounds`` and compute each line's draw origin.

    Explicit line breaks are kept; long lines wrap at whitespace. The first
    baseline sits one line step below the top of ``bounds``.
    """

    if not text:
        return []

    line_step = font.height_at_size(size) * LINE_SPACING
    y = bounds.y + bounds.height
    lines: List[LineLayout] = []

    for paragraph in _LINE_BREAK.split(text.replace("\t", "    ")):
        pending: str | None = paragraph
        while pending is not None:
            line, width, remainder = _split_out_line(pending, bounds.width, font, size)
            y -= line_step
            lines.append(LineLayout(text=line, x=_line_x(bounds, width, alignment), y=y, width=width))
            pending = remainder.strip() if remainder else None
            if pending == "":
                pending = None
    return lines
