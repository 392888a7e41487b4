"""Font resolution and per-document font caching."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Tuple

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont

from mergeflow.core.errors import FontError

LOGGER = logging.getLogger(__name__)

DEFAULT_FONT = "Helvetica"
TRUETYPE_SUFFIXES = (".ttf",)


@dataclass(frozen=True, slots=True)
class FontHandle:
    """Font registered for drawing, with metrics in 1/1000 em units."""

    name: str
    ascent: float
    descent: float

    def height_at_size(self, size: float, descender: bool = True) -> float:
        """Line height at ``size``; without the descender it is the ascent only."""

        height = self.ascent - self.descent
        if not descender:
            height += self.descent
        return height / 1000.0 * size

    def width_of(self, text: str, size: float) -> float:
        return pdfmetrics.stringWidth(text, self.name, size)


def _find_truetype(name: str, font_dirs: Iterable[Path]) -> Path | None:
    wanted = {f"{name}{suffix}".lower() for suffix in TRUETYPE_SUFFIXES}
    for directory in font_dirs:
        if not directory.is_dir():
            continue
        for candidate in directory.iterdir():
            if candidate.name.lower() in wanted:
                return candidate
    return None


def _embed(name: str, font_dirs: Tuple[Path, ...]) -> FontHandle:
    if name not in pdfmetrics.standardFonts and name not in pdfmetrics.getRegisteredFontNames():
        path = _find_truetype(name, font_dirs)
        if path is None:
            raise FontError(f"Unknown font '{name}': not a standard font and no TrueType file found")
        try:
            pdfmetrics.registerFont(TTFont(name, str(path)))
        except TTFError as exc:
            raise FontError(f"Failed to load font '{name}' from {path}: {exc}") from exc
        LOGGER.debug("Registered TrueType font %s from %s", name, path)

    font = pdfmetrics.getFont(name)
    return FontHandle(name=name, ascent=float(font.face.ascent), descent=float(font.face.descent))


class FontCache:
    """Fonts resolved for a single working document.

    A cache must not outlive the document it serves; the assembler creates a
    new one whenever it builds a new working copy.
    """

    def __init__(self, font_dirs: Iterable[Path] = ()) -> None:
        self._font_dirs = tuple(Path(d) for d in font_dirs)
        self._fonts: Dict[str, FontHandle] = {}
        self.embed_count = 0

    def get(self, font_name: str | None = None) -> FontHandle:
        key = font_name or DEFAULT_FONT
        handle = self._fonts.get(key)
        if handle is None:
            handle = _embed(key, self._font_dirs)
            self._fonts[key] = handle
            self.embed_count += 1
        return handle

    def __contains__(self, font_name: object) -> bool:
        return font_name in self._fonts

    def __len__(self) -> int:
        return len(self._fonts)
