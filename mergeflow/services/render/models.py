"""Data models used by the render service."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Annotated, Any, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, ValidationError

from mergeflow.core.errors import ConfigError

TEXT_TYPES = frozenset({"text", "textbox", "i-text"})

Alignment = Literal["left", "center", "right"]


class TextElement(BaseModel):
    """Positioned text box authored on the preview canvas.

    Geometry and font size are in canvas pixels; ``index`` selects the data
    column whose value is drawn.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: str = "text"
    index: int = -1
    left: float = 0.0
    top: float = 0.0
    width: float = 100.0
    height: float = 100.0
    font_family: str | None = Field(default=None, alias="fontFamily")
    font_size: float = Field(default=16.0, alias="fontSize")
    fill: Any = "#000000"
    text_align: str = Field(default="left", alias="textAlign")
    line_height: float = Field(default=1.16, alias="lineHeight")


class PlaceholderElement(BaseModel):
    """Canvas object that is carried but not drawn (QR codes, shapes)."""

    model_config = ConfigDict(extra="allow")

    type: str


def _element_kind(value: object) -> str:
    kind = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    return "text" if kind in TEXT_TYPES else "placeholder"


OverlayElement = Annotated[
    Union[
        Annotated[TextElement, Tag("text")],
        Annotated[PlaceholderElement, Tag("placeholder")],
    ],
    Discriminator(_element_kind),
]


class OverlayDocument(BaseModel):
    """Ordered overlay elements for one template page."""

    model_config = ConfigDict(extra="ignore")

    objects: List[OverlayElement] = Field(default_factory=list)

    @property
    def text_elements(self) -> List[TextElement]:
        return [obj for obj in self.objects if isinstance(obj, TextElement)]

    @classmethod
    def from_json(cls, path: Path) -> "OverlayDocument":
        """Load the canvas dump written by the overlay editor."""

        if not path.exists():
            raise ConfigError(f"Overlay file not found: {path}")
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
            return cls.model_validate(payload)
        except (json.JSONDecodeError, ValidationError) as exc:
            raise ConfigError(f"Invalid overlay file {path}: {exc}") from exc


@dataclass(frozen=True, slots=True)
class Bounds:
    """Axis-aligned box in PDF points, origin bottom-left."""

    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True, slots=True)
class Placement:
    """PDF-space geometry for one text element."""

    bounds: Bounds
    font_size: float
    alignment: Alignment
    ratio: float


@dataclass(frozen=True, slots=True)
class LineLayout:
    """One wrapped line ready to draw at its baseline origin."""

    text: str
    x: float
    y: float
    width: float


@dataclass(slots=True)
class MergeResult:
    """Outcome of a merge run."""

    file_count: int
    row_count: int
    output_paths: List[Path] = field(default_factory=list)


__all__ = [
    "Alignment",
    "Bounds",
    "LineLayout",
    "MergeResult",
    "OverlayDocument",
    "OverlayElement",
    "Placement",
    "PlaceholderElement",
    "TextElement",
]
