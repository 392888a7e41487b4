"""Shared schemas for tabular rows and merge inputs."""

# Module responsibilities:
# - Provide the immutable Row model produced by the row reader.
# - Define lightweight data schemas that make validation explicit.

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Tuple

UNMAPPED = -1

FieldMapping = Dict[str, int]


@dataclass(frozen=True)
class Header:
    """Header label of one data-source column."""

    index: int
    label: str


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and value == ""


def display_text(value: Any) -> str:
    """Coerce a cell value into the string written into the PDF."""

    if _is_blank(value):
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class Row:
    """One data row, addressed by 0-based column index.

    Every column of the sheet's range has a value; empty cells hold ``""``.
    """

    values: Tuple[Any, ...]

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.values)

    def get(self, index: int) -> Any:
        """Return the raw value at ``index``, or ``""`` when out of range."""

        if not self.in_range(index):
            return ""
        return self.values[index]

    def in_range(self, index: int) -> bool:
        return 0 <= index < len(self.values)

    def text(self, index: int) -> str:
        """Return the display string at ``index``; never ``"None"`` or ``"nan"``."""

        return display_text(self.get(index))
