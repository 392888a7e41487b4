"""Filesystem helpers for merge outputs."""

# Module responsibilities:
# - Derive per-row output names for split merges.
# - Create parent folders on demand before files are flushed.

from __future__ import annotations

from pathlib import Path


def split_output_path(output: Path, row_number: int) -> Path:
    """Return the file name used for one row of a split merge.

    ``a/b.pdf`` with row 3 becomes ``a/b-3.pdf``. Only the last suffix is
    treated as the extension, so ``a/report.v2.pdf`` becomes ``a/report.v2-3.pdf``.

    Args:
        output: Output path the caller asked for.
        row_number: 1-based row number.

    Returns:
        Path for that row's single-page document.
    """

    if row_number < 1:
        raise ValueError("row_number is 1-based")
    return output.with_name(f"{output.stem}-{row_number}{output.suffix}")


def ensure_parent(path: Path) -> Path:
    """Create the parent directory of ``path`` and return ``path``."""

    path.parent.mkdir(parents=True, exist_ok=True)
    return path
