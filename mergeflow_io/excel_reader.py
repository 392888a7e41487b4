"""Tabular input helpers."""

# Module responsibilities:
# - Provide a thin wrapper around pandas.read_excel/read_csv returning Row models.
# - Read only the rows a merge needs instead of the whole sheet.
# - Emit structured logs for traceability and future auditing.

from __future__ import annotations

import zipfile
from pathlib import Path
from typing import List

import pandas as pd
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from mergeflow.core.errors import DataSourceError

from .schema import Header, Row
from .utils.log import get_logger

logger = get_logger("excel_reader")

HEADER_OFFSET = 1
CSV_SUFFIXES = {".csv"}

_PARSE_ERRORS = (ValueError, zipfile.BadZipFile, InvalidFileException, KeyError)


def _read_frame(path: Path, nrows: int | None) -> pd.DataFrame:
    """Load the first sheet without treating any row as a header."""

    if not path.exists():
        raise FileNotFoundError(f"Data source not found: {path}")

    try:
        if path.suffix.lower() in CSV_SUFFIXES:
            frame = pd.read_csv(
                path,
                header=None,
                nrows=nrows,
                dtype=str,
                keep_default_na=False,
            )
        else:
            frame = pd.read_excel(path, sheet_name=0, header=None, nrows=nrows, dtype=object)
    except pd.errors.EmptyDataError:
        return pd.DataFrame()
    except _PARSE_ERRORS as exc:
        logger.error("Failed to read data source", extra={"path": str(path), "error": str(exc)})
        raise DataSourceError(f"Unable to read data source {path}: {exc}") from exc

    # Rectangularize: cells missing from the sheet become empty strings.
    return frame.astype(object).where(frame.notna(), "")


def read_rows(path: Path, row_limit: int) -> List[Row]:
    """Read up to ``row_limit`` data rows from the first sheet.

    Args:
        path: Workbook (``.xlsx``/``.xls``/``.ods``) or ``.csv`` file.
        row_limit: Maximum number of data rows, header excluded.

    Returns:
        Rows in sheet order, header skipped.

    Raises:
        FileNotFoundError: When the data source does not exist.
        DataSourceError: When the workbook cannot be parsed.
        ValueError: When ``row_limit`` is not positive.
    """

    if row_limit <= 0:
        raise ValueError("row_limit must be positive")

    frame = _read_frame(path, nrows=row_limit + HEADER_OFFSET)
    body = frame.iloc[HEADER_OFFSET:]
    rows = [Row(values=tuple(record)) for record in body.itertuples(index=False, name=None)]

    logger.info(
        "Data rows loaded",
        extra={"path": str(path), "rows": len(rows), "columns": frame.shape[1]},
    )
    return rows


def read_headers(path: Path) -> List[Header]:
    """Return the header labels of the first sheet with their column index."""

    frame = _read_frame(path, nrows=HEADER_OFFSET)
    if frame.empty:
        return []
    labels = frame.iloc[0].tolist()
    return [Header(index=idx, label=str(label)) for idx, label in enumerate(labels)]


def count_rows(path: Path) -> int:
    """Count data rows (header excluded) from the sheet's declared dimension."""

    if not path.exists():
        raise FileNotFoundError(f"Data source not found: {path}")

    if path.suffix.lower() in CSV_SUFFIXES:
        total = len(_read_frame(path, nrows=None).index)
        return max(total - HEADER_OFFSET, 0)

    try:
        wb = load_workbook(path, read_only=True)
    except _PARSE_ERRORS as exc:
        raise DataSourceError(f"Unable to read data source {path}: {exc}") from exc
    try:
        ws = wb.worksheets[0]
        total = ws.max_row or 0
    finally:
        wb.close()
    return max(total - HEADER_OFFSET, 0)
