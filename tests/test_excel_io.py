"""Unit tests for the tabular row reader."""

# Module responsibilities:
# - Validate header skipping, row limits and rectangularized rows.
# - Assert defensive behaviour for missing or corrupt data sources.

from __future__ import annotations

from pathlib import Path

import pytest
from openpyxl import Workbook

from mergeflow.core.errors import DataSourceError
from mergeflow_io.excel_reader import count_rows, read_headers, read_rows


def test_read_rows_skips_header_and_respects_limit(workbook_factory) -> None:
    path = workbook_factory(["Name", "Age"], [["Alice", 30], ["Bob", 41], ["Carol", 25]])

    rows = read_rows(path, row_limit=2)

    assert len(rows) == 2
    assert rows[0].get(0) == "Alice"
    assert rows[0].text(1) == "30"
    assert rows[1].text(0) == "Bob"


def test_read_rows_fills_missing_cells_with_empty_strings(tmp_path: Path) -> None:
    wb = Workbook()
    ws = wb.active
    ws.append(["A", "B", "C"])
    ws.append(["x", None, "z"])
    ws.append([None, "only-b", None])
    path = tmp_path / "sparse.xlsx"
    wb.save(path)

    rows = read_rows(path, row_limit=10)

    assert [len(row) for row in rows] == [3, 3]
    assert rows[0].get(1) == ""
    assert rows[1].get(0) == "" and rows[1].get(2) == ""
    assert rows[1].text(1) == "only-b"


def test_out_of_range_index_yields_empty_text(workbook_factory) -> None:
    rows = read_rows(workbook_factory(["Name"], [["Alice"]]), row_limit=5)

    assert rows[0].text(7) == ""
    assert rows[0].text(-1) == ""
    assert not rows[0].in_range(7)


def test_boolean_and_integral_values_display(workbook_factory) -> None:
    rows = read_rows(workbook_factory(["Flag", "Count"], [[True, 3.0]]), row_limit=1)

    assert rows[0].text(0) == "true"
    assert rows[0].text(1) == "3"


def test_read_rows_from_csv(tmp_path: Path) -> None:
    path = tmp_path / "people.csv"
    path.write_text("Name,City\nAlice,Paris\nBob,\n", encoding="utf-8")

    rows = read_rows(path, row_limit=5)

    assert [row.text(0) for row in rows] == ["Alice", "Bob"]
    assert rows[1].text(1) == ""


def test_read_headers_and_count_rows(workbook_factory) -> None:
    path = workbook_factory(["Name", "Email"], [["Alice", "a@x"], ["Bob", "b@x"], ["Carol", "c@x"]])

    headers = read_headers(path)

    assert [(h.index, h.label) for h in headers] == [(0, "Name"), (1, "Email")]
    assert count_rows(path) == 3


def test_missing_data_source_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        read_rows(tmp_path / "missing.xlsx", row_limit=1)


def test_corrupt_workbook_raises_data_source_error(tmp_path: Path) -> None:
    path = tmp_path / "broken.xlsx"
    path.write_bytes(b"not a workbook")

    with pytest.raises(DataSourceError):
        read_rows(path, row_limit=1)


def test_row_limit_must_be_positive(workbook_factory) -> None:
    path = workbook_factory(["Name"], [["Alice"]])

    with pytest.raises(ValueError):
        read_rows(path, row_limit=0)
