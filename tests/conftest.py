from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, List, Sequence

import pandas as pd
import pytest
from PyPDF2 import PdfReader
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Keep log files out of the user's home while tests run.
os.environ.setdefault("MERGEFLOW_LOG_DIR", tempfile.mkdtemp(prefix="mergeflow-logs-"))

PAGE_WIDTH, PAGE_HEIGHT = letter


def build_form_pdf(path: Path, *, radio: bool = False, listbox: bool = False, pages: int = 1) -> Path:
    """Template with a text field, a checkbox and a dropdown on page 1."""

    pdf = canvas.Canvas(str(path), pagesize=letter)
    pdf.drawString(72, 740, "Template")
    form = pdf.acroForm
    form.textfield(name="Name", x=72, y=680, width=200, height=20, value="")
    form.checkbox(name="Agree", x=72, y=640, size=14, checked=False)
    form.choice(name="Color", value="Red", options=["Red", "Green", "Blue"], x=72, y=600, width=120, height=20)
    if radio:
        for idx, size in enumerate(("S", "M", "L")):
            form.radio(name="Size", value=size, selected=size == "S", x=72 + idx * 30, y=560, size=14)
    if listbox:
        form.listbox(name="Fruit", value="Apple", options=["Apple", "Pear"], x=72, y=480, width=120, height=60)
    pdf.showPage()
    for extra in range(1, pages):
        pdf.drawString(72, 740, f"Page {extra + 1}")
        pdf.showPage()
    pdf.save()
    return path


def build_plain_pdf(path: Path, pages: int = 1) -> Path:
    pdf = canvas.Canvas(str(path), pagesize=letter)
    for number in range(1, pages + 1):
        pdf.drawString(72, 740, f"Plain page {number}")
        pdf.showPage()
    pdf.save()
    return path


def build_workbook(path: Path, header: Sequence[str], rows: List[Sequence[object]]) -> Path:
    pd.DataFrame(rows, columns=list(header)).to_excel(path, index=False)
    return path


def annotation_values(reader: PdfReader, page_number: int) -> Dict[str, object]:
    """Map widget names on one page to their ``/V`` value."""

    values: Dict[str, object] = {}
    page = reader.pages[page_number]
    for ref in page.get("/Annots") or ():
        annot = ref.get_object()
        if "/T" in annot:
            values[str(annot["/T"])] = annot.get("/V")
    return values


def widgets_by_name(reader: PdfReader, page_number: int) -> Dict[str, Any]:
    """Named widget annotations on one page."""

    widgets: Dict[str, Any] = {}
    for ref in reader.pages[page_number].get("/Annots") or ():
        annot = ref.get_object()
        if "/T" in annot:
            widgets[str(annot["/T"])] = annot
    return widgets


@pytest.fixture()
def form_template(tmp_path: Path) -> Path:
    return build_form_pdf(tmp_path / "form.pdf")


@pytest.fixture()
def plain_template(tmp_path: Path) -> Path:
    return build_plain_pdf(tmp_path / "plain.pdf")


@pytest.fixture()
def name_workbook(tmp_path: Path) -> Path:
    return build_workbook(tmp_path / "names.xlsx", ["Name"], [["Alice"], ["Bob"]])


@pytest.fixture()
def workbook_factory(tmp_path: Path) -> Callable[..., Path]:
    def _factory(header: Sequence[str], rows: List[Sequence[object]], name: str = "data.xlsx") -> Path:
        return build_workbook(tmp_path / name, header, rows)

    return _factory
