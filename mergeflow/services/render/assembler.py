"""Document assembler: one template page per data row."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Mapping, Optional

from PyPDF2 import PdfReader, PdfWriter
from PyPDF2.errors import PdfReadError

from mergeflow.core.errors import RenderError, TemplateError
from mergeflow_io.excel_reader import read_rows
from mergeflow_io.pdf_io import clone_document, open_pdf, read_pdf_bytes, roundtrip, save_document
from mergeflow_io.schema import Row
from mergeflow_io.utils.paths import split_output_path

from .fonts import FontCache
from .forms import Form, populate_form
from .models import MergeResult, OverlayDocument
from .overlay import draw_overlay

LOGGER = logging.getLogger(__name__)


class _RowRenderer:
    """Builds the finished target page for each row from the parsed template.

    The template is parsed once and only ever read; every row clones it into
    its own working document.
    """

    def __init__(
        self,
        template: PdfReader,
        page_index: int,
        overlay: Optional[OverlayDocument],
        canvas_width: Optional[float],
        field_mapping: Optional[Mapping[str, int]],
        font_dirs: Iterable[Path],
    ) -> None:
        self.template = template
        self.page_index = page_index
        self.overlay = overlay
        self.canvas_width = canvas_width
        self.field_mapping = field_mapping
        self.font_dirs = tuple(font_dirs)

    def render(self, row: Row) -> PdfReader:
        """Return a freshly parsed document whose target page carries ``row``."""

        # Working copy and font cache live for this row only.
        working = clone_document(self.template)
        fonts = FontCache(self.font_dirs)

        populate_form(row, self.field_mapping, Form.from_document(working))
        draw_overlay(working.writer.pages[self.page_index], row, self.overlay, self.canvas_width, fonts)

        # Re-parsing the serialized copy bakes field values into static page content.
        return roundtrip(working.writer)


def _load_template(template: Path, page_index: int) -> PdfReader:
    reader = open_pdf(read_pdf_bytes(template), source=str(template))
    page_count = len(reader.pages)
    if not 0 <= page_index < page_count:
        raise TemplateError(f"Page index {page_index} out of range (template has {page_count} pages)")
    return reader


def merge_documents(
    output: Path,
    template: Path,
    page_index: int,
    data_source: Path,
    row_limit: int,
    combine: bool,
    overlay: Optional[OverlayDocument] = None,
    canvas_width: Optional[float] = None,
    field_mapping: Optional[Mapping[str, int]] = None,
    font_dirs: Iterable[Path] = (),
) -> MergeResult:
    """Merge spreadsheet rows into copies of one template page.

    Args:
        output: Output file (combined) or naming base (split, ``name-{i}.pdf``).
        template: Template PDF, optionally with AcroForm fields.
        page_index: 0-based page of the template to render for every row.
        data_source: Spreadsheet whose first row is a header.
        row_limit: Maximum number of data rows to merge.
        combine: One document with a page per row when True, one file per row otherwise.
        overlay: Canvas overlay drawn on the target page.
        canvas_width: Width of the authoring canvas; overlays are skipped without it.
        field_mapping: Form field name to column index.
        font_dirs: Extra directories searched for TrueType overlay fonts.

    Returns:
        Produced file count and paths. Combined mode always writes one file,
        with no pages when the data source has no rows.

    Raises:
        FileNotFoundError: When the template or data source is missing.
        TemplateError: When the template cannot be parsed or lacks the page.
        DataSourceError: When the data source cannot be parsed.
    """

    blueprint = _load_template(template, page_index)
    rows = read_rows(data_source, row_limit)
    renderer = _RowRenderer(blueprint, page_index, overlay, canvas_width, field_mapping, font_dirs)

    LOGGER.info(
        "Merging %s rows from %s into %s (%s)",
        len(rows),
        data_source,
        output,
        "combined" if combine else "split",
    )

    paths: List[Path] = []
    combined = PdfWriter()
    for number, row in enumerate(rows, start=1):
        try:
            baked = renderer.render(row)
        except PdfReadError as exc:
            raise RenderError(f"Failed to render row {number}: {exc}") from exc

        if combine:
            combined.add_page(baked.pages[renderer.page_index])
            continue

        single = PdfWriter()
        single.add_page(baked.pages[renderer.page_index])
        paths.append(save_document(single, split_output_path(output, number)))

    if combine:
        paths.append(save_document(combined, output))

    LOGGER.info("Merge finished: %s file(s) written", len(paths))
    return MergeResult(file_count=len(paths), row_count=len(rows), output_paths=paths)
