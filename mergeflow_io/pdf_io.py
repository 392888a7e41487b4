"""PDF basic read/write utilities."""

# Module responsibilities:
# - Load template bytes once and parse them into PyPDF2 readers on demand.
# - Clone, serialize and re-parse documents for the per-row merge cycle.
# - Surface minimal metadata/text extraction with pdfplumber.
# - Guard against encrypted or malformed PDFs with explicit failures.

from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pdfplumber
from PyPDF2 import PageObject, PdfReader, PdfWriter
from PyPDF2.errors import PdfReadError
from PyPDF2.generic import DictionaryObject, IndirectObject, PdfObject

from mergeflow.core.errors import TemplateError

from .utils.log import get_logger
from .utils.paths import ensure_parent

logger = get_logger("pdf_io")


@dataclass(frozen=True)
class PdfInfo:
    """Metadata summary for a PDF file."""

    path: Path
    page_count: int
    metadata: Dict[str, str]
    page_sizes: Tuple[Tuple[float, float], ...]
    has_form: bool


def read_pdf_bytes(path: Path) -> bytes:
    """Read a PDF file into memory."""

    if not path.exists():
        raise FileNotFoundError(f"PDF file not found: {path}")
    return path.read_bytes()


def open_pdf(data: bytes, source: str = "<memory>") -> PdfReader:
    """Parse PDF bytes into a reader, rejecting encrypted or malformed input."""

    try:
        reader = PdfReader(BytesIO(data))
        encrypted = reader.is_encrypted
    except PdfReadError as exc:
        raise TemplateError(f"Failed to open PDF {source}: {exc}") from exc
    if encrypted:
        raise TemplateError(f"Encrypted PDFs are not supported: {source}")
    return reader


@dataclass
class WorkingDocument:
    """Writable copy of a template.

    ``acroform`` is the copied form dictionary; its fields and the widgets in
    each page's ``/Annots`` are the same objects, so filled values land on the
    pages that get extracted.
    """

    writer: PdfWriter
    acroform: Optional[DictionaryObject] = None

    @property
    def pages(self) -> List[PageObject]:
        return list(self.writer.pages)


def clone_document(reader: PdfReader) -> WorkingDocument:
    """Deep-copy ``reader`` into a new writer without touching the reader."""

    writer = PdfWriter()
    acroform: Optional[DictionaryObject] = None
    try:
        source_form = reader.trailer["/Root"].get("/AcroForm")
        if source_form is not None:
            # Copying the form first makes the page copies below reuse its widgets.
            # /P is skipped so widgets do not drag their source page along.
            acroform = source_form.get_object().clone(writer, ignore_fields=["/P"])
        for page in reader.pages:
            writer.add_page(page)
    except PdfReadError as exc:
        raise TemplateError(f"Failed to copy PDF structure: {exc}") from exc
    return WorkingDocument(writer=writer, acroform=acroform)


def register_object(writer: PdfWriter, obj: PdfObject) -> IndirectObject:
    """Add a newly built object to ``writer`` and return its indirect reference."""

    # clone() registers an object whose indirect_reference is unset as a new entry.
    obj.indirect_reference = None
    return obj.clone(writer).indirect_reference


def to_bytes(writer: PdfWriter) -> bytes:
    """Serialize a writer into PDF bytes."""

    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def roundtrip(writer: PdfWriter) -> PdfReader:
    """Serialize ``writer`` and parse the result again."""

    return open_pdf(to_bytes(writer), source="<working copy>")


def save_document(writer: PdfWriter, path: Path) -> Path:
    """Write a document to ``path``, creating parent folders."""

    data = to_bytes(writer)
    ensure_parent(path).write_bytes(data)
    logger.info("PDF written", extra={"output": str(path), "bytes": len(data)})
    return path


def page_size(page: PageObject) -> Tuple[float, float]:
    """Return ``(width, height)`` of a page in points."""

    box = page.mediabox
    return float(box.width), float(box.height)


def read_info(path: Path) -> PdfInfo:
    """Read metadata, page sizes and form presence for a PDF file."""

    reader = open_pdf(read_pdf_bytes(path), source=str(path))
    metadata = {k.lstrip("/"): str(v) for k, v in (reader.metadata or {}).items()}
    sizes = tuple(page_size(page) for page in reader.pages)
    has_form = "/AcroForm" in reader.trailer["/Root"]

    logger.info(
        "PDF info read",
        extra={"path": str(path), "page_count": len(sizes)},
    )
    return PdfInfo(
        path=path,
        page_count=len(sizes),
        metadata=metadata,
        page_sizes=sizes,
        has_form=has_form,
    )


def extract_text(path: Path, max_chars_per_page: int = 1000) -> List[str]:
    """Extract text snippets from each page of the PDF."""

    if max_chars_per_page <= 0:
        raise ValueError("max_chars_per_page must be positive")
    if not path.exists():
        raise FileNotFoundError(f"PDF file not found: {path}")

    snippets: List[str] = []
    with pdfplumber.open(path) as pdf:
        for idx, page in enumerate(pdf.pages, start=1):
            text = page.extract_text() or ""
            snippet = text[:max_chars_per_page]
            snippets.append(snippet)
            logger.debug(
                "Extracted text from page",
                extra={"path": str(path), "page": idx, "chars": len(snippet)},
            )
    return snippets
