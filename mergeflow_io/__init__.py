"""`mergeflow_io` top-level package exports the IO helpers for tabular and PDF flows."""

# Module responsibilities:
# - Re-export high-level interfaces for row reading, PDF I/O and field mappings so consumers have a stable API surface.

from __future__ import annotations

from .excel_reader import count_rows, read_headers, read_rows
from .mapping import MappingError, load_field_mapping, match_headers, validate_field_mapping
from .pdf_io import PdfInfo, extract_text, read_info
from .schema import UNMAPPED, FieldMapping, Header, Row

__all__ = [
    "read_rows",
    "read_headers",
    "count_rows",
    "MappingError",
    "load_field_mapping",
    "match_headers",
    "validate_field_mapping",
    "PdfInfo",
    "read_info",
    "extract_text",
    "UNMAPPED",
    "FieldMapping",
    "Header",
    "Row",
]

__version__ = "0.1.0"
