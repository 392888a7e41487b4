"""Render service package: spreadsheet rows merged into template PDFs."""

from .assembler import merge_documents
from .fonts import FontCache, FontHandle
from .forms import FieldInfo, FieldKind, Form, list_form_fields, populate_form
from .models import MergeResult, OverlayDocument, PlaceholderElement, TextElement

__all__ = [
    "FieldInfo",
    "FieldKind",
    "FontCache",
    "FontHandle",
    "Form",
    "MergeResult",
    "OverlayDocument",
    "PlaceholderElement",
    "TextElement",
    "list_form_fields",
    "merge_documents",
    "populate_form",
]
