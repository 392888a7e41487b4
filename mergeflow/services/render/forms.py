"""AcroForm field classification, population and introspection.

Fields are classified once into a closed :class:`FieldKind` set derived from
the PDF field type (``/FT``) and flags (``/Ff``). Both the populator and the
introspector work from that classification, so they always agree on what a
field is.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from PyPDF2 import PdfReader, PdfWriter
from PyPDF2.generic import (
    ArrayObject,
    BooleanObject,
    DecodedStreamObject,
    DictionaryObject,
    FloatObject,
    NameObject,
    NumberObject,
    TextStringObject,
)

from mergeflow_io.pdf_io import WorkingDocument, open_pdf, read_pdf_bytes, register_object
from mergeflow_io.schema import UNMAPPED, Row

LOGGER = logging.getLogger(__name__)

# Field flag bits (PDF 32000-1, tables 226 and 228).
FF_RADIO = 1 << 15
FF_PUSHBUTTON = 1 << 16
FF_COMBO = 1 << 17

OFF_STATE = "/Off"
DEFAULT_ON_STATE = "/Yes"
DEFAULT_APPEARANCE = "/Helv 0 Tf 0 g"
AUTO_FONT_SIZE = 12.0

_DA_FONT = re.compile(r"/([^\s/]+)\s+([\d.]+)\s+Tf")


class FieldKind(str, Enum):
    """Interaction type of a form field."""

    TEXT = "text"
    CHECKBOX = "checkbox"
    RADIO_GROUP = "radio_group"
    OPTION_LIST = "option_list"
    DROPDOWN = "dropdown"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class FieldInfo:
    """Name and kind of one form field, as reported to callers."""

    name: str
    kind: FieldKind


@dataclass
class FormField:
    """A terminal form field with its widget annotations."""

    name: str
    kind: FieldKind
    node: DictionaryObject
    widgets: List[DictionaryObject] = field(default_factory=list)

    @property
    def options(self) -> Tuple[str, ...]:
        """Selectable values: export and display values of choices, radio states."""

        if self.kind in (FieldKind.OPTION_LIST, FieldKind.DROPDOWN):
            values: List[str] = []
            for export, display in _choice_options(self.node):
                values.append(export)
                if display != export:
                    values.append(display)
            return tuple(values)
        if self.kind is FieldKind.RADIO_GROUP:
            return tuple(label for label, _ in _radio_states(self))
        return ()


def _text(value: Any) -> str:
    value = _resolve(value)
    if isinstance(value, bytes):
        return value.decode("latin-1")
    return str(value)


def _inherited(node: DictionaryObject, key: str) -> Any:
    current: Optional[DictionaryObject] = node
    while current is not None:
        if key in current:
            return current[key]
        parent = current.get("/Parent")
        current = parent.get_object() if parent is not None else None
    return None


def classify(node: DictionaryObject) -> FieldKind:
    """Classify a field dictionary by its type and flags."""

    field_type = _inherited(node, "/FT")
    flags = int(_inherited(node, "/Ff") or 0)
    if field_type == "/Tx":
        return FieldKind.TEXT
    if field_type == "/Btn":
        if flags & FF_PUSHBUTTON:
            return FieldKind.UNSUPPORTED
        if flags & FF_RADIO:
            return FieldKind.RADIO_GROUP
        return FieldKind.CHECKBOX
    if field_type == "/Ch":
        return FieldKind.DROPDOWN if flags & FF_COMBO else FieldKind.OPTION_LIST
    return FieldKind.UNSUPPORTED


def _resolve(value: Any) -> Any:
    return value.get_object() if hasattr(value, "get_object") else value


def _choice_options(node: DictionaryObject) -> List[Tuple[str, str]]:
    options: List[Tuple[str, str]] = []
    for item in _resolve(_inherited(node, "/Opt")) or ():
        item = _resolve(item)
        if isinstance(item, list) and len(item) >= 2:
            options.append((_text(item[0]), _text(item[1])))
        else:
            options.append((_text(item), _text(item)))
    return options


def _on_state(widget: DictionaryObject) -> Optional[str]:
    appearance = widget.get("/AP")
    normal = appearance.get_object().get("/N") if appearance is not None else None
    if normal is None:
        return None
    for state in normal.get_object().keys():
        if state != OFF_STATE:
            return str(state)
    return None


def _radio_states(form_field: FormField) -> List[Tuple[str, str]]:
    """``(label, state_name)`` per radio widget; labels come from /Opt when present."""

    labels = [_text(item) for item in _resolve(form_field.node.get("/Opt")) or ()]
    states: List[Tuple[str, str]] = []
    for idx, widget in enumerate(form_field.widgets):
        state = _on_state(widget)
        if state is None:
            continue
        label = labels[idx] if idx < len(labels) else state.lstrip("/")
        states.append((label, state))
    return states


def _iter_fields(nodes: Any, prefix: str = "") -> Iterator[FormField]:
    for ref in _resolve(nodes) or ():
        node = ref.get_object()
        partial = node.get("/T")
        name = prefix
        if partial is not None:
            name = f"{prefix}.{_text(partial)}" if prefix else _text(partial)
        kids = [kid.get_object() for kid in _resolve(node.get("/Kids")) or ()]
        if any("/T" in kid for kid in kids):
            yield from _iter_fields(node["/Kids"], name)
            continue
        widgets = kids if kids else [node]
        yield FormField(name=name, kind=classify(node), node=node, widgets=widgets)


class Form:
    """Access to the AcroForm of a template reader or a working copy.

    Appearance streams can only be regenerated when the form belongs to a
    working copy.
    """

    def __init__(self, acroform: DictionaryObject, writer: Optional[PdfWriter] = None) -> None:
        self.acroform = acroform
        self.writer = writer
        self._fields: Dict[str, FormField] = {f.name: f for f in _iter_fields(acroform.get("/Fields"))}

    @classmethod
    def from_document(cls, document: PdfReader | WorkingDocument) -> Optional["Form"]:
        """Return the document's form, or ``None`` when it has no fields."""

        if isinstance(document, WorkingDocument):
            acroform = document.acroform
            writer: Optional[PdfWriter] = document.writer
        else:
            acroform = document.trailer["/Root"].get("/AcroForm")
            writer = None
        if acroform is None:
            return None
        acroform = acroform.get_object()
        if not acroform.get("/Fields"):
            return None
        return cls(acroform, writer)

    def fields(self) -> List[FormField]:
        return list(self._fields.values())

    def get(self, name: str) -> Optional[FormField]:
        return self._fields.get(name)

    def mark_need_appearances(self) -> None:
        self.acroform[NameObject("/NeedAppearances")] = BooleanObject(True)


def _escape_pdf_text(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", r"\(").replace(")", r"\)").replace("\r", "").replace("\n", " ")


def _appearance_resources(form: Form, font_key: str) -> DictionaryObject:
    resources = form.acroform.get("/DR")
    if resources is not None:
        resources = resources.get_object()
        fonts = resources.get("/Font")
        if fonts is not None and f"/{font_key}" in fonts.get_object():
            return resources
    helvetica = DictionaryObject(
        {
            NameObject("/Type"): NameObject("/Font"),
            NameObject("/Subtype"): NameObject("/Type1"),
            NameObject("/BaseFont"): NameObject("/Helvetica"),
            NameObject("/Encoding"): NameObject("/WinAnsiEncoding"),
        }
    )
    return DictionaryObject(
        {NameObject("/Font"): DictionaryObject({NameObject(f"/{font_key}"): helvetica})}
    )


def _write_text_appearance(form: Form, form_field: FormField, text: str) -> None:
    """Replace the normal appearance of each widget with a single line of ``text``."""

    if form.writer is None:
        return

    da = _text(_inherited(form_field.node, "/DA") or form.acroform.get("/DA") or DEFAULT_APPEARANCE)
    match = _DA_FONT.search(da)
    font_key = match.group(1) if match else "Helv"
    size = float(match.group(2)) if match else 0.0

    for widget in form_field.widgets:
        rect = [float(v) for v in _resolve(widget.get("/Rect")) or (0, 0, 0, 0)]
        width, height = abs(rect[2] - rect[0]), abs(rect[3] - rect[1])
        font_size = size or min(AUTO_FONT_SIZE, max(height * 0.7, 1.0))
        widget_da = _DA_FONT.sub(f"/{font_key} {font_size:g} Tf", da) if match else f"/{font_key} {font_size:g} Tf 0 g"
        baseline = max((height - font_size) / 2 + 0.2 * font_size, 1.0)
        content = (
            f"/Tx BMC\nq\nBT\n{widget_da}\n2 {baseline:.2f} Td\n"
            f"({_escape_pdf_text(text)}) Tj\nET\nQ\nEMC\n"
        )

        stream = DecodedStreamObject()
        stream.set_data(content.encode("latin-1", errors="replace"))
        stream.update(
            {
                NameObject("/Type"): NameObject("/XObject"),
                NameObject("/Subtype"): NameObject("/Form"),
                NameObject("/BBox"): ArrayObject(
                    [FloatObject(0), FloatObject(0), FloatObject(round(width, 3)), FloatObject(round(height, 3))]
                ),
                NameObject("/Resources"): _appearance_resources(form, font_key),
            }
        )
        widget[NameObject("/AP")] = DictionaryObject({NameObject("/N"): register_object(form.writer, stream)})


def _set_text(form: Form, form_field: FormField, value: str) -> None:
    form_field.node[NameObject("/V")] = TextStringObject(value)
    _write_text_appearance(form, form_field, value)


def _set_checkbox(form_field: FormField, value: str) -> None:
    checked = value.lower() == "true"
    on_state = next((s for s in map(_on_state, form_field.widgets) if s), DEFAULT_ON_STATE)
    form_field.node[NameObject("/V")] = NameObject(on_state if checked else OFF_STATE)
    for widget in form_field.widgets:
        state = _on_state(widget) or on_state
        widget[NameObject("/AS")] = NameObject(state if checked else OFF_STATE)


def _select_radio(form_field: FormField, value: str) -> bool:
    states = _radio_states(form_field)
    selected = next((state for label, state in states if label == value), None)
    if selected is None:
        return False
    form_field.node[NameObject("/V")] = NameObject(selected)
    for widget in form_field.widgets:
        widget_state = _on_state(widget)
        widget[NameObject("/AS")] = NameObject(selected if widget_state == selected else OFF_STATE)
    return True


def _select_choice(form: Form, form_field: FormField, value: str) -> bool:
    options = _choice_options(form_field.node)
    for idx, (export, display) in enumerate(options):
        if value in (export, display):
            form_field.node[NameObject("/V")] = TextStringObject(export)
            if form_field.kind is FieldKind.OPTION_LIST:
                form_field.node[NameObject("/I")] = ArrayObject([NumberObject(idx)])
            else:
                _write_text_appearance(form, form_field, display)
            return True
    return False


def apply_value(form: Form, form_field: FormField, value: str) -> bool:
    """Write ``value`` into ``form_field`` following the rule for its kind.

    Returns ``False`` when the field was left unchanged.
    """

    if form_field.kind is FieldKind.TEXT:
        _set_text(form, form_field, value)
        return True
    if form_field.kind is FieldKind.CHECKBOX:
        _set_checkbox(form_field, value)
        return True
    if form_field.kind is FieldKind.RADIO_GROUP:
        return _select_radio(form_field, value)
    if form_field.kind in (FieldKind.OPTION_LIST, FieldKind.DROPDOWN):
        return _select_choice(form, form_field, value)
    return False


def populate_form(row: Row, field_mapping: Optional[Mapping[str, int]], form: Optional[Form]) -> int:
    """Fill mapped form fields from ``row``; returns the number of fields changed."""

    if not field_mapping or form is None:
        return 0

    changed = 0
    for name, index in field_mapping.items():
        if index == UNMAPPED or not row.in_range(index):
            continue
        form_field = form.get(name)
        if form_field is None:
            LOGGER.warning("Mapped form field %s not found in template", name)
            continue
        value = row.text(index)
        if apply_value(form, form_field, value):
            changed += 1
        else:
            LOGGER.debug("Field %s (%s) left unchanged for value %r", name, form_field.kind.value, value)

    form.mark_need_appearances()
    return changed


def list_form_fields(path: Path) -> List[FieldInfo]:
    """List the classified form fields of a template without modifying it."""

    form = Form.from_document(open_pdf(read_pdf_bytes(path), source=str(path)))
    if form is None:
        return []
    return [FieldInfo(name=f.name, kind=f.kind) for f in form.fields() if f.kind is not FieldKind.UNSUPPORTED]
