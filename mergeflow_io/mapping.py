"""Field mapping helpers: form-field name to data column index."""

# Module responsibilities:
# - Load field mappings from YAML/JSON files with strong validation.
# - Offer header-based automatic matching so callers can start from a sensible mapping.

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping

import yaml

from mergeflow.core.errors import ConfigError

from .schema import UNMAPPED, FieldMapping, Header


class MappingError(ConfigError):
    """Raised when a field mapping is invalid or cannot be loaded."""


def validate_field_mapping(payload: Mapping[str, Any]) -> FieldMapping:
    """Normalize a raw mapping payload into ``{field_name: column_index}``.

    ``None`` values and negative indexes become :data:`UNMAPPED`.
    """

    if not isinstance(payload, Mapping):
        raise MappingError("Field mapping must be a mapping of field name to column index")

    mapping: Dict[str, int] = {}
    for name, raw in payload.items():
        if raw is None:
            mapping[str(name)] = UNMAPPED
            continue
        if isinstance(raw, bool):
            raise MappingError(f"Invalid column index for field '{name}': {raw!r}")
        try:
            index = int(raw)
        except (TypeError, ValueError) as exc:
            raise MappingError(f"Invalid column index for field '{name}': {raw!r}") from exc
        mapping[str(name)] = index if index >= 0 else UNMAPPED
    return mapping


def load_field_mapping(path: Path) -> FieldMapping:
    """Load a field mapping from a ``.yaml``/``.yml`` or ``.json`` file."""

    if not path.exists():
        raise MappingError(f"Field mapping file not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        if path.suffix.lower() == ".json":
            try:
                payload = json.load(fh)
            except json.JSONDecodeError as exc:
                raise MappingError(f"Invalid JSON in {path}: {exc}") from exc
        else:
            try:
                payload = yaml.safe_load(fh) or {}
            except yaml.YAMLError as exc:
                raise MappingError(f"Invalid YAML in {path}: {exc}") from exc
    return validate_field_mapping(payload)


def _normalize(label: str) -> str:
    return label.strip().lower().replace(" ", "").replace("_", "")


def match_headers(field_names: Iterable[str], headers: Iterable[Header]) -> FieldMapping:
    """Map each field to the column whose header label matches its name.

    Matching ignores case, spaces and underscores. Fields without a matching
    header are mapped to :data:`UNMAPPED`.
    """

    by_label: Dict[str, int] = {}
    for header in headers:
        by_label.setdefault(_normalize(header.label), header.index)
    return {name: by_label.get(_normalize(name), UNMAPPED) for name in field_names}
