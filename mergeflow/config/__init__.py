"""Configuration helpers for MergeFlow job files.

A job file is a YAML document describing one merge run: template, data
source, output, target page and the optional overlay and field mapping.
Relative paths are resolved against the directory holding the job file so a
job folder can be moved as a whole.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from mergeflow.core.errors import ConfigError
from mergeflow.services.render.models import OverlayDocument
from mergeflow_io.mapping import load_field_mapping, validate_field_mapping
from mergeflow_io.schema import FieldMapping

DEFAULT_ROW_LIMIT = 1000

_PATH_KEYS = ("template", "data_source", "output", "overlay_path", "mapping_path")


class MergeJobConfig(BaseModel):
    """Validated settings for one merge run."""

    model_config = ConfigDict(extra="forbid")

    template: Path
    data_source: Path
    output: Path
    page_index: int = Field(default=0, ge=0)
    row_limit: int = Field(default=DEFAULT_ROW_LIMIT, gt=0)
    combine: bool = True
    overlay_path: Optional[Path] = None
    canvas_width: Optional[float] = Field(default=None, ge=0)
    field_mapping: Optional[Dict[str, Optional[int]]] = None
    mapping_path: Optional[Path] = None
    font_dirs: List[Path] = Field(default_factory=list)

    def load_overlay(self) -> Optional[OverlayDocument]:
        if self.overlay_path is None:
            return None
        return OverlayDocument.from_json(self.overlay_path)

    def resolved_field_mapping(self) -> Optional[FieldMapping]:
        """Inline mapping entries win over entries loaded from ``mapping_path``."""

        mapping: Dict[str, int] = {}
        if self.mapping_path is not None:
            mapping.update(load_field_mapping(self.mapping_path))
        if self.field_mapping:
            mapping.update(validate_field_mapping(self.field_mapping))
        return mapping or None


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Job file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError("Job file must contain a mapping")
    return data


def _resolve_paths(data: Dict[str, Any], base: Path) -> Dict[str, Any]:
    resolved = dict(data)
    for key in _PATH_KEYS:
        value = resolved.get(key)
        if value is not None and not Path(value).is_absolute():
            resolved[key] = base / value
    dirs = resolved.get("font_dirs")
    if isinstance(dirs, list):
        resolved["font_dirs"] = [d if Path(d).is_absolute() else base / d for d in dirs]
    return resolved


def load_job_config(path: str | Path) -> MergeJobConfig:
    """Load and validate a merge job file."""

    job_path = Path(path)
    raw = _resolve_paths(_load_yaml(job_path), job_path.resolve().parent)
    try:
        return MergeJobConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid job file {job_path}: {exc}") from exc


__all__ = ["DEFAULT_ROW_LIMIT", "MergeJobConfig", "load_job_config"]
