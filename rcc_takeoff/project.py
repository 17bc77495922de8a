"""
Project Inputs - YAML/JSON project files and part presets.

A project file lists the structural parts to estimate:

    project:
      name: "Duplex, Block A"
    parts:
      - name: "C1 ground to roof"
        type: column
        data:
          totalColumns: 12
          columnWidth: 12
          ...

Presets (rules/part_presets.yaml) hold a typical input set for every part
type and seed the `template` and `part` commands.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from . import RULES_DIR
from .structural.parts import PartType, StructuralPart

logger = logging.getLogger(__name__)

DEFAULT_PRESETS_PATH = RULES_DIR / "part_presets.yaml"


class ProjectFileError(ValueError):
    """Project file could not be read or does not describe a project."""


class ProjectInfo(BaseModel):
    name: str = ""
    client: str = ""
    location: str = ""


class ProjectEstimateInput(BaseModel):
    """Contents of a project file."""
    project: ProjectInfo = Field(default_factory=ProjectInfo)
    parts: List[StructuralPart] = Field(default_factory=list)

    @field_validator("project", mode="before")
    @classmethod
    def validate_project(cls, v):
        if v is None:
            return {}
        if isinstance(v, str):
            return {"name": v}
        return v

    @field_validator("parts", mode="before")
    @classmethod
    def validate_parts(cls, v):
        return v or []

    @property
    def project_id(self) -> str:
        return self.project.name or "project"


def _read_structured_file(path: Path) -> Any:
    """Parse a YAML or JSON file by its suffix (YAML otherwise)."""
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


def load_project(path: Path) -> ProjectEstimateInput:
    """Load and validate a project file."""
    path = Path(path)
    try:
        data = _read_structured_file(path)
    except OSError as e:
        raise ProjectFileError(f"Cannot read project file {path}: {e}") from e
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ProjectFileError(f"Cannot parse project file {path}: {e}") from e

    # A bare list of parts is accepted too
    if isinstance(data, list):
        data = {"parts": data}
    if not isinstance(data, dict):
        raise ProjectFileError(f"Project file {path} must contain a mapping or a list of parts")

    try:
        project = ProjectEstimateInput.model_validate(data)
    except ValidationError as e:
        raise ProjectFileError(f"Invalid project file {path}: {e}") from e

    unknown = [p.type for p in project.parts if p.part_type is None]
    if unknown:
        logger.warning(f"Unknown part types will yield no materials: {sorted(set(unknown))}")

    logger.info(f"Loaded {len(project.parts)} parts from {path}")
    return project


def load_part_presets(path: Optional[Path] = None) -> Dict[str, Dict[str, Any]]:
    """Default input set per part type."""
    path = Path(path) if path else DEFAULT_PRESETS_PATH
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not load part presets from {path}: {e}")
        return {}
    return {str(k): dict(v or {}) for k, v in data.items()}


def build_template(types: Optional[Iterable[str]] = None,
                   presets: Optional[Dict[str, Dict[str, Any]]] = None,
                   name: str = "New Project") -> Dict[str, Any]:
    """Starter project with one preset part per requested type."""
    presets = presets if presets is not None else load_part_presets()
    selected = [PartType.parse(t) for t in types] if types else list(PartType)

    parts = []
    for part_type in selected:
        if part_type is None or part_type.value not in presets:
            continue
        parts.append({
            "name": part_type.value.replace("-", " ").title(),
            "type": part_type.value,
            "data": dict(presets[part_type.value]),
        })

    return {"project": {"name": name}, "parts": parts}
