"""
Structural part model.

A project is a list of structural parts; each part carries a type tag and a
type-specific parameter record. Parameters arrive as camelCase mappings from
the persistence layer and are read into typed records here. Every record
field carries its unit (ft / in / mm / count / pct) so the mixed unit
convention stays explicit.
"""

import logging
import math
import re
import uuid
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .units import Feet, Inches, MillimeterDiameter, parse_length

logger = logging.getLogger(__name__)


class PartType(str, Enum):
    """Structural part type tags."""
    PILE = "pile"
    PILE_CAP = "pile-cap"
    COLUMN = "column"
    SHORT_COLUMN = "short-column"
    BEAM = "beam"
    GRADE_BEAM = "grade-beam"
    SLAB = "slab"
    BRICKWORK = "brickwork"
    EARTHWORK = "earthwork"
    MAT_FOUNDATION = "mat-foundation"
    COMBINED_FOOTING = "combined-footing"
    STANDALONE_FOOTING = "standalone-footing"
    STAIRCASE = "staircase"
    RETAINING_WALL = "retaining-wall"
    CC_CASTING = "cc-casting"

    @classmethod
    def parse(cls, value: Any) -> Optional["PartType"]:
        """Return the matching tag, or None for unknown types."""
        if isinstance(value, cls):
            return value
        try:
            return cls(normalize_part_type(value))
        except ValueError:
            return None


def normalize_part_type(value: Any) -> str:
    return re.sub(r"[\s_]+", "-", str(value or "").strip().lower())


class StructuralPart(BaseModel):
    """One structural element group of a project."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(default_factory=lambda: str(uuid.uuid4())[:8])
    name: str = ""
    type: str = Field(description="Part type tag, e.g. 'column', 'pile-cap'")
    parameters: Dict[str, Any] = Field(default_factory=dict, alias="data")

    @field_validator("id", "name", mode="before")
    @classmethod
    def validate_text(cls, v):
        return "" if v is None else str(v)

    @field_validator("type", mode="before")
    @classmethod
    def validate_type(cls, v):
        if isinstance(v, PartType):
            return v.value
        return normalize_part_type(v)

    @field_validator("parameters", mode="before")
    @classmethod
    def validate_parameters(cls, v):
        return v or {}

    @property
    def part_type(self) -> Optional[PartType]:
        return PartType.parse(self.type)

    @property
    def label(self) -> str:
        return self.name or self.type


# =============================================================================
# PARAMETER RECORDS
# =============================================================================

def _param(unit: str, default: Any = 0.0):
    return field(default=default, metadata={"unit": unit})


def _snake_case(key: str) -> str:
    key = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", key)
    return re.sub(r"[\s\-]+", "_", key).lower()


def _coerce(value: Any, unit: str, default: Any) -> Any:
    """Coerce a raw parameter value to the field's unit type."""
    if unit == "raw":
        return value
    if unit == "ratio":
        return "" if value is None else str(value)

    number = parse_length(value, unit)
    if number is None or math.isnan(number) or math.isinf(number):
        if value not in (None, ""):
            logger.warning(f"Unreadable {unit} value {value!r}, using {default!r}")
        return default

    if unit == "mm":
        diameter = int(round(number))
        if diameter != number:
            logger.warning(f"Bar diameter {number}mm rounded to {diameter}mm")
        return MillimeterDiameter(diameter)
    return number


@dataclass
class PartParameters:
    """
    Base for typed parameter records.

    ALIASES maps alternative (snake_cased) persisted names to field names.
    """
    ALIASES = {}

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "PartParameters":
        normalized: Dict[str, Any] = {}
        for key, value in (data or {}).items():
            name = _snake_case(str(key))
            name = cls.ALIASES.get(name, name)
            normalized.setdefault(name, value)

        known = {f.name: f for f in fields(cls)}
        kwargs = {}
        for name, value in normalized.items():
            f = known.get(name)
            if f is None:
                continue
            kwargs[name] = _coerce(value, f.metadata.get("unit", "raw"), f.default)

        ignored = sorted(set(normalized) - set(known))
        if ignored:
            logger.debug(f"{cls.__name__}: ignoring fields {ignored}")

        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class ColumnParameters(PartParameters):
    ALIASES = {"mortar_ratio": "mix_ratio"}

    total_columns: float = _param("count")
    column_width: Inches = _param("in")
    column_depth: Inches = _param("in")
    column_height: Feet = _param("ft")
    number_of_floors: float = _param("count", 1.0)
    mix_ratio: str = _param("ratio", "")
    main_bar_dia: MillimeterDiameter = _param("mm", 0)
    main_bar_count: float = _param("count")
    tie_bar_dia: MillimeterDiameter = _param("mm", 0)
    tie_spacing: Inches = _param("in")
    clear_cover: Inches = _param("in")
    lapping_length: Feet = _param("ft")


@dataclass
class BeamParameters(PartParameters):
    ALIASES = {"mortar_ratio": "mix_ratio"}

    total_beams: float = _param("count")
    beam_length: Feet = _param("ft")
    beam_width: Inches = _param("in")
    beam_depth: Inches = _param("in")
    slab_thickness: Inches = _param("in")
    mix_ratio: str = _param("ratio", "")
    main_top_dia: MillimeterDiameter = _param("mm", 0)
    main_top_count: float = _param("count")
    main_bottom_dia: MillimeterDiameter = _param("mm", 0)
    main_bottom_count: float = _param("count")
    extra_top_dia: MillimeterDiameter = _param("mm", 0)
    extra_top_count: float = _param("count")
    stirrup_dia: MillimeterDiameter = _param("mm", 0)
    stirrup_spacing: Inches = _param("in")
    clear_cover: Inches = _param("in")
    support_width: Feet = _param("ft")


@dataclass
class SlabParameters(PartParameters):
    ALIASES = {"mortar_ratio": "mix_ratio"}

    length: Feet = _param("ft")
    width: Feet = _param("ft")
    thickness: Inches = _param("in")
    mix_ratio: str = _param("ratio", "")
    main_bar_dia: MillimeterDiameter = _param("mm", 0)
    main_bar_spacing: Inches = _param("in")
    dist_bar_dia: MillimeterDiameter = _param("mm", 0)
    dist_bar_spacing: Inches = _param("in")
    clear_cover: Inches = _param("in")


@dataclass
class FootingParameters(PartParameters):
    """Standalone/combined footing, mat foundation and pile cap."""
    ALIASES = {
        "mortar_ratio": "mix_ratio",
        "total_footings": "count",
        "total_foundations": "count",
        "total_caps": "count",
        "depth": "thickness",
        "main_bar_dia": "bar_dia",
        "main_bar_spacing": "bar_spacing",
    }

    count: float = _param("count")
    length: Feet = _param("ft")
    width: Feet = _param("ft")
    thickness: Inches = _param("in")
    mix_ratio: str = _param("ratio", "")
    bar_dia: MillimeterDiameter = _param("mm", 0)
    bar_spacing: Inches = _param("in")
    clear_cover: Inches = _param("in")


@dataclass
class PileParameters(PartParameters):
    ALIASES = {"mortar_ratio": "mix_ratio"}

    total_piles: float = _param("count")
    pile_diameter: Inches = _param("in")
    pile_length: Feet = _param("ft")
    mix_ratio: str = _param("ratio", "")
    main_bar_dia: MillimeterDiameter = _param("mm", 0)
    main_bar_count: float = _param("count")
    tie_bar_dia: MillimeterDiameter = _param("mm", 0)
    tie_spacing: Inches = _param("in")
    clear_cover: Inches = _param("in")
    lapping_length: Feet = _param("ft")


@dataclass
class StaircaseParameters(PartParameters):
    ALIASES = {"mortar_ratio": "mix_ratio"}

    number_of_flights: float = _param("count")
    flight_length: Feet = _param("ft")
    flight_width: Feet = _param("ft")
    flight_height: Feet = _param("ft")
    waist_slab_thickness: Inches = _param("in")
    riser_height: Inches = _param("in")
    tread_width: Inches = _param("in")
    landing_length: Feet = _param("ft")
    landing_width: Feet = _param("ft")
    landing_slab_thickness: Inches = _param("in")
    mix_ratio: str = _param("ratio", "")
    main_bar_dia: MillimeterDiameter = _param("mm", 0)
    main_bar_spacing: Inches = _param("in")
    dist_bar_dia: MillimeterDiameter = _param("mm", 0)
    dist_bar_spacing: Inches = _param("in")
    clear_cover: Inches = _param("in")


@dataclass
class RetainingWallParameters(PartParameters):
    ALIASES = {"mortar_ratio": "mix_ratio"}

    wall_length: Feet = _param("ft")
    wall_height: Feet = _param("ft")
    stem_thickness_top: Inches = _param("in")
    stem_thickness_bottom: Inches = _param("in")
    base_slab_width: Feet = _param("ft")
    base_slab_thickness: Inches = _param("in")
    mix_ratio: str = _param("ratio", "")
    vertical_bar_dia: MillimeterDiameter = _param("mm", 0)
    vertical_bar_spacing: Inches = _param("in")
    horizontal_bar_dia: MillimeterDiameter = _param("mm", 0)
    horizontal_bar_spacing: Inches = _param("in")
    base_slab_dia: MillimeterDiameter = _param("mm", 0)
    base_slab_spacing: Inches = _param("in")


@dataclass
class BrickworkParameters(PartParameters):
    ALIASES = {"mix_ratio": "mortar_ratio"}

    total_wall_length: Feet = _param("ft")
    wall_height: Feet = _param("ft")
    wall_thickness: Inches = _param("in")
    number_of_doors: float = _param("count")
    door_height: Feet = _param("ft")
    door_width: Feet = _param("ft")
    number_of_windows: float = _param("count")
    window_height: Feet = _param("ft")
    window_width: Feet = _param("ft")
    mortar_ratio: str = _param("ratio", "")
    bricks_per_cft: Optional[float] = _param("count", None)
    brick_wastage: float = _param("pct")
    mortar_wastage: float = _param("pct")


@dataclass
class EarthworkParameters(PartParameters):
    length: Feet = _param("ft")
    width: Feet = _param("ft")
    depth: Feet = _param("ft")
    estimation: Optional[Dict[str, Any]] = _param("raw", None)


@dataclass
class CCCastingParameters(PartParameters):
    ALIASES = {"mortar_ratio": "mix_ratio"}

    length: Feet = _param("ft")
    width: Feet = _param("ft")
    thickness: Inches = _param("in")
    mix_ratio: str = _param("ratio", "")


PARAMETER_TYPES: Dict[PartType, Type[PartParameters]] = {
    PartType.COLUMN: ColumnParameters,
    PartType.SHORT_COLUMN: ColumnParameters,
    PartType.BEAM: BeamParameters,
    PartType.GRADE_BEAM: BeamParameters,
    PartType.SLAB: SlabParameters,
    PartType.STANDALONE_FOOTING: FootingParameters,
    PartType.COMBINED_FOOTING: FootingParameters,
    PartType.MAT_FOUNDATION: FootingParameters,
    PartType.PILE_CAP: FootingParameters,
    PartType.PILE: PileParameters,
    PartType.STAIRCASE: StaircaseParameters,
    PartType.RETAINING_WALL: RetainingWallParameters,
    PartType.BRICKWORK: BrickworkParameters,
    PartType.EARTHWORK: EarthworkParameters,
    PartType.CC_CASTING: CCCastingParameters,
}


def parse_parameters(part_type: PartType, data: Optional[Mapping[str, Any]]) -> PartParameters:
    """Read a raw parameter mapping into the record for a part type."""
    return PARAMETER_TYPES[part_type].from_dict(data)
