"""
Material Aggregator - Aggregate materials across structural parts.

Provides:
- Per-part material calculation for a whole project
- Project-wide totals (numeric quantities summed, annotations kept first-seen)
- Totals per part type for the material summary by component
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from ..structural.parts import StructuralPart
from .calculator import MaterialCalculator, PartLike, as_part, get_default_calculator
from .quantities import (
    STEEL_PREFIX,
    PartQuantities,
    is_numeric,
    round_materials,
)

logger = logging.getLogger(__name__)

MaterialMap = Mapping[str, Any]


@dataclass
class PartMaterials:
    """Materials calculated for one structural part."""
    part: StructuralPart
    materials: Dict[str, Any] = field(default_factory=dict)
    quantities: Optional[PartQuantities] = None

    @property
    def part_type(self) -> str:
        return self.part.type

    def raw_materials(self) -> Dict[str, Any]:
        """Unrounded mapping, used when summing across parts."""
        if self.quantities is None:
            return {}
        return self.quantities.to_dict(rounded=False)

    def to_dict(self) -> dict:
        return {
            "id": self.part.id,
            "name": self.part.name,
            "type": self.part.type,
            "materials": self.materials,
        }


def calculate_all_parts(parts: Iterable[PartLike],
                        calculator: Optional[MaterialCalculator] = None) -> List[PartMaterials]:
    """Calculate materials for every readable part of a project."""
    calculator = calculator or get_default_calculator()
    results = []

    for raw in parts:
        part = as_part(raw)
        if part is None:
            continue
        quantities = calculator.calculate_quantities(part)
        if quantities is None:
            materials = {}
        else:
            materials = quantities.to_dict(
                decimals=calculator.constants.decimals,
                noise_digits=calculator.constants.noise_digits,
            )
        results.append(PartMaterials(part=part, materials=materials, quantities=quantities))

    logger.debug(f"Calculated materials for {len(results)} parts")
    return results


def combine_materials(material_maps: Iterable[MaterialMap]) -> Dict[str, Any]:
    """
    Key-wise sum of material mappings.

    Numeric values are added; a non-numeric value (e.g. an earthwork time
    estimate) is kept as first seen and later duplicates are ignored.
    """
    totals: Dict[str, Any] = {}
    for materials in material_maps:
        for key, value in materials.items():
            if key not in totals:
                totals[key] = value
            elif is_numeric(totals[key]) and is_numeric(value):
                totals[key] += value
    return totals


def _raw_material_maps(items: Iterable[Union[PartLike, PartMaterials, MaterialMap]],
                       calculator: MaterialCalculator) -> Iterable[MaterialMap]:
    for item in items:
        if isinstance(item, PartMaterials):
            yield item.raw_materials()
        elif isinstance(item, StructuralPart) or (isinstance(item, Mapping) and "type" in item):
            quantities = calculator.calculate_quantities(item)
            if quantities is not None:
                yield quantities.to_dict(rounded=False)
        elif isinstance(item, Mapping):
            # Already-computed material mapping
            yield item
        else:
            logger.warning(f"Skipping {type(item).__name__} in aggregation")


def aggregate_materials(items: Iterable[Union[PartLike, PartMaterials, MaterialMap]],
                        calculator: Optional[MaterialCalculator] = None) -> Dict[str, Any]:
    """
    Project-wide material totals.

    Accepts structural parts, PartMaterials results or material mappings.
    Parts are summed from their unrounded quantities and rounding is applied
    once to the totals.
    """
    calculator = calculator or get_default_calculator()
    totals = combine_materials(_raw_material_maps(items, calculator))
    return round_materials(
        totals,
        decimals=calculator.constants.decimals,
        noise_digits=calculator.constants.noise_digits,
    )


def aggregate_materials_by_type(items: Iterable[Union[PartLike, PartMaterials]],
                                calculator: Optional[MaterialCalculator] = None) -> Dict[str, Dict[str, Any]]:
    """Material totals keyed first by part type, in first-seen order."""
    calculator = calculator or get_default_calculator()
    grouped: Dict[str, List[Union[PartLike, PartMaterials]]] = defaultdict(list)

    for item in items:
        if isinstance(item, PartMaterials):
            grouped[item.part_type].append(item)
            continue
        part = as_part(item)
        if part is not None:
            grouped[part.type].append(part)

    return {
        part_type: aggregate_materials(members, calculator)
        for part_type, members in grouped.items()
    }


def total_steel_kg(materials: MaterialMap) -> float:
    """Sum of all steel entries, across diameters."""
    return sum(
        value for key, value in materials.items()
        if key.startswith(STEEL_PREFIX) and is_numeric(value)
    )
