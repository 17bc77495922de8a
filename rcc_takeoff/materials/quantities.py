"""
Material quantity containers and the output key/rounding conventions.

Calculators fill a PartQuantities object; display keys such as
"Steel 16mm (kg)" are produced only when it is turned into a mapping.
Downstream consumers (cost projection, reports) match on key prefixes, so
the key formats here are stable.
"""

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

CEMENT_KEY = "Cement (bags)"
SAND_KEY = "Sand (cft)"
AGGREGATE_KEY = "Aggregate (cft)"
KHOA_BRICKS_KEY = "Bricks for Aggregate (Nos.)"
FORMWORK_KEY = "Shuttering/Formwork Area (sq.ft.)"
TOTAL_BRICKS_KEY = "Total Bricks (Nos.)"
EARTHWORK_VOLUME_KEY = "Earthwork Volume (cft)"
ESTIMATED_TIME_KEY = "Estimated Time"
MANPOWER_KEY = "Required Manpower"

STEEL_PREFIX = "Steel"
STEEL_KEY_PATTERN = re.compile(r"^Steel (\d+)mm \(kg\)$")

# Rounded up to whole units; everything else numeric rounds to 2 decimals
WHOLE_UNIT_KEYS = frozenset({CEMENT_KEY, TOTAL_BRICKS_KEY, KHOA_BRICKS_KEY})

# Earthwork annotations pass through as given, summed but never rounded
ANNOTATION_KEYS = frozenset({ESTIMATED_TIME_KEY, MANPOWER_KEY})


def steel_key(diameter_mm: int) -> str:
    return f"{STEEL_PREFIX} {int(diameter_mm)}mm (kg)"


def parse_steel_key(key: str) -> Optional[int]:
    """Bar diameter encoded in a steel key, or None for other keys."""
    match = STEEL_KEY_PATTERN.match(key)
    return int(match.group(1)) if match else None


def is_numeric(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def round_up(value: float, noise_digits: int = 9) -> int:
    """Ceiling to a whole unit after trimming float noise."""
    return int(math.ceil(round(value, noise_digits)))


def round_quantity(key: str, value: Any, decimals: int = 2, noise_digits: int = 9) -> Any:
    """Apply the rounding discipline for one material entry."""
    if not is_numeric(value) or key in ANNOTATION_KEYS:
        return value
    if key in WHOLE_UNIT_KEYS:
        return round_up(value, noise_digits)
    return round(value, decimals)


def round_materials(materials: Mapping[str, Any], decimals: int = 2,
                    noise_digits: int = 9) -> Dict[str, Any]:
    return {
        key: round_quantity(key, value, decimals, noise_digits)
        for key, value in materials.items()
    }


class SteelByDiameter:
    """Reinforcement weight (kg) accumulated per bar diameter (mm)."""

    def __init__(self, weights: Optional[Mapping[int, float]] = None):
        self._weights: Dict[int, float] = {}
        for diameter, kg in (weights or {}).items():
            self.add(diameter, kg)

    def add(self, diameter_mm: int, weight_kg: float) -> None:
        diameter_mm = int(diameter_mm)
        if diameter_mm <= 0:
            return
        self._weights[diameter_mm] = self._weights.get(diameter_mm, 0.0) + weight_kg

    def merge(self, other: "SteelByDiameter") -> None:
        for diameter, kg in other.items():
            self.add(diameter, kg)

    def items(self) -> Iterator[Tuple[int, float]]:
        for diameter in sorted(self._weights):
            yield diameter, self._weights[diameter]

    def __getitem__(self, diameter_mm: int) -> float:
        return self._weights[int(diameter_mm)]

    def __contains__(self, diameter_mm: object) -> bool:
        return diameter_mm in self._weights

    def __len__(self) -> int:
        return len(self._weights)

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._weights))

    @property
    def total_kg(self) -> float:
        return sum(self._weights.values())

    def to_dict(self) -> Dict[str, float]:
        return {steel_key(diameter): kg for diameter, kg in self.items()}

    def __repr__(self) -> str:
        return f"SteelByDiameter({dict(self.items())})"


@dataclass
class PartQuantities:
    """Raw (unrounded) material quantities for one structural part."""
    wet_volume_cft: float = 0.0
    dry_volume_cft: float = 0.0
    formwork_sqft: float = 0.0
    steel: SteelByDiameter = field(default_factory=SteelByDiameter)
    materials: Dict[str, float] = field(default_factory=dict)
    annotations: Dict[str, Any] = field(default_factory=dict)

    @property
    def steel_kg(self) -> float:
        return self.steel.total_kg

    def to_dict(self, rounded: bool = True, decimals: int = 2,
                noise_digits: int = 9) -> Dict[str, Any]:
        """Material mapping with display keys."""
        result: Dict[str, Any] = dict(self.materials)
        if self.formwork_sqft > 0:
            result[FORMWORK_KEY] = self.formwork_sqft
        result.update(self.steel.to_dict())

        if rounded:
            result = round_materials(result, decimals, noise_digits)

        # Annotations pass through untouched
        for key, value in self.annotations.items():
            result.setdefault(key, value)
        return result
