"""
Estimation constants - YAML configuration layer.

Named constants for concrete batching, steel unit weight, brickwork mortar
and rounding. Defaults live in rules/material_constants.yaml and can be
overridden per region/material standard with another YAML file.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, Optional

import yaml

from .. import RULES_DIR

logger = logging.getLogger(__name__)

DRY_VOLUME_MULTIPLIER = 1.54
CEMENT_BAG_VOLUME_CFT = 1.25
BRICKS_PER_CFT_AGGREGATE = 9.5
UNIT_WEIGHT_DIVISOR = 533.0
DEFAULT_BRICKS_PER_CFT = 11.5
MORTAR_WET_FRACTION = 0.25
MORTAR_DRY_MULTIPLIER = 1.33
STANDARD_BAR_DIAMETERS = frozenset({8, 10, 12, 16, 20, 22, 25, 28, 32})

DEFAULT_CONSTANTS_PATH = RULES_DIR / "material_constants.yaml"


@dataclass(frozen=True)
class EstimationConstants:
    """Constants used by every part calculator."""
    dry_volume_multiplier: float = DRY_VOLUME_MULTIPLIER
    cement_bag_volume_cft: float = CEMENT_BAG_VOLUME_CFT
    bricks_per_cft_aggregate: float = BRICKS_PER_CFT_AGGREGATE
    unit_weight_divisor: float = UNIT_WEIGHT_DIVISOR
    standard_diameters: FrozenSet[int] = field(default=STANDARD_BAR_DIAMETERS)
    default_bricks_per_cft: float = DEFAULT_BRICKS_PER_CFT
    mortar_wet_fraction: float = MORTAR_WET_FRACTION
    mortar_dry_multiplier: float = MORTAR_DRY_MULTIPLIER
    retaining_wall_base_side_formwork: bool = True
    noise_digits: int = 9
    decimals: int = 2

    @classmethod
    def from_dict(cls, data: Dict) -> "EstimationConstants":
        concrete = data.get("concrete") or {}
        steel = data.get("steel") or {}
        brickwork = data.get("brickwork") or {}
        formwork = data.get("formwork") or {}
        rounding = data.get("rounding") or {}

        diameters = steel.get("standard_diameters")
        return cls(
            dry_volume_multiplier=float(concrete.get("dry_volume_multiplier", DRY_VOLUME_MULTIPLIER)),
            cement_bag_volume_cft=float(concrete.get("cement_bag_volume_cft", CEMENT_BAG_VOLUME_CFT)),
            bricks_per_cft_aggregate=float(concrete.get("bricks_per_cft_aggregate", BRICKS_PER_CFT_AGGREGATE)),
            unit_weight_divisor=float(steel.get("unit_weight_divisor", UNIT_WEIGHT_DIVISOR)),
            standard_diameters=frozenset(int(d) for d in diameters) if diameters else STANDARD_BAR_DIAMETERS,
            default_bricks_per_cft=float(brickwork.get("default_bricks_per_cft", DEFAULT_BRICKS_PER_CFT)),
            mortar_wet_fraction=float(brickwork.get("mortar_wet_fraction", MORTAR_WET_FRACTION)),
            mortar_dry_multiplier=float(brickwork.get("mortar_dry_multiplier", MORTAR_DRY_MULTIPLIER)),
            retaining_wall_base_side_formwork=bool(formwork.get("retaining_wall_base_sides", True)),
            noise_digits=int(rounding.get("noise_digits", 9)),
            decimals=int(rounding.get("decimals", 2)),
        )


def _load_config(path: Optional[Path]) -> Dict:
    """Load constants YAML, falling back to built-in defaults."""
    path = Path(path) if path else DEFAULT_CONSTANTS_PATH
    try:
        with open(path) as f:
            return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not load constants from {path}: {e}; using defaults")
        return {}


def load_constants(path: Optional[Path] = None) -> EstimationConstants:
    """Load estimation constants from YAML (default: rules/material_constants.yaml)."""
    constants = EstimationConstants.from_dict(_load_config(path))
    logger.debug(f"Loaded estimation constants: {constants}")
    return constants


DEFAULT_CONSTANTS = EstimationConstants()
