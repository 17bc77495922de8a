"""
RCC Material Takeoff Engine
Material quantity estimation for reinforced-concrete building parts.
"""

__version__ = "1.0.0"
__author__ = "RCC Takeoff"

from pathlib import Path

# Project paths
PACKAGE_ROOT = Path(__file__).parent
RULES_DIR = PACKAGE_ROOT / "rules"

from .structural import PartType, StructuralPart  # noqa: E402
from .materials import (  # noqa: E402
    MaterialCalculator,
    calculate_part_materials,
    calculate_part_quantities,
    aggregate_materials,
    aggregate_materials_by_type,
    run_material_engine,
)
from .pricing import MaterialPriceTable, project_cost  # noqa: E402

__all__ = [
    "PartType",
    "StructuralPart",
    "MaterialCalculator",
    "calculate_part_materials",
    "calculate_part_quantities",
    "aggregate_materials",
    "aggregate_materials_by_type",
    "run_material_engine",
    "MaterialPriceTable",
    "project_cost",
]
