"""
Material Quantity Engine - Derive construction materials from structural parts.

This module provides:
- Per-part-type quantity calculators (concrete, steel, formwork, bricks)
- Dispatch from a structural part to its calculator
- Project-wide and per-type material aggregation
- CSV / JSON / Markdown export

Based on regional RCC estimating practice:
- Dry volume = 1.54 x wet volume, 1.25 cft per cement bag
- Steel unit weight = d^2 / 533 kg per foot
- Khoa (brick aggregate) at 9.5 bricks per cft
"""

from .constants import EstimationConstants, load_constants, DEFAULT_CONSTANTS
from .quantities import PartQuantities, SteelByDiameter, steel_key, parse_steel_key
from .calculator import (
    MaterialCalculator,
    CALCULATORS,
    calculate_part_materials,
    calculate_part_quantities,
)
from .aggregator import (
    PartMaterials,
    calculate_all_parts,
    combine_materials,
    aggregate_materials,
    aggregate_materials_by_type,
    total_steel_kg,
)
from .exporter import BOMExporter

__all__ = [
    "EstimationConstants",
    "load_constants",
    "DEFAULT_CONSTANTS",
    "PartQuantities",
    "SteelByDiameter",
    "steel_key",
    "parse_steel_key",
    "MaterialCalculator",
    "CALCULATORS",
    "calculate_part_materials",
    "calculate_part_quantities",
    "PartMaterials",
    "calculate_all_parts",
    "combine_materials",
    "aggregate_materials",
    "aggregate_materials_by_type",
    "total_steel_kg",
    "BOMExporter",
    "run_material_engine",
]


def run_material_engine(
    project_id: str,
    parts: list,
    output_dir,
    prices=None,
    constants_path=None,
) -> dict:
    """
    Run the complete material estimation pipeline.

    Args:
        project_id: Project identifier
        parts: Structural parts (StructuralPart or persisted mappings)
        output_dir: Output directory
        prices: Optional MaterialPriceTable for the cost projection
        constants_path: Optional estimation constants YAML

    Returns:
        Dict with estimation results
    """
    from pathlib import Path
    import logging

    logger = logging.getLogger(__name__)
    output_dir = Path(output_dir)

    # 1. Calculate materials per part
    logger.info("Calculating material requirements...")
    calculator = MaterialCalculator(constants_path=constants_path)
    part_materials = calculate_all_parts(parts, calculator)
    logger.info(f"Calculated materials for {len(part_materials)} structural parts")

    # 2. Aggregate materials
    logger.info("Aggregating materials...")
    totals = aggregate_materials(part_materials, calculator)
    by_type = aggregate_materials_by_type(part_materials, calculator)
    logger.info(f"Aggregated into {len(totals)} material lines across {len(by_type)} part types")

    # 3. Cost projection
    cost = None
    if prices is not None:
        from ..pricing import project_cost
        cost = project_cost(totals, prices)
        logger.info(f"Projected material cost: {cost.total:,.2f} {cost.currency}")

    # 4. Export results
    logger.info("Exporting material estimate...")
    exporter = BOMExporter()
    output_paths = exporter.export_all(
        project_id,
        part_materials,
        totals,
        output_dir,
        by_type=by_type,
        cost=cost,
    )

    return {
        "parts_processed": len(part_materials),
        "material_lines": len(totals),
        "totals": totals,
        "by_type": by_type,
        "total_steel_kg": round(total_steel_kg(totals), 2),
        "cost": cost,
        "output_paths": {k: str(v) for k, v in output_paths.items()},
    }
