"""
BOM Exporter - Export material estimates to various formats.
"""

import csv
import json
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional

from .aggregator import PartMaterials, total_steel_kg
from .quantities import (
    AGGREGATE_KEY,
    CEMENT_KEY,
    SAND_KEY,
    TOTAL_BRICKS_KEY,
    is_numeric,
)

if TYPE_CHECKING:
    from ..pricing.cost_projector import CostProjection


def _format_quantity(value: Any) -> str:
    if isinstance(value, int) and not isinstance(value, bool):
        return f"{value:,}"
    if is_numeric(value):
        return f"{value:,.2f}"
    return str(value)


class BOMExporter:
    """Export material estimate data to files."""

    def export_all(
        self,
        project_id: str,
        part_materials: List[PartMaterials],
        totals: Mapping[str, Any],
        output_dir: Path,
        by_type: Optional[Mapping[str, Mapping[str, Any]]] = None,
        cost: Optional["CostProjection"] = None,
    ) -> Dict[str, Path]:
        """Export all material estimate outputs."""
        output_dir = Path(output_dir)
        boq_dir = output_dir / "boq"
        boq_dir.mkdir(parents=True, exist_ok=True)

        paths = {}

        # Per-part material CSV
        csv_path = boq_dir / "material_estimate.csv"
        self._export_csv(part_materials, totals, csv_path)
        paths["material_csv"] = csv_path

        # Detailed JSON
        json_path = boq_dir / "material_estimate.json"
        self._export_json(project_id, part_materials, totals, by_type, cost, json_path)
        paths["material_json"] = json_path

        # Summary MD
        md_path = boq_dir / "material_summary.md"
        self._export_markdown(project_id, part_materials, totals, by_type, cost, md_path)
        paths["material_md"] = md_path

        return paths

    def _export_csv(
        self,
        part_materials: List[PartMaterials],
        totals: Mapping[str, Any],
        output_path: Path,
    ) -> None:
        """One row per part and material, followed by the project totals."""
        with open(output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)

            writer.writerow(["Part ID", "Part", "Type", "Material", "Quantity"])

            for result in part_materials:
                for material, quantity in result.materials.items():
                    writer.writerow([
                        result.part.id,
                        result.part.label,
                        result.part_type,
                        material,
                        quantity,
                    ])

            for material, quantity in totals.items():
                writer.writerow(["", "TOTAL", "", material, quantity])

    def _export_json(
        self,
        project_id: str,
        part_materials: List[PartMaterials],
        totals: Mapping[str, Any],
        by_type: Optional[Mapping[str, Mapping[str, Any]]],
        cost: Optional["CostProjection"],
        output_path: Path,
    ) -> None:
        """Export detailed material data as JSON."""
        data = {
            "project_id": project_id,
            "generated": datetime.now().isoformat(),
            "summary": {
                "parts_processed": len(part_materials),
                "material_lines": len(totals),
                "total_steel_kg": round(total_steel_kg(totals), 2),
            },
            "totals": dict(totals),
            "by_type": {k: dict(v) for k, v in (by_type or {}).items()},
            "parts": [p.to_dict() for p in part_materials],
        }
        if cost is not None:
            data["cost"] = cost.to_dict()

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, default=str)

    def _export_markdown(
        self,
        project_id: str,
        part_materials: List[PartMaterials],
        totals: Mapping[str, Any],
        by_type: Optional[Mapping[str, Mapping[str, Any]]],
        cost: Optional["CostProjection"],
        output_path: Path,
    ) -> None:
        """Export material summary as markdown."""
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(f"# Material Estimate: {project_id}\n\n")
            f.write(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}\n\n")

            # Summary
            f.write("## Summary\n\n")
            f.write(f"- **Parts Processed**: {len(part_materials)}\n")
            f.write(f"- **Material Lines**: {len(totals)}\n")
            f.write(f"- **Cement**: {_format_quantity(totals.get(CEMENT_KEY, 0))} bags\n")
            f.write(f"- **Sand**: {_format_quantity(totals.get(SAND_KEY, 0))} cft\n")
            f.write(f"- **Aggregate**: {_format_quantity(totals.get(AGGREGATE_KEY, 0))} cft\n")
            f.write(f"- **Steel**: {total_steel_kg(totals):,.2f} kg\n")
            f.write(f"- **Bricks**: {_format_quantity(totals.get(TOTAL_BRICKS_KEY, 0))} nos\n\n")

            # Project totals
            f.write("## Project Totals\n\n")
            f.write("| Material | Quantity |\n")
            f.write("|----------|----------|\n")
            for material, quantity in totals.items():
                f.write(f"| {material} | {_format_quantity(quantity)} |\n")
            f.write("\n")

            if by_type:
                f.write("## Materials by Component\n\n")
                for part_type, materials in by_type.items():
                    f.write(f"### {part_type.replace('-', ' ').title()}\n\n")
                    f.write("| Material | Quantity |\n")
                    f.write("|----------|----------|\n")
                    for material, quantity in materials.items():
                        f.write(f"| {material} | {_format_quantity(quantity)} |\n")
                    f.write("\n")

            if cost is not None:
                f.write(f"## Cost Projection ({cost.currency})\n\n")
                f.write("| Material | Quantity | Unit Price | Amount |\n")
                f.write("|----------|----------|------------|--------|\n")
                for line in cost.lines:
                    f.write(f"| {line.material} | {line.quantity:,.2f} | "
                            f"{line.unit_price:,.2f} | {line.amount:,.2f} |\n")
                f.write(f"| **Total** | | | **{cost.total:,.2f}** |\n\n")

            # Notes
            f.write("## Notes\n\n")
            f.write("1. Cement bags and brick counts are rounded up to whole units.\n")
            f.write("2. Quantities are for estimation only - verify against drawings.\n")
