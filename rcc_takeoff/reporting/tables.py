"""
Estimate Tables Module
Builds pandas DataFrames and exports to Excel for material estimate reporting.
"""

import logging
import re
from io import BytesIO
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import pandas as pd

from ..materials.aggregator import PartMaterials, total_steel_kg
from ..materials.quantities import is_numeric
from ..pricing.cost_projector import CostProjection

logger = logging.getLogger(__name__)

UNIT_PATTERN = re.compile(r"^(.*?)\s*\(([^)]*)\)$")


def split_material_key(key: str) -> tuple:
    """'Sand (cft)' -> ('Sand', 'cft'); keys without a unit get ''."""
    match = UNIT_PATTERN.match(key)
    if match:
        return match.group(1), match.group(2)
    return key, ""


def build_parts_df(part_materials: List[PartMaterials]) -> pd.DataFrame:
    """
    Build per-part material schedule DataFrame.

    One row per part, one column per material key seen in any part.

    Args:
        part_materials: Calculated materials per part

    Returns:
        DataFrame with parts schedule
    """
    if not part_materials:
        return pd.DataFrame(columns=['ID', 'Part', 'Type'])

    data = []
    for result in part_materials:
        row: Dict[str, Any] = {
            'ID': result.part.id,
            'Part': result.part.label,
            'Type': result.part_type,
        }
        row.update(result.materials)
        data.append(row)

    return pd.DataFrame(data)


def build_totals_df(totals: Mapping[str, Any]) -> pd.DataFrame:
    """
    Build project totals DataFrame.

    Args:
        totals: Aggregated material mapping

    Returns:
        DataFrame with Material / Quantity / Unit columns
    """
    data = []
    for key, value in totals.items():
        material, unit = split_material_key(key)
        data.append({'Material': material, 'Quantity': value, 'Unit': unit})

    if not data:
        return pd.DataFrame(columns=['Material', 'Quantity', 'Unit'])
    return pd.DataFrame(data)


def build_by_type_df(by_type: Mapping[str, Mapping[str, Any]]) -> pd.DataFrame:
    """Material summary by component: one row per part type, numeric materials only."""
    if not by_type:
        return pd.DataFrame(columns=['Type'])

    data = []
    for part_type, materials in by_type.items():
        row: Dict[str, Any] = {'Type': part_type}
        row.update({k: v for k, v in materials.items() if is_numeric(v)})
        data.append(row)

    return pd.DataFrame(data).fillna(0)


def build_cost_df(cost: Optional[CostProjection]) -> pd.DataFrame:
    """Cost projection DataFrame with a totals row."""
    columns = ['Material', 'Quantity', 'Unit Price', 'Amount']
    if cost is None or not cost.lines:
        return pd.DataFrame(columns=columns)

    data = [
        {
            'Material': line.material,
            'Quantity': round(line.quantity, 2),
            'Unit Price': line.unit_price,
            'Amount': round(line.amount, 2),
        }
        for line in cost.lines
    ]
    data.append({
        'Material': 'TOTAL',
        'Quantity': '',
        'Unit Price': '',
        'Amount': round(cost.total, 2),
    })
    return pd.DataFrame(data, columns=columns)


def build_summary_df(part_materials: List[PartMaterials],
                     totals: Mapping[str, Any]) -> pd.DataFrame:
    """
    Build summary DataFrame.

    Args:
        part_materials: Calculated materials per part
        totals: Aggregated material mapping

    Returns:
        DataFrame with summary
    """
    steel_kg = total_steel_kg(totals)
    data = [
        {'Item': 'Structural Parts', 'Value': len(part_materials), 'Unit': 'nos'},
        {'Item': 'Part Types', 'Value': len({p.part_type for p in part_materials}), 'Unit': 'nos'},
        {'Item': 'Total Steel', 'Value': round(steel_kg, 2), 'Unit': 'kg'},
        {'Item': 'Total Steel', 'Value': round(steel_kg / 1000, 3), 'Unit': 'tonnes'},
    ]
    return pd.DataFrame(data)


def export_to_excel(
    part_materials: List[PartMaterials],
    totals: Mapping[str, Any],
    by_type: Optional[Mapping[str, Mapping[str, Any]]] = None,
    cost: Optional[CostProjection] = None,
    filepath: Optional[Path] = None,
) -> BytesIO:
    """
    Export a material estimate to an Excel file with multiple sheets.

    Args:
        part_materials: Calculated materials per part
        totals: Aggregated material mapping
        by_type: Optional per-type totals
        cost: Optional cost projection
        filepath: Optional file path to save (if None, returns BytesIO)

    Returns:
        BytesIO buffer with Excel file
    """
    summary_df = build_summary_df(part_materials, totals)
    totals_df = build_totals_df(totals)
    parts_df = build_parts_df(part_materials)
    by_type_df = build_by_type_df(by_type or {})
    cost_df = build_cost_df(cost)

    buffer = BytesIO()

    with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
        summary_df.to_excel(writer, sheet_name='Summary', index=False)
        totals_df.to_excel(writer, sheet_name='Totals', index=False)
        parts_df.to_excel(writer, sheet_name='Parts', index=False)
        by_type_df.to_excel(writer, sheet_name='By Type', index=False)
        cost_df.to_excel(writer, sheet_name='Cost', index=False)

        # Format columns width
        for sheet_name in writer.sheets:
            worksheet = writer.sheets[sheet_name]
            for column in worksheet.columns:
                column_letter = column[0].column_letter
                max_length = max(
                    (len(str(cell.value)) for cell in column if cell.value is not None),
                    default=0,
                )
                worksheet.column_dimensions[column_letter].width = min(max_length + 2, 50)

    buffer.seek(0)

    if filepath:
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, 'wb') as f:
            f.write(buffer.getvalue())
        buffer.seek(0)
        logger.info(f"Excel exported to: {filepath}")

    return buffer
