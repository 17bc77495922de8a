"""
Reporting - tabular views of a material estimate and Excel export.
"""

from .tables import (
    split_material_key,
    build_parts_df,
    build_totals_df,
    build_by_type_df,
    build_cost_df,
    build_summary_df,
    export_to_excel,
)

__all__ = [
    "split_material_key",
    "build_parts_df",
    "build_totals_df",
    "build_by_type_df",
    "build_cost_df",
    "build_summary_df",
    "export_to_excel",
]
