"""
Cost projection - price aggregated material quantities.

The price table is external data; the default table in
rules/material_prices.yaml is only used by the command line.
"""

from .cost_projector import (
    MaterialPriceTable,
    CostLine,
    CostProjection,
    STEEL_PRICE_KEY,
    project_cost,
    project_cost_by_type,
)

__all__ = [
    "MaterialPriceTable",
    "CostLine",
    "CostProjection",
    "STEEL_PRICE_KEY",
    "project_cost",
    "project_cost_by_type",
]
