"""
Cost Projector - Price aggregated material quantities.

Prices are supplied by the caller (or loaded from rules/material_prices.yaml
by the CLI); the estimation engine itself never looks prices up.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from .. import RULES_DIR
from ..materials.quantities import (
    AGGREGATE_KEY,
    CEMENT_KEY,
    KHOA_BRICKS_KEY,
    SAND_KEY,
    STEEL_PREFIX,
    TOTAL_BRICKS_KEY,
    is_numeric,
)

logger = logging.getLogger(__name__)

STEEL_PRICE_KEY = "Steel (kg)"
DEFAULT_PRICES_PATH = RULES_DIR / "material_prices.yaml"

# Priced buckets, in report order
PRICE_KEYS = [CEMENT_KEY, SAND_KEY, AGGREGATE_KEY, STEEL_PRICE_KEY, TOTAL_BRICKS_KEY]

# Material keys priced at another key's rate
PRICED_AS = {
    KHOA_BRICKS_KEY: TOTAL_BRICKS_KEY,
}


@dataclass
class MaterialPriceTable:
    """Unit price per canonical material key."""
    prices: Dict[str, float] = field(default_factory=dict)
    currency: str = "BDT"

    def price(self, key: str) -> float:
        return self.prices.get(key, 0.0)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MaterialPriceTable":
        """
        Build from {"currency": ..., "prices": {...}} or a flat key -> price map.
        """
        if not isinstance(data, Mapping):
            logger.warning(f"Price table must be a mapping, got {type(data).__name__}; no prices loaded")
            return cls()
        raw = data.get("prices")
        if not isinstance(raw, Mapping):
            raw = data
        prices = {}
        for key, value in raw.items():
            if key == "currency":
                continue
            try:
                prices[str(key)] = float(value)
            except (TypeError, ValueError):
                logger.warning(f"Ignoring non-numeric price for {key!r}: {value!r}")
        return cls(prices=prices, currency=str(data.get("currency", "BDT")))

    @classmethod
    def from_yaml(cls, path: Optional[Path] = None) -> "MaterialPriceTable":
        path = Path(path) if path else DEFAULT_PRICES_PATH
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        table = cls.from_dict(data)
        logger.info(f"Loaded {len(table.prices)} material prices from {path}")
        return table

    def to_dict(self) -> dict:
        return {"currency": self.currency, "prices": dict(self.prices)}


@dataclass
class CostLine:
    """Cost of one priced bucket."""
    material: str
    quantity: float
    unit_price: float

    @property
    def amount(self) -> float:
        return self.quantity * self.unit_price

    def to_dict(self) -> dict:
        return {
            "material": self.material,
            "quantity": round(self.quantity, 2),
            "unit_price": self.unit_price,
            "amount": round(self.amount, 2),
        }


@dataclass
class CostProjection:
    """Projected material cost."""
    lines: List[CostLine] = field(default_factory=list)
    currency: str = "BDT"

    @property
    def total(self) -> float:
        return sum(line.amount for line in self.lines)

    def line(self, material: str) -> Optional[CostLine]:
        for line in self.lines:
            if line.material == material:
                return line
        return None

    def to_dict(self) -> dict:
        return {
            "currency": self.currency,
            "lines": [line.to_dict() for line in self.lines],
            "total": round(self.total, 2),
        }


def price_bucket(key: str) -> Optional[str]:
    """Price key for a material key, or None if it is not priced."""
    if key.startswith(STEEL_PREFIX):
        return STEEL_PRICE_KEY
    if key in PRICED_AS:
        return PRICED_AS[key]
    if key in PRICE_KEYS:
        return key
    return None


def project_cost(materials: Mapping[str, Any], prices: MaterialPriceTable) -> CostProjection:
    """Multiply material quantities by unit prices, per priced bucket."""
    quantities: Dict[str, float] = {}
    for key, value in materials.items():
        bucket = price_bucket(key)
        if bucket is None or not is_numeric(value):
            continue
        quantities[bucket] = quantities.get(bucket, 0.0) + value

    lines = [
        CostLine(material=key, quantity=quantities[key], unit_price=prices.price(key))
        for key in PRICE_KEYS
        if key in quantities
    ]
    return CostProjection(lines=lines, currency=prices.currency)


def project_cost_by_type(materials_by_type: Mapping[str, Mapping[str, Any]],
                         prices: MaterialPriceTable) -> Dict[str, CostProjection]:
    return {
        part_type: project_cost(materials, prices)
        for part_type, materials in materials_by_type.items()
    }
