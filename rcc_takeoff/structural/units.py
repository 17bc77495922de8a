"""
Unit Conversion Utilities
Handles the mixed unit convention of regional RCC estimating:
- Cross sections, thickness, clear cover, bar spacing in inches
- Spans, heights and lengths in feet
- Bar diameters in millimeters
- Feet-inches strings (e.g., 6'-6", 4'-0") accepted where a length is expected
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import NewType, Optional, Union

logger = logging.getLogger(__name__)

Feet = NewType("Feet", float)
Inches = NewType("Inches", float)
MillimeterDiameter = NewType("MillimeterDiameter", int)

INCHES_PER_FOOT = 12.0
MM_PER_INCH = 25.4

# kg per linear foot = dia^2 / 533 (approximate steel density relation)
UNIT_WEIGHT_DIVISOR = 533.0


def inch_to_feet(inches: float) -> Feet:
    return Feet(inches / INCHES_PER_FOOT)


def feet_to_inch(feet: float) -> Inches:
    return Inches(feet * INCHES_PER_FOOT)


def mm_to_inch(mm: float) -> Inches:
    return Inches(mm / MM_PER_INCH)


def mm_to_feet(mm: float) -> Feet:
    return Feet(mm / (MM_PER_INCH * INCHES_PER_FOOT))


def bar_unit_weight(diameter_mm: float, divisor: float = UNIT_WEIGHT_DIVISOR) -> float:
    """Linear weight of a reinforcement bar in kg per foot."""
    if divisor <= 0:
        return 0.0
    return (diameter_mm * diameter_mm) / divisor


def feet_inch_to_feet(feet_inch_str: str) -> Optional[float]:
    """
    Convert a feet-inches string to decimal feet.

    Formats supported:
    - "6'-6"" -> 6.5
    - "6'-6" -> 6.5
    - "6'6"" -> 6.5 (no dash)
    - "6-6" -> 6.5
    - "6'" -> 6.0
    - "9"" -> 0.75

    Args:
        feet_inch_str: String in feet-inches format

    Returns:
        Value in feet, or None if parsing fails
    """
    if not feet_inch_str:
        return None

    s = feet_inch_str.strip()

    # 6'-6" / 6'-6 / 6'6"
    match = re.match(r"^(\d+)['’][\-\s]?(\d+(?:\.\d+)?)[\"”]?$", s)
    if match:
        return int(match.group(1)) + float(match.group(2)) / INCHES_PER_FOOT

    # 6-6 (feet-inches without symbols)
    match = re.match(r"^(\d+)\-(\d+(?:\.\d+)?)$", s)
    if match:
        return int(match.group(1)) + float(match.group(2)) / INCHES_PER_FOOT

    # Just feet: 6'
    match = re.match(r"^(\d+(?:\.\d+)?)['’]$", s)
    if match:
        return float(match.group(1))

    # Just inches: 9"
    match = re.match(r"^(\d+(?:\.\d+)?)[\"”]$", s)
    if match:
        return float(match.group(1)) / INCHES_PER_FOOT

    return None


def parse_length(value: Union[str, int, float, None], unit: str) -> Optional[float]:
    """
    Parse a length value into the field's own unit ("ft" or "in").

    Plain numbers (and numeric strings) are taken to already be in the
    field's unit. Feet-inches strings are converted.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)

    s = str(value).strip()
    if not s:
        return None

    try:
        return float(s)
    except ValueError:
        pass

    feet = feet_inch_to_feet(s)
    if feet is None:
        return None
    return feet * INCHES_PER_FOOT if unit == "in" else feet


@dataclass(frozen=True)
class MixRatio:
    """Cement:sand[:aggregate] proportion by volume."""
    cement: float = 0.0
    sand: float = 0.0
    aggregate: float = 0.0

    @property
    def total(self) -> float:
        return self.cement + self.sand + self.aggregate

    @property
    def has_aggregate(self) -> bool:
        return self.aggregate > 0

    def __str__(self) -> str:
        parts = [self.cement, self.sand]
        if self.has_aggregate:
            parts.append(self.aggregate)
        return ":".join(f"{p:g}" for p in parts)


def parse_mix_ratio(ratio_str: Optional[str]) -> MixRatio:
    """
    Parse a mix ratio string like "1:1.5:3" (concrete) or "1:6" (mortar).

    An empty or malformed ratio yields a zero ratio (total 0) so callers
    skip the concrete split instead of dividing by zero.
    """
    if not ratio_str:
        return MixRatio()

    parts = [p.strip() for p in str(ratio_str).split(":")]
    try:
        values = [float(p) for p in parts]
    except ValueError:
        logger.warning(f"Invalid mix ratio '{ratio_str}', ignoring concrete split")
        return MixRatio()

    if len(values) > 3 or any(v < 0 or not math.isfinite(v) for v in values):
        logger.warning(f"Unsupported mix ratio '{ratio_str}', ignoring concrete split")
        return MixRatio()

    values += [0.0] * (3 - len(values))
    ratio = MixRatio(cement=values[0], sand=values[1], aggregate=values[2])
    if not math.isfinite(ratio.total):
        logger.warning(f"Mix ratio '{ratio_str}' out of range, ignoring concrete split")
        return MixRatio()
    return ratio
