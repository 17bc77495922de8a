"""
Geometry primitives shared by the part calculators.

All lengths returned are in feet unless the name says otherwise.
"""

import math

from .units import INCHES_PER_FOOT, inch_to_feet, mm_to_feet

# Two standard 10d hooks per closed tie/stirrup
HOOK_BAR_DIAMETERS = 2 * 10


def ceil_count(value: float, noise_digits: int = 9) -> int:
    """Ceiling for discrete counts, ignoring float noise (e.g. 20.0000000001)."""
    if value <= 0:
        return 0
    return int(math.ceil(round(value, noise_digits)))


def rectangle_perimeter(width: float, depth: float) -> float:
    return 2 * (width + depth)


def circle_area(diameter: float) -> float:
    radius = diameter / 2
    return math.pi * radius * radius


def circumference(radius: float) -> float:
    return 2 * math.pi * radius


def hook_length(diameter_mm: float) -> float:
    """Length of the two 10d hooks of a tie, in feet."""
    return HOOK_BAR_DIAMETERS * diameter_mm / (25.4 * INCHES_PER_FOOT)


def tie_cutting_length(outer_width_in: float, outer_depth_in: float,
                       cover_in: float, diameter_mm: float) -> float:
    """
    Cutting length of one closed tie/stirrup in feet.

    Perimeter of the confined core (outer dimension less cover on both
    faces, in both directions) plus the hook allowance.
    """
    core_width = inch_to_feet(outer_width_in - 2 * cover_in)
    core_depth = inch_to_feet(outer_depth_in - 2 * cover_in)
    return rectangle_perimeter(core_width, core_depth) + hook_length(diameter_mm)


def development_length(support_width_ft: float) -> float:
    """Anchorage into both supports: half the support width at each end."""
    return 2 * 0.5 * support_width_ft


def bars_across(span_ft: float, spacing_in: float, edge_bar: bool = True,
                noise_digits: int = 9) -> int:
    """
    Number of bars laid across a span at a given spacing.

    Zero or negative spacing means the bar group is absent.
    """
    if spacing_in <= 0 or span_ft <= 0:
        return 0
    count = ceil_count(span_ft * INCHES_PER_FOOT / spacing_in, noise_digits)
    return count + 1 if edge_bar else count


def spiral_length(diameter_in: float, cover_in: float, tie_diameter_mm: float,
                  length_ft: float, pitch_in: float) -> float:
    """
    Helical tie length for one circular member, in feet.

    Circumference at the confined radius (outer radius less cover less half
    the tie bar) times the number of turns over the member length.
    """
    if pitch_in <= 0 or length_ft <= 0:
        return 0.0
    confined_radius = (
        inch_to_feet(diameter_in / 2 - cover_in) - mm_to_feet(tie_diameter_mm) / 2
    )
    if confined_radius <= 0:
        return 0.0
    turns = length_ft * INCHES_PER_FOOT / pitch_in
    return circumference(confined_radius) * turns
