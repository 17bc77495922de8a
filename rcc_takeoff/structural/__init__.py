"""
Structural part model, unit conventions and geometry primitives.

Modules:
- units: inch/foot/mm conversions, bar unit weight, mix ratio parsing
- geometry: perimeters, hooks, tie cutting length, bar counts, spirals
- parts: part type tags, StructuralPart and typed parameter records
"""

from .units import (
    Feet,
    Inches,
    MillimeterDiameter,
    MixRatio,
    inch_to_feet,
    feet_to_inch,
    mm_to_feet,
    mm_to_inch,
    bar_unit_weight,
    feet_inch_to_feet,
    parse_length,
    parse_mix_ratio,
)

from .geometry import (
    ceil_count,
    rectangle_perimeter,
    circle_area,
    circumference,
    hook_length,
    tie_cutting_length,
    development_length,
    bars_across,
    spiral_length,
)

from .parts import (
    PartType,
    StructuralPart,
    PartParameters,
    ColumnParameters,
    BeamParameters,
    SlabParameters,
    FootingParameters,
    PileParameters,
    StaircaseParameters,
    RetainingWallParameters,
    BrickworkParameters,
    EarthworkParameters,
    CCCastingParameters,
    PARAMETER_TYPES,
    parse_parameters,
)

__all__ = [
    # Units
    'Feet',
    'Inches',
    'MillimeterDiameter',
    'MixRatio',
    'inch_to_feet',
    'feet_to_inch',
    'mm_to_feet',
    'mm_to_inch',
    'bar_unit_weight',
    'feet_inch_to_feet',
    'parse_length',
    'parse_mix_ratio',

    # Geometry
    'ceil_count',
    'rectangle_perimeter',
    'circle_area',
    'circumference',
    'hook_length',
    'tie_cutting_length',
    'development_length',
    'bars_across',
    'spiral_length',

    # Parts
    'PartType',
    'StructuralPart',
    'PartParameters',
    'ColumnParameters',
    'BeamParameters',
    'SlabParameters',
    'FootingParameters',
    'PileParameters',
    'StaircaseParameters',
    'RetainingWallParameters',
    'BrickworkParameters',
    'EarthworkParameters',
    'CCCastingParameters',
    'PARAMETER_TYPES',
    'parse_parameters',
]
