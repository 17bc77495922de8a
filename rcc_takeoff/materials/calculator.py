"""
Material Calculator - Calculate material quantities for structural parts.

One pure function per part type turns a typed parameter record into a
PartQuantities object: wet concrete volume, formwork contact area and
reinforcement steel per bar diameter. The shared concrete step then splits
the dry volume into cement, sand and aggregate by the mix ratio.

Unit convention (never auto-converted):
- cross sections, thickness, clear cover, bar spacing: inches
- spans, heights, lengths: feet
- bar diameters: millimeters
"""

import logging
import math
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Union

from pydantic import ValidationError

from ..structural.geometry import (
    bars_across,
    ceil_count,
    circle_area,
    development_length,
    rectangle_perimeter,
    spiral_length,
    tie_cutting_length,
)
from ..structural.parts import (
    BeamParameters,
    BrickworkParameters,
    CCCastingParameters,
    ColumnParameters,
    EarthworkParameters,
    FootingParameters,
    PartType,
    PileParameters,
    RetainingWallParameters,
    SlabParameters,
    StaircaseParameters,
    StructuralPart,
    parse_parameters,
)
from ..structural.units import (
    MixRatio,
    bar_unit_weight,
    feet_to_inch,
    inch_to_feet,
    parse_mix_ratio,
)
from .constants import DEFAULT_CONSTANTS, EstimationConstants, load_constants
from .quantities import (
    AGGREGATE_KEY,
    CEMENT_KEY,
    EARTHWORK_VOLUME_KEY,
    ESTIMATED_TIME_KEY,
    KHOA_BRICKS_KEY,
    MANPOWER_KEY,
    SAND_KEY,
    TOTAL_BRICKS_KEY,
    PartQuantities,
)

logger = logging.getLogger(__name__)

PartLike = Union[StructuralPart, Mapping[str, Any]]


# =============================================================================
# SHARED STEPS
# =============================================================================

def add_bars(quantities: PartQuantities, diameter_mm: int, total_length_ft: float,
             constants: EstimationConstants = DEFAULT_CONSTANTS) -> None:
    """Add a bar group's weight under its diameter."""
    if diameter_mm <= 0 or total_length_ft <= 0:
        return
    if diameter_mm not in constants.standard_diameters:
        logger.warning(f"Non-standard bar diameter {diameter_mm}mm")
    weight = total_length_ft * bar_unit_weight(diameter_mm, constants.unit_weight_divisor)
    quantities.steel.add(diameter_mm, weight)


def apply_concrete_mix(quantities: PartQuantities, ratio: MixRatio,
                       constants: EstimationConstants = DEFAULT_CONSTANTS) -> None:
    """
    Split the wet concrete volume into cement, sand and aggregate.

    A zero ratio (absent or invalid) leaves only steel and formwork.
    """
    if ratio.total <= 0:
        return

    dry = quantities.wet_volume_cft * constants.dry_volume_multiplier
    quantities.dry_volume_cft = dry

    materials = quantities.materials
    materials[CEMENT_KEY] = dry * ratio.cement / (ratio.total * constants.cement_bag_volume_cft)
    materials[SAND_KEY] = dry * ratio.sand / ratio.total

    if ratio.has_aggregate:
        aggregate = dry * ratio.aggregate / ratio.total
        materials[AGGREGATE_KEY] = aggregate
        materials[KHOA_BRICKS_KEY] = aggregate * constants.bricks_per_cft_aggregate


# =============================================================================
# PART CALCULATORS
# =============================================================================

def calculate_column(params: ColumnParameters,
                     constants: EstimationConstants = DEFAULT_CONSTANTS,
                     short: bool = False) -> PartQuantities:
    """Column (multi-floor) or short column (single lift, no lap)."""
    q = PartQuantities()
    floors = 1.0 if short else max(params.number_of_floors, 0.0)
    count = params.total_columns

    width_ft = inch_to_feet(params.column_width)
    depth_ft = inch_to_feet(params.column_depth)
    total_height = params.column_height * floors

    q.wet_volume_cft = width_ft * depth_ft * total_height * count
    q.formwork_sqft = rectangle_perimeter(width_ft, depth_ft) * total_height * count

    # One lap per floor joint
    laps = floors - 1 if floors > 1 else 0.0
    main_length = total_height + params.lapping_length * laps
    add_bars(q, params.main_bar_dia, main_length * params.main_bar_count * count, constants)

    ties = 0
    if params.tie_spacing > 0:
        ties = ceil_count(feet_to_inch(total_height) / params.tie_spacing, constants.noise_digits)
    tie_length = tie_cutting_length(
        params.column_width, params.column_depth, params.clear_cover, params.tie_bar_dia
    )
    add_bars(q, params.tie_bar_dia, tie_length * ties * count, constants)

    apply_concrete_mix(q, parse_mix_ratio(params.mix_ratio), constants)
    return q


def calculate_short_column(params: ColumnParameters,
                           constants: EstimationConstants = DEFAULT_CONSTANTS) -> PartQuantities:
    return calculate_column(params, constants, short=True)


def calculate_beam(params: BeamParameters,
                   constants: EstimationConstants = DEFAULT_CONSTANTS,
                   grade: bool = False) -> PartQuantities:
    """
    Floor beam or grade beam.

    Floor beams are cast with the slab, so the slab thickness is deducted
    from the depth for volume and side forms. Grade beams use full depth.
    """
    q = PartQuantities()
    count = params.total_beams
    span = params.beam_length

    effective_depth_in = params.beam_depth if grade else params.beam_depth - params.slab_thickness
    effective_depth_in = max(effective_depth_in, 0.0)

    width_ft = inch_to_feet(params.beam_width)
    depth_ft = inch_to_feet(effective_depth_in)

    q.wet_volume_cft = width_ft * depth_ft * span * count
    # Two sides and the bottom
    q.formwork_sqft = (width_ft + 2 * depth_ft) * span * count

    bar_length = span + development_length(params.support_width)
    add_bars(q, params.main_top_dia, bar_length * params.main_top_count * count, constants)
    add_bars(q, params.main_bottom_dia, bar_length * params.main_bottom_count * count, constants)

    if params.extra_top_count > 0:
        # span/3 at each support
        extra_length = (span / 3) * 2 * params.extra_top_count * count
        add_bars(q, params.extra_top_dia, extra_length, constants)

    stirrups = 0
    if params.stirrup_spacing > 0 and span > 0:
        stirrups = ceil_count(feet_to_inch(span) / params.stirrup_spacing, constants.noise_digits) + 1
    stirrup_length = tie_cutting_length(
        params.beam_width, params.beam_depth, params.clear_cover, params.stirrup_dia
    )
    add_bars(q, params.stirrup_dia, stirrup_length * stirrups * count, constants)

    apply_concrete_mix(q, parse_mix_ratio(params.mix_ratio), constants)
    return q


def calculate_grade_beam(params: BeamParameters,
                         constants: EstimationConstants = DEFAULT_CONSTANTS) -> PartQuantities:
    return calculate_beam(params, constants, grade=True)


def calculate_slab(params: SlabParameters,
                   constants: EstimationConstants = DEFAULT_CONSTANTS) -> PartQuantities:
    """One-way slab: main bars span the shorter direction."""
    q = PartQuantities()
    length, width = params.length, params.width

    q.wet_volume_cft = length * width * inch_to_feet(params.thickness)
    # Soffit only
    q.formwork_sqft = length * width

    short_span, long_span = min(length, width), max(length, width)

    main_bars = bars_across(long_span, params.main_bar_spacing, noise_digits=constants.noise_digits)
    add_bars(q, params.main_bar_dia, main_bars * short_span, constants)

    dist_bars = bars_across(short_span, params.dist_bar_spacing, noise_digits=constants.noise_digits)
    add_bars(q, params.dist_bar_dia, dist_bars * long_span, constants)

    apply_concrete_mix(q, parse_mix_ratio(params.mix_ratio), constants)
    return q


def calculate_footing(params: FootingParameters,
                      constants: EstimationConstants = DEFAULT_CONSTANTS,
                      layers: int = 1) -> PartQuantities:
    """Footing family: two-way mesh in one (standalone) or two layers."""
    q = PartQuantities()
    count = params.count
    length, width = params.length, params.width
    thickness_ft = inch_to_feet(params.thickness)

    q.wet_volume_cft = length * width * thickness_ft * count
    q.formwork_sqft = rectangle_perimeter(length, width) * thickness_ft * count

    bars_along_length = bars_across(width, params.bar_spacing, noise_digits=constants.noise_digits)
    bars_along_width = bars_across(length, params.bar_spacing, noise_digits=constants.noise_digits)
    mesh_length = bars_along_length * length + bars_along_width * width
    add_bars(q, params.bar_dia, mesh_length * layers * count, constants)

    apply_concrete_mix(q, parse_mix_ratio(params.mix_ratio), constants)
    return q


def calculate_standalone_footing(params: FootingParameters,
                                 constants: EstimationConstants = DEFAULT_CONSTANTS) -> PartQuantities:
    return calculate_footing(params, constants, layers=1)


def calculate_combined_footing(params: FootingParameters,
                               constants: EstimationConstants = DEFAULT_CONSTANTS) -> PartQuantities:
    return calculate_footing(params, constants, layers=2)


def calculate_mat_foundation(params: FootingParameters,
                             constants: EstimationConstants = DEFAULT_CONSTANTS) -> PartQuantities:
    return calculate_footing(params, constants, layers=2)


def calculate_pile_cap(params: FootingParameters,
                       constants: EstimationConstants = DEFAULT_CONSTANTS) -> PartQuantities:
    return calculate_footing(params, constants, layers=2)


def calculate_pile(params: PileParameters,
                   constants: EstimationConstants = DEFAULT_CONSTANTS) -> PartQuantities:
    """Bored pile: circular section, helical ties, no formwork."""
    q = PartQuantities()
    count = params.total_piles
    length = params.pile_length

    q.wet_volume_cft = circle_area(inch_to_feet(params.pile_diameter)) * length * count

    main_length = (length + params.lapping_length) * params.main_bar_count * count
    add_bars(q, params.main_bar_dia, main_length, constants)

    helix = spiral_length(
        params.pile_diameter, params.clear_cover, params.tie_bar_dia, length, params.tie_spacing
    )
    add_bars(q, params.tie_bar_dia, helix * count, constants)

    apply_concrete_mix(q, parse_mix_ratio(params.mix_ratio), constants)
    return q


def calculate_staircase(params: StaircaseParameters,
                        constants: EstimationConstants = DEFAULT_CONSTANTS) -> PartQuantities:
    """Waist-slab staircase with one landing per flight."""
    q = PartQuantities()
    flights = params.number_of_flights
    width = params.flight_width

    inclined = math.hypot(params.flight_length, params.flight_height)
    waist_volume = inclined * width * inch_to_feet(params.waist_slab_thickness)

    steps = 0
    if params.riser_height > 0:
        steps = ceil_count(feet_to_inch(params.flight_height) / params.riser_height,
                           constants.noise_digits)
    step_volume = (
        0.5 * inch_to_feet(params.riser_height) * inch_to_feet(params.tread_width) * width
    ) * steps

    landing_area = params.landing_length * params.landing_width
    landing_volume = landing_area * inch_to_feet(params.landing_slab_thickness)

    q.wet_volume_cft = (waist_volume + step_volume + landing_volume) * flights

    soffit = inclined * width + landing_area
    side_forms = (inclined + params.landing_length) * inch_to_feet(params.waist_slab_thickness) * 2
    q.formwork_sqft = (soffit + side_forms) * flights

    main_bar_length = inclined + params.landing_length
    main_bars = bars_across(width, params.main_bar_spacing, noise_digits=constants.noise_digits)
    add_bars(q, params.main_bar_dia, main_bars * main_bar_length * flights, constants)

    dist_bars = bars_across(main_bar_length, params.dist_bar_spacing, noise_digits=constants.noise_digits)
    add_bars(q, params.dist_bar_dia, dist_bars * width * flights, constants)

    apply_concrete_mix(q, parse_mix_ratio(params.mix_ratio), constants)
    return q


def calculate_retaining_wall(params: RetainingWallParameters,
                             constants: EstimationConstants = DEFAULT_CONSTANTS) -> PartQuantities:
    """Cantilever retaining wall: tapered stem on a base slab."""
    q = PartQuantities()
    length, height = params.wall_length, params.wall_height

    avg_stem_ft = inch_to_feet((params.stem_thickness_top + params.stem_thickness_bottom) / 2)
    base_thickness_ft = inch_to_feet(params.base_slab_thickness)

    stem_volume = length * height * avg_stem_ft
    base_volume = length * params.base_slab_width * base_thickness_ft
    q.wet_volume_cft = stem_volume + base_volume

    q.formwork_sqft = 2 * length * height
    if constants.retaining_wall_base_side_formwork:
        q.formwork_sqft += 2 * length * base_thickness_ft

    digits = constants.noise_digits
    vertical_bars = bars_across(length, params.vertical_bar_spacing, noise_digits=digits)
    add_bars(q, params.vertical_bar_dia, vertical_bars * height, constants)

    horizontal_bars = bars_across(height, params.horizontal_bar_spacing, noise_digits=digits)
    add_bars(q, params.horizontal_bar_dia, horizontal_bars * length, constants)

    base_bars = bars_across(length, params.base_slab_spacing, noise_digits=digits)
    add_bars(q, params.base_slab_dia, base_bars * params.base_slab_width, constants)

    apply_concrete_mix(q, parse_mix_ratio(params.mix_ratio), constants)
    return q


def calculate_brickwork(params: BrickworkParameters,
                        constants: EstimationConstants = DEFAULT_CONSTANTS) -> PartQuantities:
    """Brick masonry: bricks plus cement/sand mortar. No steel, no formwork."""
    q = PartQuantities()

    gross_area = params.total_wall_length * params.wall_height
    door_area = params.number_of_doors * params.door_height * params.door_width
    window_area = params.number_of_windows * params.window_height * params.window_width
    net_area = gross_area - door_area - window_area
    if net_area < 0:
        logger.warning(f"Openings ({door_area + window_area:.2f} sft) exceed wall area "
                       f"({gross_area:.2f} sft); net wall area set to zero")
        net_area = 0.0
    net_volume = net_area * inch_to_feet(params.wall_thickness)

    bricks_per_cft = params.bricks_per_cft
    if bricks_per_cft is None:
        bricks_per_cft = constants.default_bricks_per_cft

    bricks = net_volume * bricks_per_cft * (1 + params.brick_wastage / 100)
    q.materials[TOTAL_BRICKS_KEY] = bricks

    ratio = parse_mix_ratio(params.mortar_ratio)
    if ratio.total <= 0:
        logger.warning("Brickwork without a mortar ratio: bricks only")
        return q

    wet_mortar = net_volume * constants.mortar_wet_fraction
    dry_mortar = wet_mortar * constants.mortar_dry_multiplier * (1 + params.mortar_wastage / 100)
    q.dry_volume_cft = dry_mortar

    q.materials[CEMENT_KEY] = dry_mortar * ratio.cement / (ratio.total * constants.cement_bag_volume_cft)
    q.materials[SAND_KEY] = dry_mortar * ratio.sand / ratio.total
    return q


def calculate_earthwork(params: EarthworkParameters,
                        constants: EstimationConstants = DEFAULT_CONSTANTS) -> PartQuantities:
    """Excavation volume; time/manpower estimates pass through unchanged."""
    q = PartQuantities()
    q.materials[EARTHWORK_VOLUME_KEY] = params.length * params.width * params.depth

    estimation = params.estimation
    if isinstance(estimation, Mapping):
        if "time" in estimation:
            q.annotations[ESTIMATED_TIME_KEY] = estimation["time"]
        if "manpower" in estimation:
            q.annotations[MANPOWER_KEY] = estimation["manpower"]
    elif estimation is not None:
        logger.warning(f"Ignoring earthwork estimation of type {type(estimation).__name__}")
    return q


def calculate_cc_casting(params: CCCastingParameters,
                         constants: EstimationConstants = DEFAULT_CONSTANTS) -> PartQuantities:
    """Lean concrete / soling: no reinforcement, edge forms only."""
    q = PartQuantities()
    thickness_ft = inch_to_feet(params.thickness)
    q.wet_volume_cft = params.length * params.width * thickness_ft
    q.formwork_sqft = rectangle_perimeter(params.length, params.width) * thickness_ft

    apply_concrete_mix(q, parse_mix_ratio(params.mix_ratio), constants)
    return q


CALCULATORS: Dict[PartType, Callable[..., PartQuantities]] = {
    PartType.COLUMN: calculate_column,
    PartType.SHORT_COLUMN: calculate_short_column,
    PartType.BEAM: calculate_beam,
    PartType.GRADE_BEAM: calculate_grade_beam,
    PartType.SLAB: calculate_slab,
    PartType.STANDALONE_FOOTING: calculate_standalone_footing,
    PartType.COMBINED_FOOTING: calculate_combined_footing,
    PartType.MAT_FOUNDATION: calculate_mat_foundation,
    PartType.PILE_CAP: calculate_pile_cap,
    PartType.PILE: calculate_pile,
    PartType.STAIRCASE: calculate_staircase,
    PartType.RETAINING_WALL: calculate_retaining_wall,
    PartType.BRICKWORK: calculate_brickwork,
    PartType.EARTHWORK: calculate_earthwork,
    PartType.CC_CASTING: calculate_cc_casting,
}


# =============================================================================
# DISPATCHER
# =============================================================================

def as_part(part: PartLike) -> Optional[StructuralPart]:
    """Read a StructuralPart from a model or a persisted mapping."""
    if isinstance(part, StructuralPart):
        return part
    if not isinstance(part, Mapping):
        logger.warning(f"Not a structural part: {type(part).__name__}")
        return None
    try:
        return StructuralPart.model_validate(part)
    except ValidationError as e:
        logger.warning(f"Invalid structural part {part.get('id', '')!r}: {e.error_count()} errors")
        return None


class MaterialCalculator:
    """Route structural parts to their part-type calculator."""

    def __init__(self, constants: Optional[EstimationConstants] = None,
                 constants_path: Optional[Path] = None):
        """Initialize calculator with estimation constants."""
        if constants is None:
            constants = load_constants(constants_path)
        self.constants = constants

    def calculate_quantities(self, part: PartLike) -> Optional[PartQuantities]:
        """Raw quantities for a part, or None for unknown part types."""
        structural_part = as_part(part)
        if structural_part is None:
            return None

        part_type = structural_part.part_type
        if part_type is None:
            logger.debug(f"No calculator for part type '{structural_part.type}'")
            return None

        params = parse_parameters(part_type, structural_part.parameters)
        return CALCULATORS[part_type](params, self.constants)

    def calculate_part(self, part: PartLike, rounded: bool = True) -> Dict[str, Any]:
        """Material mapping for a part; empty for unknown part types."""
        quantities = self.calculate_quantities(part)
        if quantities is None:
            return {}
        return quantities.to_dict(
            rounded=rounded,
            decimals=self.constants.decimals,
            noise_digits=self.constants.noise_digits,
        )


_default_calculator: Optional[MaterialCalculator] = None


def get_default_calculator() -> MaterialCalculator:
    global _default_calculator
    if _default_calculator is None:
        _default_calculator = MaterialCalculator()
    return _default_calculator


def calculate_part_quantities(part: PartLike) -> Optional[PartQuantities]:
    return get_default_calculator().calculate_quantities(part)


def calculate_part_materials(part: PartLike) -> Dict[str, Any]:
    """Rounded material mapping for one structural part."""
    return get_default_calculator().calculate_part(part)
