"""Per-part-type calculators and the dispatcher."""

import logging
import math

import pytest

from rcc_takeoff.materials import (
    EstimationConstants,
    MaterialCalculator,
    calculate_part_materials,
    calculate_part_quantities,
)
from rcc_takeoff.materials.quantities import (
    AGGREGATE_KEY,
    CEMENT_KEY,
    EARTHWORK_VOLUME_KEY,
    ESTIMATED_TIME_KEY,
    FORMWORK_KEY,
    KHOA_BRICKS_KEY,
    MANPOWER_KEY,
    SAND_KEY,
    TOTAL_BRICKS_KEY,
    steel_key,
)


def steel_weight(dia_mm, length_ft):
    return length_ft * dia_mm * dia_mm / 533


def steel_keys(materials):
    return [k for k in materials if k.startswith("Steel")]


# =============================================================================
# CONCRETE SPLIT
# =============================================================================

def test_plain_column_cement_bags(make_part):
    part = make_part("column", totalColumns=1, columnWidth=12, columnDepth=12,
                     columnHeight=10, numberOfFloors=1, mixRatio="1:2:4")
    materials = calculate_part_materials(part)

    # 10 cft wet -> 15.4 cft dry -> 15.4 / (7 * 1.25) = 1.76 bags
    assert materials[CEMENT_KEY] == 2
    assert materials[SAND_KEY] == pytest.approx(4.4)
    assert materials[AGGREGATE_KEY] == pytest.approx(8.8)
    assert materials[KHOA_BRICKS_KEY] == 84
    assert materials[FORMWORK_KEY] == pytest.approx(40.0)
    assert steel_keys(materials) == []


def test_two_part_ratio_has_no_aggregate(make_part):
    part = make_part("cc-casting", length=10, width=10, thickness=3, mixRatio="1:4")
    materials = calculate_part_materials(part)
    assert SAND_KEY in materials
    assert AGGREGATE_KEY not in materials
    assert KHOA_BRICKS_KEY not in materials


def test_missing_ratio_returns_steel_and_formwork_only(make_part, column_data):
    column_data["mixRatio"] = ""
    materials = calculate_part_materials(make_part("column", **column_data))

    assert CEMENT_KEY not in materials
    assert SAND_KEY not in materials
    assert FORMWORK_KEY in materials
    assert steel_keys(materials) == [steel_key(10), steel_key(16)]


def test_zero_count_yields_zero_quantities(make_part, column_data):
    column_data["totalColumns"] = 0
    materials = calculate_part_materials(make_part("column", **column_data))

    assert materials
    assert all(value == 0 for value in materials.values())


# =============================================================================
# COLUMNS
# =============================================================================

def test_column_main_bars_lap_per_floor_joint(make_part):
    part = make_part("column", totalColumns=1, columnWidth=12, columnDepth=12,
                     columnHeight=10, numberOfFloors=2, mixRatio="1:2:4",
                     mainBarDia=16, mainBarCount=4, lappingLength=2)
    quantities = calculate_part_quantities(part)

    # (10 * 2 + 2 * 1 lap) * 4 bars
    assert quantities.steel[16] == pytest.approx(steel_weight(16, 88))
    assert quantities.wet_volume_cft == pytest.approx(20.0)


def test_column_ties(make_part):
    part = make_part("column", totalColumns=3, columnWidth=12, columnDepth=12,
                     columnHeight=10, numberOfFloors=1, tieBarDia=8, tieSpacing=6,
                     clearCover=1.5)
    quantities = calculate_part_quantities(part)

    ties = math.ceil(120 / 6)
    tie_length = 4 * 0.75 + 20 * 8 / 304.8
    assert quantities.steel[8] == pytest.approx(steel_weight(8, tie_length * ties * 3))


def test_short_column_is_single_lift(make_part, column_data):
    single = dict(column_data, numberOfFloors=1)
    short = calculate_part_quantities(make_part("short-column", **column_data))
    column = calculate_part_quantities(make_part("column", **single))

    assert short.wet_volume_cft == pytest.approx(column.wet_volume_cft)
    assert short.steel.to_dict() == pytest.approx(column.steel.to_dict())


def test_number_of_floors_defaults_to_one(make_part, column_data):
    del column_data["numberOfFloors"]
    quantities = calculate_part_quantities(make_part("column", **column_data))
    # 4 columns of 1 x 1.25 x 10
    assert quantities.wet_volume_cft == pytest.approx(50.0)


# =============================================================================
# BEAMS
# =============================================================================

@pytest.fixture
def beam_data():
    return {
        "totalBeams": 1,
        "beamLength": 10,
        "beamWidth": 10,
        "beamDepth": 18,
        "slabThickness": 5,
        "mixRatio": "1:2:4",
        "stirrupDia": 8,
        "stirrupSpacing": 6,
        "clearCover": 1.5,
        "supportWidth": 1,
    }


def test_beam_deducts_slab_thickness(make_part, beam_data):
    quantities = calculate_part_quantities(make_part("beam", **beam_data))
    assert quantities.wet_volume_cft == pytest.approx(10 / 12 * 13 / 12 * 10)
    # Bottom plus two sides of the effective depth
    assert quantities.formwork_sqft == pytest.approx(30.0)


def test_grade_beam_uses_full_depth(make_part, beam_data):
    quantities = calculate_part_quantities(make_part("grade-beam", **beam_data))
    assert quantities.wet_volume_cft == pytest.approx(12.5)


def test_beam_bars_and_stirrups(make_part, beam_data):
    beam_data.update(mainTopDia=16, mainTopCount=2, mainBottomDia=20,
                     mainBottomCount=3, extraTopDia=12, extraTopCount=2)
    quantities = calculate_part_quantities(make_part("beam", **beam_data))

    bar_length = 10 + 1
    assert quantities.steel[16] == pytest.approx(steel_weight(16, bar_length * 2))
    assert quantities.steel[20] == pytest.approx(steel_weight(20, bar_length * 3))
    assert quantities.steel[12] == pytest.approx(steel_weight(12, 10 / 3 * 2 * 2))

    stirrups = 120 / 6 + 1
    stirrup_length = 2 * ((10 - 3) + (18 - 3)) / 12 + 20 * 8 / 304.8
    assert quantities.steel[8] == pytest.approx(steel_weight(8, stirrups * stirrup_length))


def test_beam_without_extra_top_bars(make_part, beam_data):
    beam_data.update(extraTopDia=12, extraTopCount=0)
    materials = calculate_part_materials(make_part("beam", **beam_data))
    assert steel_key(12) not in materials


def test_steel_keys_ascend_by_diameter(make_part, beam_data):
    beam_data.update(mainTopDia=20, mainTopCount=2, mainBottomDia=16, mainBottomCount=2)
    materials = calculate_part_materials(make_part("beam", **beam_data))
    assert steel_keys(materials) == [steel_key(8), steel_key(16), steel_key(20)]


# =============================================================================
# SLABS AND FOUNDATIONS
# =============================================================================

def test_slab_main_bars_span_short_direction(make_part, slab_data):
    quantities = calculate_part_quantities(make_part("slab", **slab_data))

    assert quantities.wet_volume_cft == pytest.approx(10 * 20 * 5 / 12)
    assert quantities.formwork_sqft == pytest.approx(200.0)
    # 41 main bars across the 20 ft side, each 10 ft long
    assert quantities.steel[12] == pytest.approx(steel_weight(12, 41 * 10))
    # 21 distribution bars across the 10 ft side, each 20 ft long
    assert quantities.steel[10] == pytest.approx(steel_weight(10, 21 * 20))


def test_zero_spacing_drops_bar_group(make_part, slab_data):
    slab_data["mainBarSpacing"] = 0
    materials = calculate_part_materials(make_part("slab", **slab_data))
    assert steel_key(12) not in materials
    assert steel_key(10) in materials


def test_combined_footing_has_two_layers(make_part):
    data = {"totalFootings": 2, "length": 6, "width": 4, "thickness": 12,
            "mixRatio": "1:2:4", "barDia": 12, "barSpacing": 6, "clearCover": 3}
    standalone = calculate_part_quantities(make_part("standalone-footing", **data))
    combined = calculate_part_quantities(make_part("combined-footing", **data))

    mesh = (math.ceil(48 / 6) + 1) * 6 + (math.ceil(72 / 6) + 1) * 4
    assert standalone.steel[12] == pytest.approx(steel_weight(12, mesh * 2))
    assert combined.steel[12] == pytest.approx(2 * standalone.steel[12])
    assert standalone.wet_volume_cft == pytest.approx(48.0)
    # Perimeter 20 ft x 1 ft deep x 2 footings
    assert standalone.formwork_sqft == pytest.approx(40.0)


def test_pile_cap_reads_its_own_field_names(make_part):
    part = make_part("pile-cap", totalCaps=2, length=8, width=8, depth=30,
                     mixRatio="1:2:4", mainBarDia=16, mainBarSpacing=6)
    quantities = calculate_part_quantities(part)
    assert quantities.wet_volume_cft == pytest.approx(8 * 8 * 2.5 * 2)
    assert 16 in quantities.steel


def test_mat_foundation_count_alias(make_part):
    part = make_part("mat-foundation", totalFoundations=1, length=50, width=40,
                     thickness=24, mixRatio="1:2:4")
    assert calculate_part_quantities(part).wet_volume_cft == pytest.approx(4000.0)


def test_pile_volume_and_spiral(make_part):
    part = make_part("pile", totalPiles=1, pileDiameter=20, pileLength=60,
                     mixRatio="1:1.5:3", mainBarDia=20, mainBarCount=7,
                     tieBarDia=10, tieSpacing=4, clearCover=3, lappingLength=3.5)
    quantities = calculate_part_quantities(part)

    assert quantities.wet_volume_cft == pytest.approx(130.9, abs=0.01)
    assert quantities.formwork_sqft == 0.0
    assert quantities.steel[20] == pytest.approx(steel_weight(20, 63.5 * 7))

    radius = 7 / 12 - 10 / 304.8 / 2
    spiral = 2 * math.pi * radius * (720 / 4)
    assert quantities.steel[10] == pytest.approx(steel_weight(10, spiral))

    materials = calculate_part_materials(part)
    assert FORMWORK_KEY not in materials


# =============================================================================
# STAIRCASE AND RETAINING WALL
# =============================================================================

@pytest.fixture
def staircase_data():
    return {
        "numberOfFlights": 2,
        "flightLength": 10,
        "flightWidth": 4,
        "flightHeight": 5,
        "waistSlabThickness": 6,
        "riserHeight": 6,
        "treadWidth": 10,
        "landingLength": 8,
        "landingWidth": 4,
        "landingSlabThickness": 6,
        "mixRatio": "1:2:4",
        "mainBarDia": 12,
        "mainBarSpacing": 5,
        "distBarDia": 10,
        "distBarSpacing": 7,
    }


def test_staircase_volume(make_part, staircase_data):
    quantities = calculate_part_quantities(make_part("staircase", **staircase_data))

    inclined = math.hypot(10, 5)
    waist = inclined * 4 * 0.5
    steps = 0.5 * 0.5 * (10 / 12) * 4 * 10
    landing = 8 * 4 * 0.5
    assert quantities.wet_volume_cft == pytest.approx((waist + steps + landing) * 2)


def test_staircase_bars(make_part, staircase_data):
    quantities = calculate_part_quantities(make_part("staircase", **staircase_data))

    bar_length = math.hypot(10, 5) + 8
    main_bars = math.ceil(48 / 5) + 1
    dist_bars = math.ceil(bar_length * 12 / 7) + 1
    assert quantities.steel[12] == pytest.approx(steel_weight(12, main_bars * bar_length * 2))
    assert quantities.steel[10] == pytest.approx(steel_weight(10, dist_bars * 4 * 2))


@pytest.fixture
def wall_data():
    return {
        "wallLength": 100,
        "wallHeight": 12,
        "stemThicknessTop": 8,
        "stemThicknessBottom": 16,
        "baseSlabWidth": 8,
        "baseSlabThickness": 15,
        "mixRatio": "1:1.5:3",
        "verticalBarDia": 16,
        "verticalBarSpacing": 6,
        "horizontalBarDia": 12,
        "horizontalBarSpacing": 8,
        "baseSlabDia": 16,
        "baseSlabSpacing": 7,
    }


def test_retaining_wall_volume_and_steel(make_part, wall_data):
    quantities = calculate_part_quantities(make_part("retaining-wall", **wall_data))

    assert quantities.wet_volume_cft == pytest.approx(100 * 12 * 1.0 + 100 * 8 * 1.25)

    vertical = (math.ceil(1200 / 6) + 1) * 12
    base = (math.ceil(1200 / 7) + 1) * 8
    horizontal = (math.ceil(144 / 8) + 1) * 100
    assert quantities.steel[16] == pytest.approx(steel_weight(16, vertical + base))
    assert quantities.steel[12] == pytest.approx(steel_weight(12, horizontal))


def test_retaining_wall_base_side_formwork_is_configurable(make_part, wall_data):
    part = make_part("retaining-wall", **wall_data)

    with_sides = calculate_part_quantities(part)
    assert with_sides.formwork_sqft == pytest.approx(2 * 100 * 12 + 2 * 100 * 1.25)

    calculator = MaterialCalculator(
        constants=EstimationConstants(retaining_wall_base_side_formwork=False)
    )
    without_sides = calculator.calculate_quantities(part)
    assert without_sides.formwork_sqft == pytest.approx(2 * 100 * 12)


# =============================================================================
# BRICKWORK, EARTHWORK, CC CASTING
# =============================================================================

def test_brickwork_bricks_and_mortar(make_part):
    part = make_part("brickwork", totalWallLength=10, wallHeight=10, wallThickness=12,
                     mortarRatio="1:4")
    materials = calculate_part_materials(part)

    # 100 cft at the default 11.5 bricks/cft
    assert materials[TOTAL_BRICKS_KEY] == 1150
    # 25 cft wet mortar -> 33.25 cft dry
    assert materials[CEMENT_KEY] == math.ceil(33.25 / (5 * 1.25))
    assert materials[SAND_KEY] == pytest.approx(26.6)
    assert FORMWORK_KEY not in materials
    assert steel_keys(materials) == []


def test_brickwork_without_mortar_ratio(make_part):
    part = make_part("brickwork", totalWallLength=10, wallHeight=10, wallThickness=12)
    assert calculate_part_materials(part) == {TOTAL_BRICKS_KEY: 1150}


def test_brick_wastage_increases_count(make_part, brickwork_data):
    counts = []
    for wastage in (0, 5, 10):
        brickwork_data["brickWastage"] = wastage
        materials = calculate_part_materials(make_part("brickwork", **brickwork_data))
        counts.append(materials[TOTAL_BRICKS_KEY])
    assert counts[0] < counts[1] < counts[2]


def test_openings_larger_than_wall(make_part):
    part = make_part("brickwork", totalWallLength=5, wallHeight=5, wallThickness=5,
                     numberOfDoors=2, doorHeight=7, doorWidth=3.5, mortarRatio="1:6")
    materials = calculate_part_materials(part)
    assert materials[TOTAL_BRICKS_KEY] == 0
    assert materials[CEMENT_KEY] == 0


def test_earthwork_passes_estimates_through(make_part):
    part = make_part("earthwork", length=10, width=10, depth=5,
                     estimation={"time": "3 days", "manpower": 12})
    assert calculate_part_materials(part) == {
        EARTHWORK_VOLUME_KEY: 500.0,
        ESTIMATED_TIME_KEY: "3 days",
        MANPOWER_KEY: 12,
    }


def test_earthwork_without_estimation(make_part):
    part = make_part("earthwork", length=10, width=10, depth=5)
    assert calculate_part_materials(part) == {EARTHWORK_VOLUME_KEY: 500.0}


def test_cc_casting_edge_formwork(make_part):
    part = make_part("cc-casting", length=10, width=10, thickness=3, mixRatio="1:2:4")
    quantities = calculate_part_quantities(part)
    assert quantities.wet_volume_cft == pytest.approx(25.0)
    assert quantities.formwork_sqft == pytest.approx(10.0)
    assert len(quantities.steel) == 0


# =============================================================================
# DISPATCHER
# =============================================================================

def test_unknown_type_yields_empty_mapping(make_part):
    assert calculate_part_materials(make_part("foundation-wall", length=10)) == {}
    assert calculate_part_quantities(make_part("foundation-wall")) is None


def test_mapping_input(column_data):
    persisted = {"id": "p1", "name": "C1", "type": "column", "data": column_data}
    assert calculate_part_materials(persisted) == calculate_part_materials(dict(persisted))
    assert CEMENT_KEY in calculate_part_materials(persisted)


def test_mapping_without_type_yields_empty_mapping():
    assert calculate_part_materials({"name": "orphan", "data": {}}) == {}


@pytest.mark.parametrize("ratio", ["nan:2:4", "inf:1:1", "1:nan", "1e400:1:1"])
def test_non_finite_ratio_skips_concrete_split(make_part, column_data, ratio):
    column_data["mixRatio"] = ratio
    materials = calculate_part_materials(make_part("column", **column_data))

    assert CEMENT_KEY not in materials
    assert SAND_KEY not in materials
    assert FORMWORK_KEY in materials
    assert steel_keys(materials) == [steel_key(10), steel_key(16)]


def test_type_tag_is_normalized(make_part, slab_data):
    assert calculate_part_materials(make_part("Slab", **slab_data)) == \
        calculate_part_materials(make_part("slab", **slab_data))


def test_numeric_strings_and_feet_inches(make_part):
    numeric = make_part("cc-casting", length=10, width=10, thickness=3, mixRatio="1:2:4")
    textual = make_part("cc-casting", length="10'-0\"", width="10", thickness="3",
                        mixRatio="1:2:4")
    assert calculate_part_materials(textual) == calculate_part_materials(numeric)


def test_snake_case_parameters(make_part):
    part = make_part("cc-casting", length=10, width=10, thickness=3, mix_ratio="1:2:4")
    assert CEMENT_KEY in calculate_part_materials(part)


def test_missing_fields_give_partial_result(make_part):
    materials = calculate_part_materials(make_part("slab", length=10, width=10))
    assert materials == {FORMWORK_KEY: 100.0}


def test_non_standard_diameter_warns(make_part, column_data, caplog):
    column_data["mainBarDia"] = 18
    with caplog.at_level(logging.WARNING):
        materials = calculate_part_materials(make_part("column", **column_data))
    assert steel_key(18) in materials
    assert "Non-standard bar diameter 18mm" in caplog.text


def test_calculation_is_deterministic(sample_project):
    first = [calculate_part_materials(p) for p in sample_project]
    second = [calculate_part_materials(p) for p in sample_project]
    assert first == second


def test_whole_unit_rounding(make_part, column_data):
    materials = calculate_part_materials(make_part("column", **column_data))
    assert isinstance(materials[CEMENT_KEY], int)
    assert isinstance(materials[KHOA_BRICKS_KEY], int)
    assert materials[SAND_KEY] == round(materials[SAND_KEY], 2)
