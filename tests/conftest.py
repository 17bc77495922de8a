"""Shared fixtures for the material estimation tests."""

import pytest

from rcc_takeoff.structural import StructuralPart


@pytest.fixture
def make_part():
    """Factory: make_part('column', totalColumns=1, ...) -> StructuralPart."""
    def _make(part_type, name="", **data):
        return StructuralPart(name=name, type=part_type, data=data)
    return _make


@pytest.fixture
def column_data():
    return {
        "totalColumns": 4,
        "columnWidth": 12,
        "columnDepth": 15,
        "columnHeight": 10,
        "numberOfFloors": 2,
        "mixRatio": "1:1.5:3",
        "mainBarDia": 16,
        "mainBarCount": 6,
        "tieBarDia": 10,
        "tieSpacing": 6,
        "clearCover": 1.5,
        "lappingLength": 2,
    }


@pytest.fixture
def slab_data():
    return {
        "length": 10,
        "width": 20,
        "thickness": 5,
        "mixRatio": "1:2:4",
        "mainBarDia": 12,
        "mainBarSpacing": 6,
        "distBarDia": 10,
        "distBarSpacing": 6,
        "clearCover": 1,
    }


@pytest.fixture
def brickwork_data():
    return {
        "totalWallLength": 500,
        "wallHeight": 10,
        "wallThickness": 5,
        "numberOfDoors": 4,
        "doorHeight": 7,
        "doorWidth": 3.5,
        "numberOfWindows": 6,
        "windowHeight": 4,
        "windowWidth": 5,
        "mortarRatio": "1:6",
        "bricksPerCft": 12.5,
        "brickWastage": 5,
        "mortarWastage": 3,
    }


@pytest.fixture
def sample_project(make_part, column_data, slab_data, brickwork_data):
    return [
        make_part("column", name="C1", **column_data),
        make_part("slab", name="Roof slab", **slab_data),
        make_part("brickwork", name="External walls", **brickwork_data),
        make_part("earthwork", name="Excavation", length=50, width=40, depth=5,
                  estimation={"time": "4 days", "manpower": "10 labourers"}),
    ]
