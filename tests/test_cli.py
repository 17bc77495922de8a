"""Command line and project file handling."""

import json

import pytest
import yaml

from rcc_takeoff.__main__ import main, parse_param
from rcc_takeoff.materials import load_constants
from rcc_takeoff.project import (
    ProjectFileError,
    build_template,
    load_part_presets,
    load_project,
)
from rcc_takeoff.structural import PartType


def test_presets_cover_every_part_type():
    presets = load_part_presets()
    assert set(presets) == {t.value for t in PartType}


def test_build_template_subset():
    template = build_template(["column", "pile cap", "lintel"], name="Block A")
    assert template["project"] == {"name": "Block A"}
    assert [p["type"] for p in template["parts"]] == ["column", "pile-cap"]


def test_load_yaml_project(tmp_path, column_data):
    path = tmp_path / "project.yaml"
    path.write_text(yaml.safe_dump({
        "project": {"name": "Block A"},
        "parts": [{"id": 7, "name": "C1", "type": "column", "data": column_data}],
    }))

    project = load_project(path)
    assert project.project_id == "Block A"
    assert project.parts[0].id == "7"
    assert project.parts[0].parameters == column_data


def test_load_json_part_list(tmp_path, slab_data):
    path = tmp_path / "parts.json"
    path.write_text(json.dumps([{"type": "slab", "data": slab_data}]))

    project = load_project(path)
    assert project.project_id == "project"
    assert project.parts[0].type == "slab"


@pytest.mark.parametrize("content", [
    "parts: [1, 2",
    "just a string",
    "parts:\n  - name: no type\n",
])
def test_invalid_project_files(tmp_path, content):
    path = tmp_path / "bad.yaml"
    path.write_text(content)
    with pytest.raises(ProjectFileError):
        load_project(path)


def test_missing_project_file(tmp_path):
    with pytest.raises(ProjectFileError):
        load_project(tmp_path / "missing.yaml")


def test_constants_override(tmp_path):
    path = tmp_path / "constants.yaml"
    path.write_text("concrete:\n  dry_volume_multiplier: 1.52\nsteel:\n  unit_weight_divisor: 162.2\n")

    constants = load_constants(path)
    assert constants.dry_volume_multiplier == 1.52
    assert constants.unit_weight_divisor == 162.2
    assert constants.cement_bag_volume_cft == 1.25


def test_constants_fall_back_to_defaults(tmp_path, caplog):
    constants = load_constants(tmp_path / "missing.yaml")
    assert constants.dry_volume_multiplier == 1.54
    assert "using defaults" in caplog.text


def test_parse_param():
    assert parse_param("columnWidth=12") == ("columnWidth", 12.0)
    assert parse_param("mixRatio=1:2:4") == ("mixRatio", "1:2:4")


def test_template_then_estimate(tmp_path, capsys):
    project_path = tmp_path / "project.yaml"
    assert main(["template", "-o", str(project_path)]) == 0

    template = yaml.safe_load(project_path.read_text())
    assert len(template["parts"]) == len(PartType)

    out_dir = tmp_path / "out"
    assert main(["estimate", "-i", str(project_path), "-o", str(out_dir), "--by-type"]) == 0

    output = capsys.readouterr().out
    assert "Project totals" in output
    assert "Cost projection (BDT)" in output
    assert (out_dir / "boq" / "material_estimate.json").exists()


def test_estimate_with_list_price_file(tmp_path, capsys):
    project_path = tmp_path / "project.yaml"
    assert main(["template", "-o", str(project_path), "--types", "column"]) == 0
    prices_path = tmp_path / "prices.yaml"
    prices_path.write_text("- 1\n- 2\n")

    out_dir = tmp_path / "out"
    assert main(["estimate", "-i", str(project_path), "-o", str(out_dir),
                 "--prices", str(prices_path)]) == 0

    output = capsys.readouterr().out
    assert "Cost projection (BDT)" in output
    assert "Project totals" in output


def test_estimate_invalid_file(tmp_path, capsys):
    path = tmp_path / "bad.yaml"
    path.write_text("parts: [1, 2")
    assert main(["estimate", "-i", str(path), "-o", str(tmp_path)]) == 1
    assert "Error:" in capsys.readouterr().out


def test_part_command(capsys):
    assert main(["part", "-t", "column", "--param", "totalColumns=1"]) == 0
    output = capsys.readouterr().out
    assert "Cement (bags)" in output
    assert "Steel 20mm (kg)" in output


def test_part_command_unknown_type(capsys):
    assert main(["part", "-t", "lintel"]) == 1
    assert "Unknown part type" in capsys.readouterr().out


def test_package_paths():
    import rcc_takeoff

    assert (rcc_takeoff.RULES_DIR / "material_constants.yaml").exists()
    assert (rcc_takeoff.RULES_DIR / "material_prices.yaml").exists()
    assert not hasattr(rcc_takeoff, "OUTPUT_DIR")
