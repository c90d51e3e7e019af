"""Tests for the command line entry point."""

import json

from pipeheat.io import load_scenario
from pipeheat.main import main


def test_example_run_prints_table(capsys):
    assert main(["--example", "--isosurface-dims", "8"]) == 0

    out = capsys.readouterr().out
    assert "Downtown Steam Crossing" in out
    assert "Existing Gas Main" in out
    assert "°F" in out
    assert "Heat sources:" in out
    assert "Isosurfaces:" in out


def test_write_example_then_run_it(tmp_path, capsys):
    path = tmp_path / "example.json"
    assert main(["--write-example", str(path)]) == 0
    assert load_scenario(path).project.name == "Downtown Steam Crossing"

    assert main([str(path), "--isosurface-dims", "6"]) == 0
    assert "New Steam Line" in capsys.readouterr().out


def test_report_option(tmp_path, capsys):
    assert main(["--example", "--report", str(tmp_path), "--isosurface-dims", "6"]) == 0
    reports = list(tmp_path.glob("pipeheat_report_*"))
    assert len(reports) == 1
    assert (reports[0] / "summary.json").exists()
    assert "Report written to" in capsys.readouterr().out


def test_missing_file_returns_error(tmp_path, capsys):
    assert main([str(tmp_path / "missing.json")]) == 1
    assert "Error:" in capsys.readouterr().err


def test_scenario_without_soil_layers_is_rejected(tmp_path, capsys):
    path = tmp_path / "no_layers.json"
    path.write_text(
        json.dumps(
            {
                "unit_system": "metric",
                "pipes": [
                    {"name": "Steam", "role": "heat_source", "z": 1.5, "outer_diameter": 0.2, "temperature": 150.0}
                ],
            }
        )
    )
    assert main([str(path)]) == 1
    assert "At least one soil layer" in capsys.readouterr().err


def test_no_scenario_given(capsys):
    assert main([]) == 1
    assert "Configuration error" in capsys.readouterr().err


def test_undecodable_file_is_rejected(tmp_path, capsys):
    path = tmp_path / "binary.json"
    path.write_bytes(b'{"name": "\xff\xfe"}')
    assert main([str(path)]) == 1
    assert "not valid UTF-8" in capsys.readouterr().err


def test_nan_depth_is_rejected(tmp_path, capsys):
    path = tmp_path / "nan_depth.json"
    path.write_text(
        '{"soil_layers": [{"conductivity": 1.5, "thickness": 5.0}],'
        ' "pipes": [{"name": "S", "role": "heat_source", "z": NaN,'
        ' "outer_diameter": 0.2, "temperature": 150.0}]}'
    )
    assert main([str(path)]) == 1
    assert "must be finite" in capsys.readouterr().err
