"""Tests for report generation."""

import csv
import json

from pipeheat.thermal.report import generate_report
from pipeheat.thermal.solver import solve


def test_generate_report_writes_all_outputs(tmp_path, bare_source, affected_pipe, single_layer):
    result = solve([bare_source, affected_pipe], single_layer, 10.0)

    paths = generate_report(
        result,
        root_dir=tmp_path,
        isotherms=[40.0],
        isotherm_colours=["#00ff00"],
        raster=(20, 12),
        show_flux=True,
        project={"name": "Yard", "location": "North"},
    )

    assert paths.base_dir.parent == tmp_path
    assert paths.base_dir.name.startswith("pipeheat_report_")
    assert paths.heatmap_path is not None and paths.heatmap_path.exists()

    with paths.field_csv_path.open(newline="") as handle:
        rows = list(csv.reader(handle))
    assert rows[0] == ["x_m", "depth_m", "temperature_c"]
    assert len(rows) == 1 + 20 * 12
    assert float(rows[1][1]) == 0.0

    summary = json.loads(paths.summary_path.read_text())
    assert summary["soil_temperature_c"] == 10.0
    assert summary["project"]["name"] == "Yard"
    assert summary["min_field_temp_c"] >= 10.0
    assert summary["max_field_temp_c"] <= 232.0 + 1e-9
    assert [entry["pipe_id"] for entry in summary["heat_sources"]] == ["source"]
    affected = summary["affected_pipes"][0]
    assert affected["pipe_id"] == "affected"
    assert affected["interactions"][0]["source_id"] == "source"
    assert affected["final_temperature_c"] > 10.0


def test_report_without_project(tmp_path, bare_source, single_layer):
    result = solve([bare_source], single_layer, 15.0)
    paths = generate_report(result, root_dir=tmp_path / "nested", raster=(8, 6))

    summary = json.loads(paths.summary_path.read_text())
    assert "project" not in summary
    assert summary["affected_pipes"] == []
    assert paths.field_csv_path.exists()
