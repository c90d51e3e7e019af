"""Tests for the point temperature field."""

import math

import pytest

from pipeheat.model import Pipe, PipeOrientation, PipeRole
from pipeheat.thermal.field import FieldScene, heat_flux_at, line_source_rise, temperature_at
from pipeheat.thermal.solver import solve


def _source(name, x_m, z_m=1.5, temperature_c=232.0, **kwargs):
    return Pipe(
        name=name,
        role=PipeRole.HEAT_SOURCE,
        orientation=PipeOrientation.PARALLEL,
        x_m=x_m,
        z_m=z_m,
        outer_diameter_m=0.2,
        temperature_c=temperature_c,
        identifier=name,
        **kwargs,
    )


def test_centre_of_source_returns_its_temperature(single_layer):
    hot = _source("hot", 0.0)
    other = _source("other", 0.6, temperature_c=90.0)
    result = solve([hot, other], single_layer, 17.0)

    assert temperature_at(result.scene, 0.0, 1.5) == 232.0
    assert temperature_at(result.scene, 0.6, 1.5) == 90.0


def test_inside_affected_pipe_returns_its_solved_temperature(single_layer, bare_source, affected_pipe):
    result = solve([bare_source, affected_pipe], single_layer, 17.0)
    assert temperature_at(result.scene, 1.0, 1.5) == pytest.approx(result.temperature_of("affected"))


def test_bedding_annulus_returns_surface_temperature(single_layer):
    bedded = _source("bedded", 0.0, bedding_thickness_m=0.2, bedding_conductivity_w_per_mk=0.27)
    result = solve([bedded], single_layer, 17.0)
    q = result.sources[0].heat_flux_w_per_m
    expected = 17.0 + q / (2.0 * math.pi * 1.5) * math.log(2.0 * 1.5 / 0.3)

    assert temperature_at(result.scene, 0.2, 1.5) == pytest.approx(expected)


def test_grade_is_at_ambient(single_layer, bare_source):
    result = solve([bare_source], single_layer, 17.0)
    assert temperature_at(result.scene, 0.7, 0.0) == pytest.approx(17.0)


def test_superposition_of_identical_sources_doubles_rise(single_layer):
    left = _source("left", -5.0)
    right = _source("right", 5.0)
    ambient = 17.0

    alone = solve([left], single_layer, ambient)
    both = solve([left, right], single_layer, ambient)

    single_rise = temperature_at(alone.scene, 0.0, 1.5) - ambient
    double_rise = temperature_at(both.scene, 0.0, 1.5) - ambient
    assert single_rise > 0.0
    assert double_rise == pytest.approx(2.0 * single_rise, rel=1e-9)


def test_perpendicular_source_uses_lateral_y(single_layer):
    crossing = Pipe(
        name="crossing",
        role=PipeRole.HEAT_SOURCE,
        orientation=PipeOrientation.PERPENDICULAR,
        y_m=2.0,
        z_m=1.5,
        outer_diameter_m=0.2,
        temperature_c=150.0,
    )
    result = solve([crossing], single_layer, 17.0)

    assert temperature_at(result.scene, -4.0, 1.5, 2.0) == 150.0
    near = temperature_at(result.scene, 0.0, 1.5, 2.5)
    far = temperature_at(result.scene, 0.0, 1.5, 4.0)
    assert near > far > 17.0


def test_field_without_sources_is_ambient(single_layer, affected_pipe):
    result = solve([affected_pipe], single_layer, 12.0)
    assert temperature_at(result.scene, 3.0, 2.0) == 12.0


def test_empty_scene_is_ambient():
    scene = FieldScene(pipes=(), layers=(), ambient_temp_c=9.0)
    assert temperature_at(scene, 0.0, 1.0) == 9.0


def test_line_source_rise_guards():
    assert line_source_rise(100.0, 0.0, 1.0, 2.0) == 0.0
    assert line_source_rise(100.0, 1.5, 0.0, 2.0) == 0.0
    assert line_source_rise(100.0, 1.5, 2.0, 2.0) == 0.0
    assert line_source_rise(100.0, 1.5, 1.0, 2.0) == pytest.approx(100.0 / (2.0 * math.pi * 1.5) * math.log(2.0))


def test_heat_flows_away_from_source(single_layer, bare_source):
    result = solve([bare_source], single_layer, 17.0)
    qx, qz = heat_flux_at(result.scene, 1.0, 1.5)
    assert qx > 0.0
    qx_left, _ = heat_flux_at(result.scene, -1.0, 1.5)
    assert qx_left < 0.0
    assert math.isfinite(qz)


def test_temperature_range_spans_pipes_and_ambient(single_layer, bare_source, affected_pipe):
    result = solve([bare_source, affected_pipe], single_layer, 17.0)
    assert result.scene.temperature_range() == (17.0, 232.0)
