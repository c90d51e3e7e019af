"""Tests for raster and grid sampling of the field."""

import numpy as np
import pytest

from pipeheat.model import build_soil_layers
from pipeheat.thermal.field import FieldScene, temperature_at
from pipeheat.thermal.sampling import SceneBounds, sample_grid, sample_raster, scene_bounds
from pipeheat.thermal.solver import solve


@pytest.fixture
def solved(single_layer, bare_source, affected_pipe):
    return solve([bare_source, affected_pipe], single_layer, 17.0)


def test_scene_bounds_pad_pipes_and_cover_soil(solved):
    bounds = scene_bounds(solved.scene)
    assert bounds.min_x_m == pytest.approx(-0.1 - 2.0)
    assert bounds.max_x_m == pytest.approx(1.05 + 2.0)
    assert bounds.min_y_m == pytest.approx(-0.1 - 2.0)
    assert bounds.max_y_m == pytest.approx(0.1 + 2.0)
    # Soil column (5 m) is deeper than any pipe.
    assert bounds.max_depth_m == pytest.approx(7.0)


def test_scene_bounds_empty_scene():
    scene = FieldScene(pipes=(), layers=tuple(build_soil_layers([(1.5, 1.0)])), ambient_temp_c=10.0)
    bounds = scene_bounds(scene)
    assert (bounds.min_x_m, bounds.max_x_m) == (-7.0, 7.0)
    assert (bounds.min_y_m, bounds.max_y_m) == (-7.0, 7.0)
    assert bounds.max_depth_m == 7.0


def test_sample_raster_shape_and_grade_row(solved):
    bounds = scene_bounds(solved.scene)
    raster = sample_raster(solved.scene, bounds, 9, 6)
    assert raster.shape == (6, 9)
    np.testing.assert_allclose(raster[0], 17.0)
    assert np.all(np.isfinite(raster))
    assert raster[1:].max() > 17.0


def test_sample_raster_matches_point_evaluation(solved):
    bounds = SceneBounds(min_x_m=-1.0, max_x_m=1.0, min_y_m=-1.0, max_y_m=1.0, max_depth_m=3.0)
    raster = sample_raster(solved.scene, bounds, 5, 4)
    assert raster[2, 3] == temperature_at(solved.scene, 0.5, 2.0)


def test_threaded_sampling_matches_serial(solved):
    bounds = scene_bounds(solved.scene)
    serial = sample_raster(solved.scene, bounds, 12, 7)
    threaded = sample_raster(solved.scene, bounds, 12, 7, workers=3)
    np.testing.assert_array_equal(serial, threaded)

    grid_serial = sample_grid(solved.scene, bounds, (5, 4, 3))
    grid_threaded = sample_grid(solved.scene, bounds, (5, 4, 3), workers=4)
    np.testing.assert_array_equal(grid_serial.values, grid_threaded.values)


def test_sample_grid_axes_and_world_mapping(solved):
    bounds = scene_bounds(solved.scene)
    grid = sample_grid(solved.scene, bounds, (4, 5, 3))
    assert grid.values.shape == (4, 5, 3)
    assert grid.dims == (4, 5, 3)

    assert grid.to_world((0.0, 0.0, 0.0)) == pytest.approx((bounds.min_x_m, -bounds.max_depth_m, bounds.min_y_m))
    assert grid.to_world((3.0, 4.0, 2.0)) == pytest.approx((bounds.max_x_m, 0.0, bounds.max_y_m))

    # Last elevation index is grade.
    np.testing.assert_allclose(grid.values[:, -1, :], 17.0)
    expected = temperature_at(
        solved.scene,
        bounds.min_x_m + bounds.width_m / 3.0,
        bounds.max_depth_m / 2.0,
        bounds.min_y_m + bounds.length_m / 2.0,
    )
    assert grid.values[1, 2, 1] == pytest.approx(expected)


def test_sample_grid_rejects_degenerate_dims(solved):
    with pytest.raises(ValueError):
        sample_grid(solved.scene, scene_bounds(solved.scene), (1, 4, 4))
