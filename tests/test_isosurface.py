"""Tests for marching-cubes isosurface extraction."""

import math

import numpy as np
import pytest

from pipeheat.thermal.isosurface import build_isosurfaces, extract, extract_world, interpolate_vertex
from pipeheat.thermal.marching_tables import EDGE_CORNERS, EDGE_TABLE, TRI_TABLE
from pipeheat.thermal.sampling import sample_grid, scene_bounds
from pipeheat.thermal.solver import solve


def _edges_crossed(mask):
    bits = 0
    for edge, (a, b) in enumerate(EDGE_CORNERS):
        if ((mask >> a) & 1) != ((mask >> b) & 1):
            bits |= 1 << edge
    return bits


def test_tables_cover_every_mask():
    assert len(EDGE_TABLE) == 256
    assert len(TRI_TABLE) == 256
    assert EDGE_TABLE[0] == EDGE_TABLE[255] == 0
    assert TRI_TABLE[0] == TRI_TABLE[255] == ()


def test_triangles_only_use_crossed_edges():
    for mask in range(256):
        row = TRI_TABLE[mask]
        assert len(row) % 3 == 0
        used = 0
        for edge in row:
            used |= 1 << edge
        assert EDGE_TABLE[mask] == _edges_crossed(mask)
        assert used == EDGE_TABLE[mask]


@pytest.mark.parametrize("isolevel", [0.0, 4.9, 5.1, 100.0])
def test_uniform_grid_has_no_surface(isolevel):
    assert extract(np.full((5, 4, 6), 5.0), isolevel) == []


def test_single_corner_below_isolevel():
    samples = np.ones((2, 2, 2))
    samples[0, 0, 0] = 0.0
    triangles = extract(samples, 0.5)
    assert triangles == [((0.0, 0.5, 0.0), (0.0, 0.0, 0.5), (0.5, 0.0, 0.0))]


def test_interpolate_vertex_linear():
    point = interpolate_vertex(25.0, (0.0, 0.0, 0.0), (2.0, 0.0, 0.0), 20.0, 30.0)
    assert point == pytest.approx((1.0, 0.0, 0.0))


def test_interpolate_vertex_flat_edge_returns_first_point():
    p1 = (1.0, 2.0, 3.0)
    assert interpolate_vertex(0.5, p1, (2.0, 2.0, 3.0), 0.5, 0.5 + 1e-12) == p1
    assert interpolate_vertex(0.5, p1, (2.0, 2.0, 3.0), 0.5, math.nan) == p1


def test_near_identical_values_stay_finite():
    samples = np.full((3, 3, 3), 1.0)
    samples[1:, :, :] = 1.0 + 1e-12
    triangles = extract(samples, 1.0 + 5e-13)
    assert triangles
    for triangle in triangles:
        for vertex in triangle:
            assert all(math.isfinite(coord) for coord in vertex)


def test_sphere_surface_lies_near_radius():
    n = 12
    centre = (n - 1) / 2.0
    axis = np.arange(n, dtype=float) - centre
    xx, yy, zz = np.meshgrid(axis, axis, axis, indexing="ij")
    samples = np.sqrt(xx**2 + yy**2 + zz**2)

    triangles = extract(samples, 3.0)
    assert len(triangles) > 50
    for triangle in triangles:
        for vertex in triangle:
            radius = math.dist(vertex, (centre, centre, centre))
            assert 2.5 < radius < 3.5


def test_extract_rejects_non_volume():
    with pytest.raises(ValueError):
        extract(np.zeros((4, 4)), 1.0)


def test_extract_world_maps_into_bounds(single_layer, bare_source):
    result = solve([bare_source], single_layer, 17.0)
    bounds = scene_bounds(result.scene)
    grid = sample_grid(result.scene, bounds, (10, 10, 4))
    mesh = extract_world(grid, 60.0)

    assert not mesh.is_empty
    assert mesh.vertex_count == 3 * len(mesh.triangles)
    for triangle in mesh.triangles:
        for x, elevation, y in triangle:
            assert bounds.min_x_m - 1e-9 <= x <= bounds.max_x_m + 1e-9
            assert -bounds.max_depth_m - 1e-9 <= elevation <= 1e-9
            assert bounds.min_y_m - 1e-9 <= y <= bounds.max_y_m + 1e-9


def test_build_isosurfaces_one_mesh_per_level(single_layer, bare_source):
    result = solve([bare_source], single_layer, 17.0)
    meshes = build_isosurfaces(result.scene, [40.0, 500.0], (10, 10, 4))

    assert [mesh.isolevel_c for mesh in meshes] == [40.0, 500.0]
    assert meshes[0].triangles
    assert meshes[1].is_empty
    assert build_isosurfaces(result.scene, [], (10, 10, 4)) == []
