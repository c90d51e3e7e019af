"""
Marching-cubes extraction of constant-temperature surfaces.

Samples come from ``pipeheat.thermal.sampling.sample_grid``; triangles are
produced in grid-local coordinates (one unit per lattice step) and can be
mapped to world space through ``SampleGrid.to_world``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import ArrayLike

from pipeheat.thermal.field import FieldScene
from pipeheat.thermal.marching_tables import CORNER_OFFSETS, EDGE_CORNERS, EDGE_TABLE, TRI_TABLE
from pipeheat.thermal.sampling import DEFAULT_GRID_DIMS, SampleGrid, sample_grid, scene_bounds

logger = logging.getLogger(__name__)

FLAT_EDGE_TOLERANCE = 1e-9

Vertex = Tuple[float, float, float]
Triangle = Tuple[Vertex, Vertex, Vertex]


@dataclass
class Mesh:
    """Triangle soup for a single isolevel."""

    isolevel_c: float
    triangles: List[Triangle] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.triangles

    @property
    def vertex_count(self) -> int:
        return 3 * len(self.triangles)


def interpolate_vertex(isolevel: float, p1: Vertex, p2: Vertex, v1: float, v2: float) -> Vertex:
    """Point on the segment ``p1``-``p2`` where the linear interpolant equals ``isolevel``.

    Falls back to ``p1`` when the end values are (nearly) equal or the result is not finite.
    """
    diff = v2 - v1
    if not math.isfinite(diff) or abs(diff) < FLAT_EDGE_TOLERANCE:
        return p1
    mu = (isolevel - v1) / diff
    point = (
        p1[0] + mu * (p2[0] - p1[0]),
        p1[1] + mu * (p2[1] - p1[1]),
        p1[2] + mu * (p2[2] - p1[2]),
    )
    if not all(math.isfinite(coord) for coord in point):
        return p1
    return point


def extract(samples: ArrayLike, isolevel: float) -> List[Triangle]:
    """
    Run marching cubes over a ``[nx, ny, nz]`` scalar array.

    Every cell whose corner mask is neither 0 nor 255 contributes the
    triangles listed for that mask. Samples outside the array read as 0.
    """
    values = np.asarray(samples, dtype=float)
    if values.ndim != 3:
        raise ValueError(f"Expected a 3D sample array, got shape {values.shape}.")
    nx, ny, nz = values.shape
    if min(nx, ny, nz) < 2:
        return []

    masks = _cube_masks(values, isolevel)
    triangles: List[Triangle] = []
    for x, y, z in zip(*np.nonzero((masks != 0) & (masks != 255))):
        _polygonise(values, int(x), int(y), int(z), int(masks[x, y, z]), isolevel, triangles)
    return triangles


def extract_world(grid: SampleGrid, isolevel: float) -> Mesh:
    """Extract an isosurface from a sampled grid and map it to world ``(x, elevation, y)``."""
    local = extract(grid.values, isolevel)
    triangles = [
        (grid.to_world(a), grid.to_world(b), grid.to_world(c))
        for a, b, c in local
    ]
    logger.debug("Isolevel %.2f °C: %d triangle(s).", isolevel, len(triangles))
    return Mesh(isolevel_c=isolevel, triangles=triangles)


def build_isosurfaces(
    scene: FieldScene,
    levels: Sequence[float],
    dims: Sequence[int] = DEFAULT_GRID_DIMS,
    *,
    workers: Optional[int] = None,
    grid: Optional[SampleGrid] = None,
) -> List[Mesh]:
    """Sample the scene once and extract one world-space mesh per requested level (°C)."""
    if not levels:
        return []
    if grid is None:
        grid = sample_grid(scene, scene_bounds(scene), dims, workers=workers)
    meshes = [extract_world(grid, float(level)) for level in levels]
    logger.info(
        "Extracted %d isosurface(s) on a %s grid (%d triangle(s) total).",
        len(meshes),
        "x".join(str(n) for n in grid.dims),
        sum(len(mesh.triangles) for mesh in meshes),
    )
    return meshes


def _cube_masks(values: np.ndarray, isolevel: float) -> np.ndarray:
    below = values < isolevel
    nx, ny, nz = values.shape
    masks = np.zeros((nx - 1, ny - 1, nz - 1), dtype=np.int16)
    for bit, (dx, dy, dz) in enumerate(CORNER_OFFSETS):
        corner = below[dx : nx - 1 + dx, dy : ny - 1 + dy, dz : nz - 1 + dz]
        masks |= corner.astype(np.int16) << bit
    return masks


def _sample(values: np.ndarray, x: int, y: int, z: int) -> float:
    nx, ny, nz = values.shape
    if x < 0 or y < 0 or z < 0 or x >= nx or y >= ny or z >= nz:
        return 0.0
    return float(values[x, y, z])


def _polygonise(
    values: np.ndarray,
    x: int,
    y: int,
    z: int,
    mask: int,
    isolevel: float,
    out: List[Triangle],
) -> None:
    edges = EDGE_TABLE[mask]
    if edges == 0:
        return

    corners = [(float(x + dx), float(y + dy), float(z + dz)) for dx, dy, dz in CORNER_OFFSETS]
    corner_values = [_sample(values, x + dx, y + dy, z + dz) for dx, dy, dz in CORNER_OFFSETS]

    edge_points: List[Optional[Vertex]] = [None] * 12
    for edge, (a, b) in enumerate(EDGE_CORNERS):
        if edges & (1 << edge):
            edge_points[edge] = interpolate_vertex(
                isolevel, corners[a], corners[b], corner_values[a], corner_values[b]
            )

    row = TRI_TABLE[mask]
    for i in range(0, len(row), 3):
        # Table order reversed to flip the winding.
        p1 = edge_points[row[i + 2]]
        p2 = edge_points[row[i + 1]]
        p3 = edge_points[row[i]]
        if p1 is not None and p2 is not None and p3 is not None:
            out.append((p1, p2, p3))
