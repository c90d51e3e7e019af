from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from pipeheat.thermal.field import FieldScene, temperature_at

logger = logging.getLogger(__name__)

DEFAULT_PADDING_M = 2.0
EMPTY_SCENE_HALF_SPAN_M = 5.0
DEFAULT_GRID_DIMS = (40, 40, 40)

Vertex = Tuple[float, float, float]


@dataclass(frozen=True)
class SceneBounds:
    """Axis-aligned sampling box: horizontal x, lateral y and depth below grade."""

    min_x_m: float
    max_x_m: float
    min_y_m: float
    max_y_m: float
    max_depth_m: float

    @property
    def width_m(self) -> float:
        return self.max_x_m - self.min_x_m

    @property
    def length_m(self) -> float:
        return self.max_y_m - self.min_y_m


@dataclass
class SampleGrid:
    """
    Temperatures sampled on a regular 3D lattice.

    ``values[i, j, k]`` holds the temperature at world x ``i``, elevation ``j``
    and world y ``k``. Elevation runs from ``-max_depth_m`` (``j = 0``) up to
    grade (``j = ny - 1``), so the grid's second axis points up.
    """

    values: NDArray[np.float64]
    bounds: SceneBounds

    @property
    def dims(self) -> Tuple[int, int, int]:
        nx, ny, nz = self.values.shape
        return nx, ny, nz

    @property
    def spacing(self) -> Tuple[float, float, float]:
        nx, ny, nz = self.dims
        return (
            _step(self.bounds.width_m, nx),
            _step(self.bounds.max_depth_m, ny),
            _step(self.bounds.length_m, nz),
        )

    def to_world(self, vertex: Vertex) -> Vertex:
        """Map grid-local coordinates to world ``(x, elevation, y)``."""
        sx, sy, sz = self.spacing
        gx, gy, gz = vertex
        return (
            self.bounds.min_x_m + gx * sx,
            -self.bounds.max_depth_m + gy * sy,
            self.bounds.min_y_m + gz * sz,
        )


def scene_bounds(scene: FieldScene, padding_m: float = DEFAULT_PADDING_M) -> SceneBounds:
    """Box enclosing every pipe's outer radius plus ``padding_m``, from grade to below the deepest feature."""
    if scene.pipes:
        min_x = min(pipe.x_m - pipe.bedding_radius_m for pipe in scene.pipes)
        max_x = max(pipe.x_m + pipe.bedding_radius_m for pipe in scene.pipes)
        min_y = min(pipe.y_m - pipe.bedding_radius_m for pipe in scene.pipes)
        max_y = max(pipe.y_m + pipe.bedding_radius_m for pipe in scene.pipes)
        max_z = max(pipe.z_m + pipe.bedding_radius_m for pipe in scene.pipes)
    else:
        min_x = min_y = -EMPTY_SCENE_HALF_SPAN_M
        max_x = max_y = max_z = EMPTY_SCENE_HALF_SPAN_M

    deepest_layer = scene.layers[-1].depth_bottom_m if scene.layers else 0.0
    return SceneBounds(
        min_x_m=min_x - padding_m,
        max_x_m=max_x + padding_m,
        min_y_m=min_y - padding_m,
        max_y_m=max_y + padding_m,
        max_depth_m=max(max_z, deepest_layer) + padding_m,
    )


def sample_raster(
    scene: FieldScene,
    bounds: SceneBounds,
    width: int,
    height: int,
    workers: Optional[int] = None,
) -> NDArray[np.float64]:
    """
    Sample the cross-section at ``y = 0``.

    Returns an array of shape ``(height, width)``: row 0 lies at grade, the
    last row at ``bounds.max_depth_m``; column 0 at ``bounds.min_x_m``.
    """
    if width < 1 or height < 1:
        raise ValueError("Raster width and height must be at least 1.")
    xs = np.linspace(bounds.min_x_m, bounds.max_x_m, width)
    depths = np.linspace(0.0, bounds.max_depth_m, height)
    raster = np.empty((height, width), dtype=float)

    def fill_row(row: int) -> None:
        depth = float(depths[row])
        for col, x in enumerate(xs):
            raster[row, col] = temperature_at(scene, float(x), depth)

    _run_rows(height, fill_row, workers)
    logger.debug("Sampled %dx%d raster over %.2f m x %.2f m.", width, height, bounds.width_m, bounds.max_depth_m)
    return raster


def sample_grid(
    scene: FieldScene,
    bounds: SceneBounds,
    dims: Sequence[int] = DEFAULT_GRID_DIMS,
    workers: Optional[int] = None,
) -> SampleGrid:
    """Sample the field on an ``nx x ny x nz`` lattice spanning ``bounds``."""
    nx, ny, nz = (int(value) for value in dims)
    if min(nx, ny, nz) < 2:
        raise ValueError("Grid dimensions must be at least 2 along every axis.")
    xs = np.linspace(bounds.min_x_m, bounds.max_x_m, nx)
    depths = np.linspace(bounds.max_depth_m, 0.0, ny)
    ys = np.linspace(bounds.min_y_m, bounds.max_y_m, nz)
    values = np.empty((nx, ny, nz), dtype=float)

    def fill_slab(i: int) -> None:
        x = float(xs[i])
        for j, depth in enumerate(depths):
            for k, y in enumerate(ys):
                values[i, j, k] = temperature_at(scene, x, float(depth), float(y))

    _run_rows(nx, fill_slab, workers)
    logger.debug("Sampled %dx%dx%d grid.", nx, ny, nz)
    return SampleGrid(values=values, bounds=bounds)


def _run_rows(count: int, fill: Callable[[int], None], workers: Optional[int]) -> None:
    if not workers or workers <= 1 or count <= 1:
        for index in range(count):
            fill(index)
        return

    block = max(1, -(-count // workers))

    def fill_block(start: int) -> None:
        for index in range(start, min(start + block, count)):
            fill(index)

    with ThreadPoolExecutor(max_workers=workers) as executor:
        # list() re-raises the first worker exception here.
        list(executor.map(fill_block, range(0, count, block)))


def _step(span: float, count: int) -> float:
    if count <= 1:
        return 0.0
    return span / (count - 1)
