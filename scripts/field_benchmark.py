#!/usr/bin/env python3

"""Standalone field benchmark for the pipeheat engine.

Builds a few utility-corridor layouts, solves them, samples the 2D and 3D
temperature fields, extracts isosurfaces and prints timings so performance
can be tracked outside the CLI.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
import sys
from typing import List, Optional

from pipeheat.model import Pipe, PipeOrientation
from pipeheat.thermal.field_preview import save_field_preview
from pipeheat.thermal.isosurface import extract_world
from pipeheat.thermal.sampling import sample_grid, sample_raster, scene_bounds
from pipeheat.thermal.solver import solve

if __package__:
    from ._benchmark_utils import make_affected_pipe, make_corridor, make_soil_column, make_steam_line
else:  # Allow execution via `python field_benchmark.py`
    script_dir = Path(__file__).resolve().parent
    if str(script_dir) not in sys.path:
        sys.path.insert(0, str(script_dir))
    from _benchmark_utils import make_affected_pipe, make_corridor, make_soil_column, make_steam_line  # type: ignore  # noqa: E402


@dataclass
class Scenario:
    name: str
    pipes: List[Pipe]
    ambient_temp_c: float = 15.0
    isolevels_c: Optional[List[float]] = None


def run_scenario(scenario: Scenario, *, grid_size: int = 30, workers: Optional[int] = None) -> None:
    layers = make_soil_column()

    start = time.perf_counter()
    result = solve(scenario.pipes, layers, scenario.ambient_temp_c)
    solve_s = time.perf_counter() - start

    bounds = scene_bounds(result.scene)
    start = time.perf_counter()
    raster = sample_raster(result.scene, bounds, 160, 100, workers=workers)
    raster_s = time.perf_counter() - start

    start = time.perf_counter()
    grid = sample_grid(result.scene, bounds, (grid_size,) * 3, workers=workers)
    grid_s = time.perf_counter() - start

    levels = scenario.isolevels_c or [30.0, 50.0]
    start = time.perf_counter()
    meshes = [extract_world(grid, level) for level in levels]
    extract_s = time.perf_counter() - start

    preview_path = save_field_preview(
        result.scene,
        raster,
        bounds,
        Path.cwd() / f"field_{scenario.name.replace(' ', '_').lower()}.png",
        isotherms=levels,
        title=f"Field preview: {scenario.name}",
        dpi=150,
    )
    print(f"Field preview saved to {preview_path}")

    print(f"\n=== {scenario.name} ===")
    print(f"Solve: {solve_s * 1e3:.2f} ms for {len(scenario.pipes)} pipe(s)")
    for source in result.sources:
        print(f"  {source.pipe_name}: R_total={source.r_total:.4f} K·m/W -> Q={source.heat_flux_w_per_m:.1f} W/m")
    for entry in result.affected:
        print(f"  {entry.pipe_name}: +{entry.total_temperature_rise_c:.2f} °C -> {entry.final_temperature_c:.2f} °C")
    print(f"Raster 160x100: {raster_s:.2f} s, field range {raster.min():.2f}..{raster.max():.2f} °C")
    print(f"Grid {grid_size}^3: {grid_s:.2f} s")
    for mesh in meshes:
        print(f"  Isolevel {mesh.isolevel_c:.1f} °C: {len(mesh.triangles)} triangles")
    print(f"Extraction: {extract_s:.2f} s")


def main() -> None:
    single = Scenario(
        name="Single steam line",
        pipes=[make_steam_line(), make_affected_pipe("Gas Main", x_m=1.5, z_m=1.2)],
    )
    crossing = Scenario(
        name="Steam line with crossing main",
        pipes=[
            make_steam_line(),
            make_affected_pipe(
                "Water Crossing",
                y_m=2.0,
                z_m=2.0,
                orientation=PipeOrientation.PERPENDICULAR,
                nominal="6",
            ),
        ],
    )
    corridor = Scenario(name="Four-source corridor", pipes=make_corridor(4))

    for scenario in (single, crossing, corridor):
        run_scenario(scenario, workers=4)


if __name__ == "__main__":
    main()
