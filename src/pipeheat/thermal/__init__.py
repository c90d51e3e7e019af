"""
Steady-state heat transfer between buried pipes.

Heat sources are reduced to a series resistance network that yields their
heat flux per metre; every other pipe, and every point of the soil, then
picks up a temperature rise from each source and its image across grade.
The field can be sampled on 2D rasters or 3D grids and contoured with
marching cubes.
"""

from .field import FieldPipe, FieldScene, heat_flux_at, temperature_at
from .isosurface import Mesh, build_isosurfaces, extract, extract_world, interpolate_vertex
from .resistance import SourceResistanceResult, radial_resistance, soil_resistance, solve_source_resistances
from .sampling import SampleGrid, SceneBounds, sample_grid, sample_raster, scene_bounds
from .soil import effective_k_for_path, effective_k_for_pipe, k_at_depth
from .solver import (
    AffectedPipeResult,
    ConfigurationError,
    InteractionResult,
    PipeTemperature,
    SolveResult,
    solve,
    validate_inputs,
)

__all__ = [
    "AffectedPipeResult",
    "ConfigurationError",
    "FieldPipe",
    "FieldScene",
    "InteractionResult",
    "Mesh",
    "PipeTemperature",
    "SampleGrid",
    "SceneBounds",
    "SolveResult",
    "SourceResistanceResult",
    "build_isosurfaces",
    "effective_k_for_path",
    "effective_k_for_pipe",
    "extract",
    "extract_world",
    "heat_flux_at",
    "interpolate_vertex",
    "k_at_depth",
    "radial_resistance",
    "sample_grid",
    "sample_raster",
    "scene_bounds",
    "soil_resistance",
    "solve",
    "solve_source_resistances",
    "temperature_at",
    "validate_inputs",
]
