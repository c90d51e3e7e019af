from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from pipeheat.model import Pipe, PipeOrientation, PipeRole, SoilLayer, build_soil_layers
from pipeheat.model import materials as material_catalog


def make_steam_line(
    name: str = "Steam Line",
    *,
    x_m: float = 0.0,
    z_m: float = 1.5,
    temperature_c: float = 232.0,
    nominal: str = "12",
    insulation_thickness_m: float = 0.05,
) -> Pipe:
    """Return an insulated carbon-steel heat source sized from an NPS preset."""

    preset = material_catalog.find_pipe_preset(nominal)
    if preset is None:
        raise ValueError(f"Unknown nominal size {nominal!r}.")
    return Pipe(
        name=name,
        role=PipeRole.HEAT_SOURCE,
        orientation=PipeOrientation.PARALLEL,
        x_m=x_m,
        z_m=z_m,
        temperature_c=temperature_c,
        outer_diameter_m=preset.outer_diameter_m,
        wall_thickness_m=preset.wall_thickness_m,
        wall_conductivity_w_per_mk=material_catalog.CARBON_STEEL.conductivity_w_per_mk,
        insulation_thickness_m=insulation_thickness_m,
        insulation_conductivity_w_per_mk=material_catalog.CALCIUM_SILICATE.conductivity_w_per_mk,
        bedding_thickness_m=0.15,
        bedding_conductivity_w_per_mk=material_catalog.SAND_BEDDING.conductivity_w_per_mk,
    )


def make_affected_pipe(
    name: str,
    *,
    x_m: float = 0.0,
    y_m: float = 0.0,
    z_m: float = 1.2,
    orientation: PipeOrientation = PipeOrientation.PARALLEL,
    nominal: str = "8",
) -> Pipe:
    preset = material_catalog.find_pipe_preset(nominal)
    if preset is None:
        raise ValueError(f"Unknown nominal size {nominal!r}.")
    return Pipe(
        name=name,
        role=PipeRole.AFFECTED_PIPE,
        orientation=orientation,
        x_m=x_m,
        y_m=y_m,
        z_m=z_m,
        outer_diameter_m=preset.outer_diameter_m,
        wall_thickness_m=preset.wall_thickness_m,
        wall_conductivity_w_per_mk=material_catalog.CARBON_STEEL.conductivity_w_per_mk,
    )


def make_soil_column(
    layers: Optional[Sequence[Tuple[float, float]]] = None,
) -> List[SoilLayer]:
    """Moist soil over saturated soil unless ``layers`` of (k, thickness) is given."""
    entries = layers or [
        (material_catalog.MOIST_SOIL.conductivity_w_per_mk, 3.0),
        (material_catalog.SATURATED_SOIL.conductivity_w_per_mk, 6.0),
    ]
    return build_soil_layers(entries)


def make_corridor(source_count: int, *, spacing_m: float = 1.5) -> List[Pipe]:
    """Alternate heat sources and affected pipes along a utility corridor."""
    pipes: List[Pipe] = []
    for index in range(source_count):
        x = index * 2.0 * spacing_m
        pipes.append(make_steam_line(f"Steam {index + 1}", x_m=x))
        pipes.append(make_affected_pipe(f"Main {index + 1}", x_m=x + spacing_m))
    return pipes
