from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from pipeheat.model import Pipe

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceResistanceResult:
    """Per-length thermal resistances (K·m/W) and heat flux (W/m) of one heat source."""

    pipe_id: str
    pipe_name: str
    r_pipe: float
    r_insulation: float
    r_bedding: float
    r_soil: float
    r_total: float
    heat_flux_w_per_m: float
    soil_conductivity_w_per_mk: float


def radial_resistance(inner_radius_m: float, outer_radius_m: float, conductivity_w_per_mk: float) -> float:
    """Cylindrical shell conduction resistance ``ln(r_o / r_i) / (2πk)``.

    Missing layers (no conductivity or no thickness) contribute nothing.
    """
    if conductivity_w_per_mk <= 0.0 or inner_radius_m <= 0.0 or outer_radius_m <= inner_radius_m:
        return 0.0
    return math.log(outer_radius_m / inner_radius_m) / (2.0 * math.pi * conductivity_w_per_mk)


def soil_resistance(depth_m: float, outer_radius_m: float, soil_conductivity_w_per_mk: float) -> float:
    """Buried line-source resistance ``ln(2z / r) / (2πk)`` between the outer surface and grade."""
    if soil_conductivity_w_per_mk <= 0.0 or outer_radius_m <= 0.0 or depth_m <= 0.0:
        return 0.0
    return math.log((2.0 * depth_m) / outer_radius_m) / (2.0 * math.pi * soil_conductivity_w_per_mk)


def solve_source_resistances(
    pipe: Pipe,
    soil_conductivity_w_per_mk: float,
    ambient_temp_c: float,
) -> SourceResistanceResult:
    """Build the series resistance network of a heat source and derive its heat flux.

    Degenerate geometry never raises; it simply yields ``Q = 0``.
    """
    r_pipe = radial_resistance(pipe.inner_radius_m, pipe.pipe_radius_m, pipe.wall_conductivity_w_per_mk)
    r_insulation = radial_resistance(
        pipe.pipe_radius_m,
        pipe.insulation_radius_m,
        pipe.insulation_conductivity_w_per_mk,
    )
    r_bedding = radial_resistance(
        pipe.insulation_radius_m,
        pipe.bedding_radius_m,
        pipe.bedding_conductivity_w_per_mk,
    )
    r_soil = soil_resistance(pipe.z_m, pipe.bedding_radius_m, soil_conductivity_w_per_mk)

    r_total = r_pipe + r_insulation + r_bedding + r_soil
    pipe_temp_c = pipe.temperature_c if pipe.temperature_c is not None else ambient_temp_c

    heat_flux = 0.0
    if r_total > 0.0 and math.isfinite(r_total):
        heat_flux = (pipe_temp_c - ambient_temp_c) / r_total
        if not math.isfinite(heat_flux):
            heat_flux = 0.0

    logger.debug(
        "%s: R_pipe=%.5f R_ins=%.5f R_bed=%.5f R_soil=%.5f K·m/W -> Q=%.3f W/m",
        pipe.name,
        r_pipe,
        r_insulation,
        r_bedding,
        r_soil,
        heat_flux,
    )
    return SourceResistanceResult(
        pipe_id=pipe.identifier,
        pipe_name=pipe.name,
        r_pipe=r_pipe,
        r_insulation=r_insulation,
        r_bedding=r_bedding,
        r_soil=r_soil,
        r_total=r_total,
        heat_flux_w_per_m=heat_flux,
        soil_conductivity_w_per_mk=soil_conductivity_w_per_mk,
    )
