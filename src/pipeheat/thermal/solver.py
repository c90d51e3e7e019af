from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from pipeheat.model import Pipe, PipeOrientation, SoilLayer, soil_layer_issues
from pipeheat.thermal.field import FieldScene, line_source_rise
from pipeheat.thermal.resistance import SourceResistanceResult, solve_source_resistances
from pipeheat.thermal.soil import effective_k_for_path, effective_k_for_pipe

logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Input geometry that cannot be solved; carries every issue found."""

    def __init__(self, issues: Sequence[str]) -> None:
        self.issues: List[str] = list(issues)
        message = "; ".join(self.issues) if self.issues else "Invalid configuration."
        super().__init__(message)


@dataclass(frozen=True)
class InteractionResult:
    """Contribution of one heat source to one affected pipe."""

    source_id: str
    source_name: str
    path_conductivity_w_per_mk: float
    real_distance_m: float
    image_distance_m: float
    temperature_rise_c: float


@dataclass
class AffectedPipeResult:
    pipe_id: str
    pipe_name: str
    interactions: List[InteractionResult] = field(default_factory=list)
    total_temperature_rise_c: float = 0.0
    final_temperature_c: float = 0.0


@dataclass(frozen=True)
class PipeTemperature:
    pipe_id: str
    pipe_name: str
    final_temperature_c: float


@dataclass
class SolveResult:
    """Outcome of a solve request, ready for reporting and field sampling."""

    temperatures: List[PipeTemperature]
    sources: List[SourceResistanceResult]
    affected: List[AffectedPipeResult]
    scene: FieldScene
    ambient_temp_c: float

    def temperature_of(self, pipe_id: str) -> float:
        for entry in self.temperatures:
            if entry.pipe_id == pipe_id:
                return entry.final_temperature_c
        raise KeyError(pipe_id)


def validate_inputs(pipes: Sequence[Pipe], layers: Sequence[SoilLayer]) -> List[str]:
    """Collect configuration issues that must be fixed before solving."""
    issues: List[str] = list(soil_layer_issues(layers))
    seen: set[str] = set()
    for pipe in pipes:
        issues.extend(pipe.validate())
        if pipe.identifier in seen:
            issues.append(f"{pipe.name}: duplicate pipe identifier {pipe.identifier!r}.")
        seen.add(pipe.identifier)
    return issues


def pair_distances(source: Pipe, affected: Pipe) -> Tuple[float, float]:
    """
    Return ``(d_real, d_image)`` between a source and an affected pipe.

    Pipes sharing an orientation use the plane both cross; crossing pipes fall
    back to a depth-only estimate. ``d_real`` is clamped to the source's outer
    radius.
    """
    if source.orientation is affected.orientation:
        lateral = source.lateral_position_m - affected.lateral_position_m
        d_real = math.hypot(lateral, source.z_m - affected.z_m)
        d_image = math.hypot(lateral, source.z_m + affected.z_m)
    else:
        d_real = abs(source.z_m - affected.z_m)
        d_image = source.z_m + affected.z_m
    return max(d_real, source.bedding_radius_m), d_image


def solve(pipes: Sequence[Pipe], layers: Sequence[SoilLayer], ambient_temp_c: float) -> SolveResult:
    """
    Compute heat-source fluxes and affected-pipe temperatures.

    Raises:
        ConfigurationError: when the soil column is empty or a pipe sits above grade.
    """
    issues = validate_inputs(pipes, layers)
    if issues:
        for issue in issues:
            logger.warning("Configuration issue: %s", issue)
        raise ConfigurationError(issues)

    heat_sources = [pipe for pipe in pipes if pipe.is_heat_source]
    affected_pipes = [pipe for pipe in pipes if not pipe.is_heat_source]

    source_results: List[SourceResistanceResult] = []
    heat_fluxes: Dict[str, float] = {}
    for source in heat_sources:
        soil_k = effective_k_for_pipe(source, layers)
        result = solve_source_resistances(source, soil_k, ambient_temp_c)
        source_results.append(result)
        heat_fluxes[source.identifier] = result.heat_flux_w_per_m

    affected_results: List[AffectedPipeResult] = []
    for affected in affected_pipes:
        entry = AffectedPipeResult(pipe_id=affected.identifier, pipe_name=affected.name)
        for source in heat_sources:
            if source.identifier == affected.identifier:
                continue
            d_real, d_image = pair_distances(source, affected)
            k_path = effective_k_for_path((source.x_m, source.z_m), (affected.x_m, affected.z_m), layers)
            rise = line_source_rise(heat_fluxes[source.identifier], k_path, d_real, d_image)
            entry.interactions.append(
                InteractionResult(
                    source_id=source.identifier,
                    source_name=source.name,
                    path_conductivity_w_per_mk=k_path,
                    real_distance_m=d_real,
                    image_distance_m=d_image,
                    temperature_rise_c=rise,
                )
            )
            entry.total_temperature_rise_c += rise
        entry.final_temperature_c = ambient_temp_c + entry.total_temperature_rise_c
        affected_results.append(entry)

    temperatures = [
        PipeTemperature(
            pipe_id=pipe.identifier,
            pipe_name=pipe.name,
            final_temperature_c=float(pipe.temperature_c),  # validated above
        )
        for pipe in heat_sources
    ]
    temperatures.extend(
        PipeTemperature(
            pipe_id=entry.pipe_id,
            pipe_name=entry.pipe_name,
            final_temperature_c=entry.final_temperature_c,
        )
        for entry in affected_results
    )

    scene = FieldScene.from_pipes(
        pipes,
        layers,
        ambient_temp_c,
        heat_fluxes=heat_fluxes,
        temperatures={entry.pipe_id: entry.final_temperature_c for entry in temperatures},
    )
    logger.info(
        "Solved %d heat source(s) and %d affected pipe(s) over %d soil layer(s).",
        len(heat_sources),
        len(affected_pipes),
        len(layers),
    )
    return SolveResult(
        temperatures=temperatures,
        sources=source_results,
        affected=affected_results,
        scene=scene,
        ambient_temp_c=ambient_temp_c,
    )
