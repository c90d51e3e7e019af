from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence, Tuple

from pipeheat.model import Pipe, PipeOrientation, SoilLayer
from pipeheat.thermal.soil import effective_k_for_path, effective_k_for_pipe

FLUX_DELTA_M = 0.01


@dataclass(frozen=True)
class FieldPipe:
    """Pipe as seen by the field function: geometry plus its solved temperature and flux."""

    identifier: str
    name: str
    orientation: PipeOrientation
    x_m: float
    y_m: float
    z_m: float
    pipe_radius_m: float
    insulation_radius_m: float
    bedding_radius_m: float
    temperature_c: float
    is_source: bool
    heat_flux_w_per_m: Optional[float] = None

    @property
    def lateral_m(self) -> float:
        if self.orientation is PipeOrientation.PERPENDICULAR:
            return self.y_m
        return self.x_m

    def _query_lateral(self, x_m: float, y_m: float) -> float:
        if self.orientation is PipeOrientation.PERPENDICULAR:
            return y_m
        return x_m

    def distance_to(self, x_m: float, z_m: float, y_m: float = 0.0) -> float:
        """Distance from the pipe axis in the plane the pipe crosses."""
        return math.hypot(self._query_lateral(x_m, y_m) - self.lateral_m, z_m - self.z_m)

    def image_distance_to(self, x_m: float, z_m: float, y_m: float = 0.0) -> float:
        """Distance to the mirror of the pipe axis reflected across grade."""
        return math.hypot(self._query_lateral(x_m, y_m) - self.lateral_m, z_m + self.z_m)

    def surface_temperature(self, layers: Sequence[SoilLayer], ambient_temp_c: float) -> float:
        """Analytic temperature at the bedding outer surface of a heat source."""
        if not self.heat_flux_w_per_m:
            return ambient_temp_c
        k_soil = effective_k_for_pipe((self.z_m, self.bedding_radius_m), layers)
        if k_soil <= 0.0 or self.bedding_radius_m <= 0.0:
            return ambient_temp_c
        try:
            value = ambient_temp_c + (self.heat_flux_w_per_m / (2.0 * math.pi * k_soil)) * math.log(
                (2.0 * self.z_m) / self.bedding_radius_m
            )
        except ValueError:
            return ambient_temp_c
        return value if math.isfinite(value) else ambient_temp_c


@dataclass(frozen=True)
class FieldScene:
    """
    Precomputed, read-only input for field sampling.

    Holds every pipe with its final temperature, the heat flux of each source,
    the soil column and the undisturbed soil temperature. Instances are safe to
    share between threads.
    """

    pipes: Tuple[FieldPipe, ...]
    layers: Tuple[SoilLayer, ...]
    ambient_temp_c: float

    @property
    def sources(self) -> Tuple[FieldPipe, ...]:
        return tuple(pipe for pipe in self.pipes if pipe.is_source and pipe.heat_flux_w_per_m is not None)

    @classmethod
    def from_pipes(
        cls,
        pipes: Sequence[Pipe],
        layers: Sequence[SoilLayer],
        ambient_temp_c: float,
        *,
        heat_fluxes: Mapping[str, float],
        temperatures: Mapping[str, float],
    ) -> "FieldScene":
        field_pipes = []
        for pipe in pipes:
            temperature = temperatures.get(pipe.identifier)
            if temperature is None:
                temperature = pipe.temperature_c if pipe.temperature_c is not None else ambient_temp_c
            field_pipes.append(
                FieldPipe(
                    identifier=pipe.identifier,
                    name=pipe.name,
                    orientation=pipe.orientation,
                    x_m=pipe.x_m,
                    y_m=pipe.y_m,
                    z_m=pipe.z_m,
                    pipe_radius_m=pipe.pipe_radius_m,
                    insulation_radius_m=pipe.insulation_radius_m,
                    bedding_radius_m=pipe.bedding_radius_m,
                    temperature_c=temperature,
                    is_source=pipe.is_heat_source,
                    heat_flux_w_per_m=heat_fluxes.get(pipe.identifier),
                )
            )
        return cls(pipes=tuple(field_pipes), layers=tuple(layers), ambient_temp_c=ambient_temp_c)

    def temperature_range(self) -> Tuple[float, float]:
        """Return (min, max) over pipe temperatures and the ambient, for colour scales."""
        temps = [pipe.temperature_c for pipe in self.pipes]
        temps.append(self.ambient_temp_c)
        return min(temps), max(temps)


def temperature_at(scene: FieldScene, x_m: float, z_m: float, y_m: float = 0.0) -> float:
    """
    Steady-state temperature at a point below grade.

    ``x_m`` is the horizontal offset in the cross-section, ``z_m`` the depth
    and ``y_m`` the lateral offset along the cross-section's normal. Always
    returns a finite number.
    """
    ambient = scene.ambient_temp_c

    for pipe in scene.pipes:
        distance = pipe.distance_to(x_m, z_m, y_m)
        if distance > pipe.bedding_radius_m:
            continue
        if distance <= pipe.pipe_radius_m:
            return pipe.temperature_c
        if pipe.is_source and pipe.heat_flux_w_per_m:
            return pipe.surface_temperature(scene.layers, ambient)

    total_rise = 0.0
    for source in scene.sources:
        d_real = max(source.distance_to(x_m, z_m, y_m), source.bedding_radius_m)
        d_image = source.image_distance_to(x_m, z_m, y_m)
        query_lateral = y_m if source.orientation is PipeOrientation.PERPENDICULAR else x_m
        k_path = effective_k_for_path((source.lateral_m, source.z_m), (query_lateral, z_m), scene.layers)
        rise = line_source_rise(source.heat_flux_w_per_m or 0.0, k_path, d_real, d_image)
        total_rise += rise

    temperature = ambient + total_rise
    return temperature if math.isfinite(temperature) else ambient


def line_source_rise(heat_flux_w_per_m: float, conductivity_w_per_mk: float, d_real: float, d_image: float) -> float:
    """Temperature rise of a line source plus its same-sign image, or 0 when undefined."""
    if conductivity_w_per_mk <= 0.0 or d_real <= 0.0 or d_image <= d_real:
        return 0.0
    rise = (heat_flux_w_per_m / (2.0 * math.pi * conductivity_w_per_mk)) * math.log(d_image / d_real)
    return rise if math.isfinite(rise) else 0.0


def heat_flux_at(
    scene: FieldScene,
    x_m: float,
    z_m: float,
    y_m: float = 0.0,
    *,
    delta_m: float = FLUX_DELTA_M,
) -> Tuple[float, float]:
    """Forward-difference estimate of ``-∇T`` in the x/depth plane (K/m)."""
    t0 = temperature_at(scene, x_m, z_m, y_m)
    tx = temperature_at(scene, x_m + delta_m, z_m, y_m)
    tz = temperature_at(scene, x_m, z_m + delta_m, y_m)
    return -(tx - t0) / delta_m, -(tz - t0) / delta_m
