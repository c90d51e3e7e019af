from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple


class PipeRole(Enum):
    """Whether a pipe injects heat or has its temperature solved for."""

    HEAT_SOURCE = "heat_source"
    AFFECTED_PIPE = "affected_pipe"


class PipeOrientation(Enum):
    """Run direction of a pipe relative to the analysed cross-section."""

    PARALLEL = "parallel"
    PERPENDICULAR = "perpendicular"


class MaterialKind(Enum):
    """Where a material can be used in the installation."""

    SOIL = "soil"
    PIPE = "pipe"
    INSULATION = "insulation"
    BEDDING = "bedding"


@dataclass(frozen=True)
class Material:
    """Named thermal conductivity preset."""

    name: str
    kind: MaterialKind
    conductivity_w_per_mk: float
    notes: Optional[str] = None


@dataclass(frozen=True)
class Pipe:
    """
    Buried cylindrical conductor with optional insulation and bedding annuli.

    Parallel pipes run normal to the cross-section and are positioned by
    ``x_m``/``z_m``; perpendicular pipes run along the cross-section's
    horizontal axis and are positioned by ``y_m``/``z_m``. ``z_m`` is the
    centreline depth below grade.
    """

    name: str
    role: PipeRole
    orientation: PipeOrientation
    z_m: float
    outer_diameter_m: float
    wall_thickness_m: float = 0.0
    wall_conductivity_w_per_mk: float = 0.0
    x_m: float = 0.0
    y_m: float = 0.0
    insulation_thickness_m: float = 0.0
    insulation_conductivity_w_per_mk: float = 0.0
    bedding_thickness_m: float = 0.0
    bedding_conductivity_w_per_mk: float = 0.0
    temperature_c: Optional[float] = None
    identifier: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def is_heat_source(self) -> bool:
        return self.role is PipeRole.HEAT_SOURCE

    @property
    def pipe_radius_m(self) -> float:
        return self.outer_diameter_m / 2.0

    @property
    def inner_radius_m(self) -> float:
        return self.pipe_radius_m - self.wall_thickness_m

    @property
    def insulation_radius_m(self) -> float:
        return self.pipe_radius_m + self.insulation_thickness_m

    @property
    def bedding_radius_m(self) -> float:
        """Total outer radius including insulation and bedding."""
        return self.insulation_radius_m + self.bedding_thickness_m

    @property
    def lateral_position_m(self) -> float:
        """Horizontal coordinate in the plane the pipe is drawn in."""
        if self.orientation is PipeOrientation.PERPENDICULAR:
            return self.y_m
        return self.x_m

    def radial_profile_m(self) -> List[Tuple[str, float, float, float]]:
        """Return [(label, inner_radius, outer_radius, conductivity)] from the bore outward."""
        return [
            ("Pipe wall", self.inner_radius_m, self.pipe_radius_m, self.wall_conductivity_w_per_mk),
            ("Insulation", self.pipe_radius_m, self.insulation_radius_m, self.insulation_conductivity_w_per_mk),
            ("Bedding", self.insulation_radius_m, self.bedding_radius_m, self.bedding_conductivity_w_per_mk),
        ]

    def _numeric_fields(self) -> List[Tuple[str, float]]:
        return [
            ("x", self.x_m),
            ("y", self.y_m),
            ("depth (Z)", self.z_m),
            ("outer diameter", self.outer_diameter_m),
            ("wall thickness", self.wall_thickness_m),
            ("wall conductivity", self.wall_conductivity_w_per_mk),
            ("insulation thickness", self.insulation_thickness_m),
            ("insulation conductivity", self.insulation_conductivity_w_per_mk),
            ("bedding thickness", self.bedding_thickness_m),
            ("bedding conductivity", self.bedding_conductivity_w_per_mk),
        ]

    def validate(self) -> Iterable[str]:
        """Yield human readable validation issues."""
        non_finite = [label for label, value in self._numeric_fields() if not math.isfinite(value)]
        if non_finite:
            yield f"{self.name}: {', '.join(non_finite)} must be finite numbers."
            return
        if self.outer_diameter_m <= 0.0:
            yield f"{self.name}: outer diameter must be positive."
        if self.wall_thickness_m < 0.0:
            yield f"{self.name}: wall thickness cannot be negative."
        elif self.wall_thickness_m > self.pipe_radius_m:
            yield f"{self.name}: wall thickness exceeds the pipe radius."
        if self.insulation_thickness_m < 0.0:
            yield f"{self.name}: insulation thickness cannot be negative."
        if self.bedding_thickness_m < 0.0:
            yield f"{self.name}: bedding thickness cannot be negative."
        if self.z_m <= self.bedding_radius_m:
            yield (
                f"{self.name}: pipe depth (Z) must be greater than the total radius "
                "(OD/2 + insulation + bedding)."
            )
        if self.is_heat_source:
            if self.temperature_c is None:
                yield f"{self.name}: heat source requires an operating temperature."
            elif not math.isfinite(self.temperature_c):
                yield f"{self.name}: heat source temperature must be finite."


@dataclass(frozen=True)
class SoilLayer:
    """Horizontal soil slab covering ``[depth_top_m, depth_bottom_m)``."""

    conductivity_w_per_mk: float
    depth_top_m: float
    depth_bottom_m: float
    name: Optional[str] = None

    @property
    def thickness_m(self) -> float:
        return self.depth_bottom_m - self.depth_top_m

    def contains(self, depth_m: float) -> bool:
        return self.depth_top_m <= depth_m < self.depth_bottom_m


def build_soil_layers(
    entries: Iterable[Tuple[float, float]],
    names: Optional[Sequence[Optional[str]]] = None,
) -> List[SoilLayer]:
    """
    Stack ``(conductivity, thickness)`` pairs from grade downward.

    Entries with a non-positive thickness are dropped, so the resulting layers
    are always contiguous and start at depth 0.
    """
    layers: List[SoilLayer] = []
    depth = 0.0
    for index, (conductivity, thickness) in enumerate(entries):
        if thickness <= 0.0:
            continue
        name = names[index] if names is not None and index < len(names) else None
        layers.append(
            SoilLayer(
                conductivity_w_per_mk=conductivity,
                depth_top_m=depth,
                depth_bottom_m=depth + thickness,
                name=name,
            )
        )
        depth += thickness
    return layers


def soil_layer_issues(layers: Sequence[SoilLayer]) -> Iterable[str]:
    """Yield human readable issues for a soil column."""
    if not layers:
        yield "At least one soil layer must be defined."
        return
    if abs(layers[0].depth_top_m) > 1e-9:
        yield "The first soil layer must start at grade (depth 0)."
    for upper, lower in zip(layers, layers[1:]):
        if abs(upper.depth_bottom_m - lower.depth_top_m) > 1e-9:
            yield f"Soil layers must be contiguous (gap or overlap at {upper.depth_bottom_m:.3f} m)."
    for layer in layers:
        if not all(
            math.isfinite(value)
            for value in (layer.conductivity_w_per_mk, layer.depth_top_m, layer.depth_bottom_m)
        ):
            yield "Soil layer conductivity and thickness must be finite numbers."
            continue
        if layer.depth_bottom_m <= layer.depth_top_m:
            yield "Soil layer thickness must be positive."
        if layer.conductivity_w_per_mk < 0.0:
            yield "Soil conductivity cannot be negative."
