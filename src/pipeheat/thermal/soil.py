from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple, Union

from pipeheat.model import Pipe, SoilLayer
from pipeheat.model.materials import MOIST_SOIL_CONDUCTIVITY

PATH_STEPS = 100
_MIN_PATH_LENGTH_M = 1e-6

Point = Tuple[float, float]


def fallback_conductivity(layers: Sequence[SoilLayer]) -> float:
    """Conductivity used when no better estimate exists: the top layer, else moist soil."""
    if layers:
        return layers[0].conductivity_w_per_mk
    return MOIST_SOIL_CONDUCTIVITY


def k_at_depth(depth_m: float, layers: Sequence[SoilLayer]) -> float:
    """Return the conductivity of the layer containing ``depth_m``.

    Depths at or below the deepest layer's bottom read the deepest layer.
    """
    for layer in layers:
        if layer.depth_top_m <= depth_m < layer.depth_bottom_m:
            return layer.conductivity_w_per_mk
    if layers:
        return layers[-1].conductivity_w_per_mk
    return MOIST_SOIL_CONDUCTIVITY


def effective_k_for_pipe(
    pipe: Union[Pipe, Tuple[float, float]],
    layers: Sequence[SoilLayer],
) -> float:
    """
    Arithmetic mean conductivity of every layer touched by the pipe's outer radius band.

    Args:
        pipe: Either a ``Pipe`` or a ``(centre_depth_m, outer_radius_m)`` pair.
        layers: Soil column ordered from grade downward.
    """
    if isinstance(pipe, Pipe):
        centre_z, outer_radius = pipe.z_m, pipe.bedding_radius_m
    else:
        centre_z, outer_radius = pipe

    total = 0.0
    involved = 0
    for layer in layers:
        if centre_z + outer_radius > layer.depth_top_m and centre_z - outer_radius < layer.depth_bottom_m:
            total += layer.conductivity_w_per_mk
            involved += 1
    if involved:
        return total / involved
    return fallback_conductivity(layers)


def effective_k_for_path(
    start: Point,
    end: Point,
    layers: Sequence[SoilLayer],
    *,
    steps: int = PATH_STEPS,
) -> float:
    """
    Series-resistance average conductivity along a straight segment.

    ``start`` and ``end`` are ``(horizontal_m, depth_m)``. The segment is split
    into ``steps`` equal pieces; each piece contributes ``length / k`` evaluated
    at its midpoint depth. Soil is laterally homogeneous so only depth matters.
    """
    x1, z1 = start
    x2, z2 = end
    length = math.hypot(x2 - x1, z2 - z1)
    if length < _MIN_PATH_LENGTH_M:
        return fallback_conductivity(layers)

    steps = max(int(steps), 1)
    first_mid = z1 + (0.5 / steps) * (z2 - z1)
    last_mid = z1 + ((steps - 0.5) / steps) * (z2 - z1)
    first_index = _containing_layer(first_mid, layers)
    if first_index is not None and first_index == _containing_layer(last_mid, layers):
        # Midpoint depths are monotonic, so every sample sits in the same layer.
        k = layers[first_index].conductivity_w_per_mk
        return k if k > 0.0 else fallback_conductivity(layers)

    piece = length / steps
    total_resistance = 0.0
    for index in range(steps):
        t = (index + 0.5) / steps
        k = k_at_depth(z1 + t * (z2 - z1), layers)
        if k > 0.0:
            total_resistance += piece / k

    if total_resistance == 0.0:
        return fallback_conductivity(layers)
    return length / total_resistance


def _containing_layer(depth_m: float, layers: Sequence[SoilLayer]) -> Optional[int]:
    for index, layer in enumerate(layers):
        if layer.depth_top_m <= depth_m < layer.depth_bottom_m:
            return index
    return None
