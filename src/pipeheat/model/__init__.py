"""Domain models for buried pipeline thermal interaction."""

from .pipe_system import (
    Material,
    MaterialKind,
    Pipe,
    PipeOrientation,
    PipeRole,
    SoilLayer,
    build_soil_layers,
    soil_layer_issues,
)
from .units import UnitSystem
from . import materials, units

__all__ = [
    "Material",
    "MaterialKind",
    "Pipe",
    "PipeOrientation",
    "PipeRole",
    "SoilLayer",
    "UnitSystem",
    "build_soil_layers",
    "materials",
    "soil_layer_issues",
    "units",
]
