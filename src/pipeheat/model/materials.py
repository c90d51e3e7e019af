from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from .pipe_system import Material, MaterialKind
from .units import inches_to_m

MOIST_SOIL_CONDUCTIVITY = 1.5

SATURATED_SOIL = Material(name="Saturated Soil", kind=MaterialKind.SOIL, conductivity_w_per_mk=2.5)
WET_SOIL = Material(name="Wet Soil", kind=MaterialKind.SOIL, conductivity_w_per_mk=2.0)
MOIST_SOIL = Material(
    name="Moist Soil",
    kind=MaterialKind.SOIL,
    conductivity_w_per_mk=MOIST_SOIL_CONDUCTIVITY,
    notes="Typical native soil; used when no layer data is available.",
)
LOAM = Material(name="Loam", kind=MaterialKind.SOIL, conductivity_w_per_mk=1.0)
ASPHALT = Material(name="Asphalt", kind=MaterialKind.SOIL, conductivity_w_per_mk=0.75)
DRY_SOIL = Material(name="Dry Soil", kind=MaterialKind.SOIL, conductivity_w_per_mk=0.5)
DRY_GRAVEL = Material(name="Dry Gravel", kind=MaterialKind.SOIL, conductivity_w_per_mk=0.35)
DRY_SAND = Material(name="Dry Sand", kind=MaterialKind.SOIL, conductivity_w_per_mk=0.27)

CARBON_STEEL = Material(name="Carbon Steel", kind=MaterialKind.PIPE, conductivity_w_per_mk=54.0)
STAINLESS_STEEL = Material(name="Stainless Steel", kind=MaterialKind.PIPE, conductivity_w_per_mk=16.0)
HDPE = Material(name="HDPE", kind=MaterialKind.PIPE, conductivity_w_per_mk=0.45)

NO_INSULATION = Material(name="No Insulation", kind=MaterialKind.INSULATION, conductivity_w_per_mk=0.0)
CALCIUM_SILICATE = Material(name="Calcium Silicate", kind=MaterialKind.INSULATION, conductivity_w_per_mk=0.05)
FIBREGLASS = Material(name="Fiberglass", kind=MaterialKind.INSULATION, conductivity_w_per_mk=0.04)
POLYURETHANE_FOAM = Material(name="Polyurethane Foam", kind=MaterialKind.INSULATION, conductivity_w_per_mk=0.025)

NO_BEDDING = Material(name="None", kind=MaterialKind.BEDDING, conductivity_w_per_mk=0.0)
GRAVEL_BEDDING = Material(name="Gravel", kind=MaterialKind.BEDDING, conductivity_w_per_mk=0.35)
SAND_BEDDING = Material(name="Sand", kind=MaterialKind.BEDDING, conductivity_w_per_mk=0.27)

MATERIALS: List[Material] = [
    SATURATED_SOIL,
    WET_SOIL,
    MOIST_SOIL,
    LOAM,
    ASPHALT,
    DRY_SOIL,
    DRY_GRAVEL,
    DRY_SAND,
    CARBON_STEEL,
    STAINLESS_STEEL,
    HDPE,
    NO_INSULATION,
    CALCIUM_SILICATE,
    FIBREGLASS,
    POLYURETHANE_FOAM,
    NO_BEDDING,
    GRAVEL_BEDDING,
    SAND_BEDDING,
]

_MATERIAL_LOOKUP = {(material.kind, material.name.lower()): material for material in MATERIALS}


@dataclass(frozen=True)
class PipeSizePreset:
    """Nominal pipe size with schedule 40 dimensions."""

    nominal: str
    outer_diameter_m: float
    wall_thickness_m: float

    @property
    def label(self) -> str:
        return f"{self.nominal}-inch Sch. 40"


# Outer diameter and wall thickness in inches.
_SCHEDULE_40_IN = (
    ("1", 1.315, 0.133),
    ("2", 2.375, 0.154),
    ("3", 3.5, 0.216),
    ("4", 4.5, 0.237),
    ("6", 6.625, 0.280),
    ("8", 8.625, 0.322),
    ("10", 10.75, 0.365),
    ("12", 12.75, 0.406),
)

PIPE_PRESETS: Sequence[PipeSizePreset] = tuple(
    PipeSizePreset(nominal=nominal, outer_diameter_m=inches_to_m(od), wall_thickness_m=inches_to_m(wall))
    for nominal, od, wall in _SCHEDULE_40_IN
)

_PRESET_LOOKUP = {preset.nominal: preset for preset in PIPE_PRESETS}


def all_materials() -> Sequence[Material]:
    return list(MATERIALS)


def find_material(name: str, kind: Optional[MaterialKind] = None) -> Material | None:
    """Look a preset up by (case-insensitive) name, optionally restricted to one kind."""
    key = name.strip().lower()
    if kind is not None:
        return _MATERIAL_LOOKUP.get((kind, key))
    for material in MATERIALS:
        if material.name.lower() == key:
            return material
    return None


def materials_for_kinds(kinds: Iterable[MaterialKind]) -> List[Material]:
    allowed = set(kinds)
    return [material for material in MATERIALS if material.kind in allowed]


def find_pipe_preset(nominal: str) -> PipeSizePreset | None:
    return _PRESET_LOOKUP.get(nominal.strip().rstrip('"'))
