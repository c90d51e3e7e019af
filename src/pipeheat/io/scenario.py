from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from pipeheat.model import (
    MaterialKind,
    Pipe,
    PipeOrientation,
    PipeRole,
    SoilLayer,
    UnitSystem,
    build_soil_layers,
)
from pipeheat.model import materials as material_catalog
from pipeheat.model import units
from pipeheat.thermal.solver import ConfigurationError, SolveResult, solve

logger = logging.getLogger(__name__)

DEFAULT_SOIL_TEMPERATURE_C = 15.0


@dataclass
class ProjectInfo:
    """Free-form project metadata carried through to reports."""

    name: str = "Untitled"
    location: str = ""
    system_number: str = ""
    engineer: str = ""
    evaluation_date: str = ""
    revision: str = ""
    description: str = ""


@dataclass
class IsothermSpec:
    """Contour line requested on the 2D cross-section."""

    temperature_c: float
    colour: str = "#ffdd00"
    enabled: bool = True


@dataclass
class IsosurfaceSpec:
    """Constant-temperature surface requested in 3D."""

    temperature_c: float
    colour: str = "#ffdd00"
    opacity: float = 0.3
    enabled: bool = True


@dataclass
class Scenario:
    """
    Complete analysis input: soil column, pipes and requested visualisations.

    All quantities are stored in SI units and °C regardless of ``unit_system``,
    which only controls how values are written to disk and displayed.
    """

    soil_temperature_c: float = DEFAULT_SOIL_TEMPERATURE_C
    soil_layers: List[SoilLayer] = field(default_factory=list)
    pipes: List[Pipe] = field(default_factory=list)
    project: ProjectInfo = field(default_factory=ProjectInfo)
    unit_system: UnitSystem = UnitSystem.METRIC
    isotherms: List[IsothermSpec] = field(default_factory=list)
    isosurfaces: List[IsosurfaceSpec] = field(default_factory=list)
    show_flux_vectors: bool = False

    def solve(self) -> SolveResult:
        return solve(self.pipes, self.soil_layers, self.soil_temperature_c)

    def isotherm_levels(self) -> List[float]:
        return [entry.temperature_c for entry in self.isotherms if entry.enabled]

    def isosurface_levels(self) -> List[float]:
        return [entry.temperature_c for entry in self.isosurfaces if entry.enabled]


def load_scenario(path: Path) -> Scenario:
    """Read a scenario JSON file; malformed content raises ``ConfigurationError``."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigurationError([f"{path.name}: invalid JSON ({exc.msg} at line {exc.lineno})."]) from exc
    except UnicodeDecodeError as exc:
        raise ConfigurationError([f"{path.name}: not valid UTF-8 (byte {exc.start})."]) from exc
    scenario = scenario_from_payload(data)
    logger.info(
        "Loaded scenario %r from %s (%d pipe(s), %d soil layer(s)).",
        scenario.project.name,
        path,
        len(scenario.pipes),
        len(scenario.soil_layers),
    )
    return scenario


def save_scenario(scenario: Scenario, path: Path) -> None:
    """Persist ``scenario`` to ``path`` in its own unit system."""
    path = Path(path)
    path.write_text(json.dumps(scenario_to_payload(scenario), indent=2), encoding="utf-8")
    logger.info("Saved scenario %r to %s.", scenario.project.name, path)


def scenario_from_payload(payload: Any) -> Scenario:
    if not isinstance(payload, dict):
        raise ConfigurationError(["Scenario payload must be a JSON object."])
    try:
        return _scenario_from_payload(payload)
    except ConfigurationError:
        raise
    except (KeyError, ValueError, TypeError) as exc:
        raise ConfigurationError([str(exc)]) from exc


def scenario_to_payload(scenario: Scenario) -> Dict[str, Any]:
    conv = _Converter(scenario.unit_system)
    names = [layer.name for layer in scenario.soil_layers]
    return {
        "project": _project_to_payload(scenario.project),
        "unit_system": scenario.unit_system.value,
        "soil_temperature": conv.temperature_out(scenario.soil_temperature_c),
        "soil_layers": [
            _soil_layer_to_payload(layer, conv, name)
            for layer, name in zip(scenario.soil_layers, names)
        ],
        "pipes": [_pipe_to_payload(pipe, conv) for pipe in scenario.pipes],
        "isotherms": [
            {
                "temperature": conv.temperature_out(entry.temperature_c),
                "colour": entry.colour,
                "enabled": entry.enabled,
            }
            for entry in scenario.isotherms
        ],
        "isosurfaces": [
            {
                "temperature": conv.temperature_out(entry.temperature_c),
                "colour": entry.colour,
                "opacity": entry.opacity,
                "enabled": entry.enabled,
            }
            for entry in scenario.isosurfaces
        ],
        "show_flux_vectors": scenario.show_flux_vectors,
    }


def example_scenario() -> Scenario:
    """A steam line installed beside an existing gas main, with a crossing water line."""
    ft = units.feet_to_m
    inch = units.inches_to_m
    layers = build_soil_layers(
        [
            (material_catalog.MOIST_SOIL.conductivity_w_per_mk, ft(10.0)),
            (material_catalog.SATURATED_SOIL.conductivity_w_per_mk, ft(20.0)),
        ],
        names=[material_catalog.MOIST_SOIL.name, material_catalog.SATURATED_SOIL.name],
    )
    steel = material_catalog.CARBON_STEEL.conductivity_w_per_mk
    pipes = [
        Pipe(
            name="New Steam Line",
            role=PipeRole.HEAT_SOURCE,
            orientation=PipeOrientation.PARALLEL,
            x_m=ft(-3.0),
            z_m=ft(5.0),
            temperature_c=units.fahrenheit_to_c(450.0),
            outer_diameter_m=inch(12.75),
            wall_thickness_m=inch(0.406),
            wall_conductivity_w_per_mk=steel,
            insulation_thickness_m=inch(2.0),
            insulation_conductivity_w_per_mk=material_catalog.CALCIUM_SILICATE.conductivity_w_per_mk,
            bedding_thickness_m=inch(6.0),
            bedding_conductivity_w_per_mk=material_catalog.SAND_BEDDING.conductivity_w_per_mk,
        ),
        Pipe(
            name="Existing Gas Main",
            role=PipeRole.AFFECTED_PIPE,
            orientation=PipeOrientation.PARALLEL,
            x_m=ft(3.0),
            z_m=ft(4.0),
            outer_diameter_m=inch(8.625),
            wall_thickness_m=inch(0.322),
            wall_conductivity_w_per_mk=steel,
            bedding_thickness_m=inch(6.0),
            bedding_conductivity_w_per_mk=material_catalog.SAND_BEDDING.conductivity_w_per_mk,
        ),
        Pipe(
            name="Crossing Water Line",
            role=PipeRole.AFFECTED_PIPE,
            orientation=PipeOrientation.PERPENDICULAR,
            y_m=ft(10.0),
            z_m=ft(6.0),
            outer_diameter_m=inch(6.625),
            wall_thickness_m=inch(0.280),
            wall_conductivity_w_per_mk=steel,
        ),
    ]
    level_c = units.fahrenheit_to_c(85.0)
    return Scenario(
        soil_temperature_c=units.fahrenheit_to_c(60.0),
        soil_layers=layers,
        pipes=pipes,
        project=ProjectInfo(
            name="Downtown Steam Crossing",
            location="Springfield",
            system_number="SYS-12345-A",
            engineer="Jane Doe, P.Eng.",
            evaluation_date=date.today().isoformat(),
            revision="1",
            description=(
                "Verification of temperature on existing gas main due to new adjacent steam line installation."
            ),
        ),
        unit_system=UnitSystem.IMPERIAL,
        isotherms=[IsothermSpec(temperature_c=level_c, colour="#ffdd00")],
        isosurfaces=[IsosurfaceSpec(temperature_c=level_c, colour="#ffdd00", opacity=0.3)],
    )


# ---------------------------------------------------------------------------
# Unit handling


class _Converter:
    """Maps file quantities (metric or imperial) to and from SI."""

    def __init__(self, unit_system: UnitSystem) -> None:
        imperial = unit_system is UnitSystem.IMPERIAL
        self.length_in: Callable[[float], float] = units.feet_to_m if imperial else _identity
        self.length_out: Callable[[float], float] = units.m_to_feet if imperial else _identity
        self.size_in: Callable[[float], float] = units.inches_to_m if imperial else _identity
        self.size_out: Callable[[float], float] = units.m_to_inches if imperial else _identity
        self.temperature_in: Callable[[float], float] = units.fahrenheit_to_c if imperial else _identity
        self.temperature_out: Callable[[float], float] = units.c_to_fahrenheit if imperial else _identity
        self.conductivity_in: Callable[[float], float] = units.btu_to_w_per_mk if imperial else _identity
        self.conductivity_out: Callable[[float], float] = units.w_per_mk_to_btu if imperial else _identity

    def conductivity(self, value: Any, kind: MaterialKind) -> float:
        """Numeric values are in file units; strings name a catalogue material."""
        if value is None:
            return 0.0
        if isinstance(value, str):
            material = material_catalog.find_material(value, kind)
            if material is None:
                raise ValueError(f"Unknown {kind.value} material '{value}'.")
            return material.conductivity_w_per_mk
        return self.conductivity_in(float(value))


def _identity(value: float) -> float:
    return value


# ---------------------------------------------------------------------------
# Serialisation helpers


def _scenario_from_payload(payload: Dict[str, Any]) -> Scenario:
    unit_system = UnitSystem(payload.get("unit_system", UnitSystem.METRIC.value))
    conv = _Converter(unit_system)

    layers_payload = payload.get("soil_layers", [])
    pipes_payload = payload.get("pipes", [])
    if not isinstance(layers_payload, list):
        raise ValueError("Soil layers payload must be a list.")
    if not isinstance(pipes_payload, list):
        raise ValueError("Pipes payload must be a list.")

    soil_temperature = payload.get("soil_temperature")
    return Scenario(
        soil_temperature_c=(
            conv.temperature_in(float(soil_temperature))
            if soil_temperature is not None
            else DEFAULT_SOIL_TEMPERATURE_C
        ),
        soil_layers=_soil_layers_from_payload(layers_payload, conv),
        pipes=[_pipe_from_payload(entry, conv, index) for index, entry in enumerate(pipes_payload, start=1)],
        project=_project_from_payload(payload.get("project")),
        unit_system=unit_system,
        isotherms=[
            IsothermSpec(
                temperature_c=conv.temperature_in(float(entry["temperature"])),
                colour=str(entry.get("colour", "#ffdd00")),
                enabled=bool(entry.get("enabled", True)),
            )
            for entry in payload.get("isotherms", [])
        ],
        isosurfaces=[
            IsosurfaceSpec(
                temperature_c=conv.temperature_in(float(entry["temperature"])),
                colour=str(entry.get("colour", "#ffdd00")),
                opacity=float(entry.get("opacity", 0.3)),
                enabled=bool(entry.get("enabled", True)),
            )
            for entry in payload.get("isosurfaces", [])
        ],
        show_flux_vectors=bool(payload.get("show_flux_vectors", False)),
    )


def _project_to_payload(project: ProjectInfo) -> Dict[str, Any]:
    return {
        "name": project.name,
        "location": project.location,
        "system_number": project.system_number,
        "engineer": project.engineer,
        "evaluation_date": project.evaluation_date,
        "revision": project.revision,
        "description": project.description,
    }


def _project_from_payload(payload: Any) -> ProjectInfo:
    if payload is None:
        return ProjectInfo()
    if isinstance(payload, str):
        return ProjectInfo(name=payload)
    if not isinstance(payload, dict):
        raise ValueError(f"Invalid project entry: {payload}")
    return ProjectInfo(
        name=str(payload.get("name", "Untitled")),
        location=str(payload.get("location", "")),
        system_number=str(payload.get("system_number", "")),
        engineer=str(payload.get("engineer", "")),
        evaluation_date=str(payload.get("evaluation_date", "")),
        revision=str(payload.get("revision", "")),
        description=str(payload.get("description", "")),
    )


def _soil_layer_to_payload(layer: SoilLayer, conv: _Converter, name: Optional[str]) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "conductivity": conv.conductivity_out(layer.conductivity_w_per_mk),
        "thickness": conv.length_out(layer.thickness_m),
    }
    if name:
        payload["name"] = name
    return payload


def _soil_layers_from_payload(entries: Sequence[Any], conv: _Converter) -> List[SoilLayer]:
    stack = []
    names: List[Optional[str]] = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValueError(f"Invalid soil layer entry: {entry}")
        try:
            conductivity = conv.conductivity(entry["conductivity"], MaterialKind.SOIL)
            thickness = conv.length_in(float(entry["thickness"]))
        except (KeyError, ValueError, TypeError) as exc:
            raise ValueError(f"Invalid soil layer entry: {entry}") from exc
        name = entry.get("name")
        if name is None and isinstance(entry["conductivity"], str):
            name = entry["conductivity"]
        stack.append((conductivity, thickness))
        names.append(str(name) if name is not None else None)
    return build_soil_layers(stack, names=names)


def _pipe_to_payload(pipe: Pipe, conv: _Converter) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "identifier": pipe.identifier,
        "name": pipe.name,
        "role": pipe.role.value,
        "orientation": pipe.orientation.value,
        "x": conv.length_out(pipe.x_m),
        "y": conv.length_out(pipe.y_m),
        "z": conv.length_out(pipe.z_m),
        "outer_diameter": conv.size_out(pipe.outer_diameter_m),
        "wall_thickness": conv.size_out(pipe.wall_thickness_m),
        "wall_conductivity": conv.conductivity_out(pipe.wall_conductivity_w_per_mk),
        "insulation_thickness": conv.size_out(pipe.insulation_thickness_m),
        "insulation_conductivity": conv.conductivity_out(pipe.insulation_conductivity_w_per_mk),
        "bedding_thickness": conv.size_out(pipe.bedding_thickness_m),
        "bedding_conductivity": conv.conductivity_out(pipe.bedding_conductivity_w_per_mk),
    }
    if pipe.temperature_c is not None:
        payload["temperature"] = conv.temperature_out(pipe.temperature_c)
    return payload


def _pipe_from_payload(payload: Any, conv: _Converter, index: int) -> Pipe:
    if not isinstance(payload, dict):
        raise ValueError(f"Invalid pipe entry: {payload}")
    try:
        name = str(payload.get("name") or f"Pipe {index}")
        role = PipeRole(payload.get("role", PipeRole.AFFECTED_PIPE.value))
        orientation = PipeOrientation(payload.get("orientation", PipeOrientation.PARALLEL.value))
        z_m = conv.length_in(float(payload["z"]))
        outer_diameter_m, wall_thickness_m = _pipe_size(payload, conv)
        temperature = payload.get("temperature")
        pipe = Pipe(
            name=name,
            role=role,
            orientation=orientation,
            x_m=conv.length_in(float(payload.get("x", 0.0))),
            y_m=conv.length_in(float(payload.get("y", 0.0))),
            z_m=z_m,
            outer_diameter_m=outer_diameter_m,
            wall_thickness_m=wall_thickness_m,
            wall_conductivity_w_per_mk=conv.conductivity(payload.get("wall_conductivity"), MaterialKind.PIPE),
            insulation_thickness_m=conv.size_in(float(payload.get("insulation_thickness", 0.0))),
            insulation_conductivity_w_per_mk=conv.conductivity(
                payload.get("insulation_conductivity"), MaterialKind.INSULATION
            ),
            bedding_thickness_m=conv.size_in(float(payload.get("bedding_thickness", 0.0))),
            bedding_conductivity_w_per_mk=conv.conductivity(
                payload.get("bedding_conductivity"), MaterialKind.BEDDING
            ),
            temperature_c=conv.temperature_in(float(temperature)) if temperature is not None else None,
        )
    except (KeyError, ValueError, TypeError) as exc:
        raise ValueError(f"Invalid pipe entry {index}: {exc}") from exc

    identifier = payload.get("identifier")
    if identifier:
        pipe = replace(pipe, identifier=str(identifier))
    return pipe


def _pipe_size(payload: Dict[str, Any], conv: _Converter) -> Tuple[float, float]:
    """Explicit dimensions win over a nominal ``size`` preset."""
    preset = None
    size = payload.get("size")
    if size is not None:
        preset = material_catalog.find_pipe_preset(str(size))
        if preset is None:
            raise ValueError(f"Unknown nominal pipe size '{size}'.")

    if "outer_diameter" in payload:
        outer_diameter = conv.size_in(float(payload["outer_diameter"]))
    elif preset is not None:
        outer_diameter = preset.outer_diameter_m
    else:
        raise KeyError("outer_diameter")

    if "wall_thickness" in payload:
        wall = conv.size_in(float(payload["wall_thickness"]))
    elif preset is not None:
        wall = preset.wall_thickness_m
    else:
        wall = 0.0
    return outer_diameter, wall

