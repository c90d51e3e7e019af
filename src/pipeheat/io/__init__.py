from __future__ import annotations

from .scenario import (
    IsosurfaceSpec,
    IsothermSpec,
    ProjectInfo,
    Scenario,
    example_scenario,
    load_scenario,
    save_scenario,
    scenario_from_payload,
    scenario_to_payload,
)

__all__ = [
    "IsosurfaceSpec",
    "IsothermSpec",
    "ProjectInfo",
    "Scenario",
    "example_scenario",
    "load_scenario",
    "save_scenario",
    "scenario_from_payload",
    "scenario_to_payload",
]
