from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from pipeheat.io import Scenario, example_scenario, load_scenario, save_scenario
from pipeheat.logging_config import setup_logging
from pipeheat.model import UnitSystem, units
from pipeheat.thermal.isosurface import build_isosurfaces
from pipeheat.thermal.solver import ConfigurationError, SolveResult


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pipeheat",
        description="Steady-state thermal interaction between buried pipes.",
    )
    parser.add_argument("scenario", nargs="?", type=Path, help="Scenario JSON file.")
    parser.add_argument("--example", action="store_true", help="Run the built-in example scenario.")
    parser.add_argument("--write-example", type=Path, metavar="PATH", help="Save the example scenario and exit.")
    parser.add_argument("--report", type=Path, metavar="DIR", help="Write a report (CSV, JSON, heatmap) under DIR.")
    parser.add_argument(
        "--isosurface-dims",
        type=int,
        default=40,
        metavar="N",
        help="Samples per axis for 3D isosurfaces (default: 40).",
    )
    parser.add_argument("--workers", type=int, default=None, metavar="N", help="Threads used for field sampling.")
    parser.add_argument("--log-file", type=str, default=None, help="Also write logs to this file.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser


def display_temperature(unit_system: UnitSystem, value_c: float) -> float:
    if unit_system is UnitSystem.IMPERIAL:
        return units.c_to_fahrenheit(value_c)
    return value_c


def format_results(scenario: Scenario, result: SolveResult) -> str:
    """Pipe temperature table in the scenario's unit system."""
    label = scenario.unit_system.temperature_label

    def show(value_c: float) -> float:
        return display_temperature(scenario.unit_system, value_c)

    name_width = max([len("Pipe")] + [len(entry.pipe_name) for entry in result.temperatures])
    lines: List[str] = [
        f"{scenario.project.name}",
        f"Soil temperature: {show(result.ambient_temp_c):.1f} {label}",
        "",
        f"{'Pipe':<{name_width}}  Temperature ({label})",
        f"{'-' * name_width}  {'-' * (14 + len(label))}",
    ]
    for entry in result.temperatures:
        lines.append(f"{entry.pipe_name:<{name_width}}  {show(entry.final_temperature_c):.1f}")

    if result.sources:
        lines.append("")
        lines.append("Heat sources:")
        for source in result.sources:
            lines.append(
                f"  {source.pipe_name}: R_total={source.r_total:.4f} K·m/W, Q={source.heat_flux_w_per_m:.1f} W/m"
            )
    return "\n".join(lines)


def run(args: argparse.Namespace) -> int:
    if args.write_example:
        save_scenario(example_scenario(), args.write_example)
        print(f"Example scenario written to {args.write_example}")
        return 0

    if args.example:
        scenario = example_scenario()
    elif args.scenario is not None:
        scenario = load_scenario(args.scenario)
    else:
        raise ConfigurationError(["No scenario given (pass a JSON file or --example)."])

    result = scenario.solve()
    print(format_results(scenario, result))

    if args.report:
        from pipeheat.thermal.report import generate_report

        paths = generate_report(
            result,
            root_dir=args.report,
            isotherms=scenario.isotherm_levels(),
            isotherm_colours=[entry.colour for entry in scenario.isotherms if entry.enabled],
            show_flux=scenario.show_flux_vectors,
            project={"name": scenario.project.name, "location": scenario.project.location},
            workers=args.workers,
        )
        print(f"Report written to {paths.base_dir}")

    levels = scenario.isosurface_levels()
    if levels:
        dims = (args.isosurface_dims,) * 3
        meshes = build_isosurfaces(result.scene, levels, dims, workers=args.workers)
        print("")
        print("Isosurfaces:")
        for mesh in meshes:
            level = display_temperature(scenario.unit_system, mesh.isolevel_c)
            print(f"  {level:.1f} {scenario.unit_system.temperature_label}: {len(mesh.triangles)} triangle(s)")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the ``pipeheat`` command."""
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING, args.log_file)
    try:
        return run(args)
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
