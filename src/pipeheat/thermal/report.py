from __future__ import annotations

import csv
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from pipeheat.thermal.sampling import SceneBounds, sample_raster, scene_bounds
from pipeheat.thermal.solver import SolveResult

logger = logging.getLogger(__name__)


@dataclass
class ReportPaths:
    base_dir: Path
    heatmap_path: Optional[Path]
    field_csv_path: Path
    summary_path: Path


def generate_report(  # noqa: D401 - simple wrapper
    result: SolveResult,
    *,
    root_dir: Path,
    isotherms: Sequence[float] = (),
    isotherm_colours: Optional[Sequence[str]] = None,
    raster: Tuple[int, int] = (200, 120),
    show_flux: bool = False,
    project: Optional[Dict[str, Any]] = None,
    workers: Optional[int] = None,
) -> ReportPaths:
    """
    Create a thermal interaction report (temperature field CSV, summary JSON, and optional heatmap).
    """

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    report_dir = Path(root_dir) / f"pipeheat_report_{timestamp}"
    report_dir.mkdir(parents=True, exist_ok=True)

    field_csv = report_dir / "temperature_field.csv"
    summary_json = report_dir / "summary.json"

    bounds = scene_bounds(result.scene)
    width, height = raster
    temperatures = sample_raster(result.scene, bounds, width, height, workers=workers)

    _write_temperature_csv(bounds, temperatures, field_csv)
    _write_summary(result, temperatures, summary_json, project)
    heatmap_path = _write_heatmap(
        result,
        bounds,
        temperatures,
        report_dir,
        isotherms=isotherms,
        isotherm_colours=isotherm_colours,
        show_flux=show_flux,
    )

    logger.info("Report written to %s.", report_dir)
    return ReportPaths(
        base_dir=report_dir,
        heatmap_path=heatmap_path,
        field_csv_path=field_csv,
        summary_path=summary_json,
    )


def _write_temperature_csv(
    bounds: SceneBounds,
    temperatures: NDArray[np.float64],
    csv_path: Path,
) -> None:
    height, width = temperatures.shape
    xs = np.linspace(bounds.min_x_m, bounds.max_x_m, width)
    depths = np.linspace(0.0, bounds.max_depth_m, height)
    with csv_path.open("w", newline="") as handle:
        writer = csv.writer(handle)
        writer.writerow(["x_m", "depth_m", "temperature_c"])
        for j, depth in enumerate(depths):
            row = temperatures[j]
            for i, x in enumerate(xs):
                writer.writerow([f"{x:.6f}", f"{depth:.6f}", f"{row[i]:.6f}"])


def _write_summary(
    result: SolveResult,
    temperatures: NDArray[np.float64],
    summary_path: Path,
    project: Optional[Dict[str, Any]],
) -> None:
    sources = [
        {
            "pipe_id": entry.pipe_id,
            "name": entry.pipe_name,
            "r_pipe_k_m_per_w": entry.r_pipe,
            "r_insulation_k_m_per_w": entry.r_insulation,
            "r_bedding_k_m_per_w": entry.r_bedding,
            "r_soil_k_m_per_w": entry.r_soil,
            "r_total_k_m_per_w": entry.r_total,
            "soil_conductivity_w_per_mk": entry.soil_conductivity_w_per_mk,
            "heat_flux_w_per_m": entry.heat_flux_w_per_m,
        }
        for entry in result.sources
    ]
    affected = [
        {
            "pipe_id": entry.pipe_id,
            "name": entry.pipe_name,
            "total_temperature_rise_c": entry.total_temperature_rise_c,
            "final_temperature_c": entry.final_temperature_c,
            "interactions": [
                {
                    "source_id": item.source_id,
                    "source": item.source_name,
                    "path_conductivity_w_per_mk": item.path_conductivity_w_per_mk,
                    "real_distance_m": item.real_distance_m,
                    "image_distance_m": item.image_distance_m,
                    "temperature_rise_c": item.temperature_rise_c,
                }
                for item in entry.interactions
            ],
        }
        for entry in result.affected
    ]

    payload: Dict[str, Any] = {
        "soil_temperature_c": result.ambient_temp_c,
        "max_field_temp_c": float(np.nanmax(temperatures)),
        "min_field_temp_c": float(np.nanmin(temperatures)),
        "pipe_temperatures": [
            {"pipe_id": entry.pipe_id, "name": entry.pipe_name, "temperature_c": entry.final_temperature_c}
            for entry in result.temperatures
        ],
        "heat_sources": sources,
        "affected_pipes": affected,
    }
    if project:
        payload["project"] = project
    summary_path.write_text(json.dumps(payload, indent=2))


def _write_heatmap(
    result: SolveResult,
    bounds: SceneBounds,
    temperatures: NDArray[np.float64],
    report_dir: Path,
    *,
    isotherms: Sequence[float],
    isotherm_colours: Optional[Sequence[str]],
    show_flux: bool,
) -> Optional[Path]:
    try:
        from pipeheat.thermal.field_preview import save_field_preview
    except ModuleNotFoundError:
        logger.info("matplotlib is not installed; skipping heatmap.")
        return None

    return save_field_preview(
        result.scene,
        temperatures,
        bounds,
        report_dir / "heatmap.png",
        isotherms=isotherms,
        isotherm_colours=isotherm_colours,
        show_flux=show_flux,
        title="Soil Temperature Field",
    )
