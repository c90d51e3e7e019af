from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np
from matplotlib import patches
from numpy.typing import NDArray

from pipeheat.model import PipeOrientation
from pipeheat.thermal.field import FieldPipe, FieldScene, heat_flux_at
from pipeheat.thermal.sampling import SceneBounds

FLUX_ARROWS_X = 16
FLUX_ARROWS_Z = 10


def save_field_preview(
    scene: FieldScene,
    raster: NDArray[np.float64],
    bounds: SceneBounds,
    output_path: str | Path,
    *,
    isotherms: Sequence[float] = (),
    isotherm_colours: Optional[Sequence[str]] = None,
    show_flux: bool = False,
    title: str | None = None,
    dpi: int = 200,
) -> Path:
    """
    Render a sampled cross-section to an image.

    Args:
        scene: Field scene the raster was sampled from.
        raster: ``(height, width)`` temperatures from ``sample_raster``.
        bounds: Bounds used to sample ``raster``.
        output_path: Target path for the PNG file.
        isotherms: Temperatures (°C) to contour.
        isotherm_colours: Optional line colour per isotherm.
        show_flux: Overlay heat-flux arrows.
        title: Optional title to add to the plot.
        dpi: Resolution for the output image.

    Returns:
        Path to the written image.
    """
    path = Path(output_path).expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)

    figure, axis = plt.subplots(figsize=(8, 6), constrained_layout=True)
    height, width = raster.shape
    xs = np.linspace(bounds.min_x_m, bounds.max_x_m, width)
    depths = np.linspace(0.0, bounds.max_depth_m, height)

    image = axis.imshow(
        raster,
        extent=(bounds.min_x_m, bounds.max_x_m, bounds.max_depth_m, 0.0),
        origin="upper",
        cmap="inferno",
        aspect="auto",
    )
    figure.colorbar(image, ax=axis, label="Temperature (°C)")

    _draw_isotherms(axis, xs, depths, raster, isotherms, isotherm_colours)
    _draw_pipes(axis, scene.pipes, bounds)
    if show_flux:
        _draw_flux(axis, scene, bounds)

    axis.axhline(0.0, color="white", linestyle="--", linewidth=1.0)
    axis.set_xlabel("x (m)")
    axis.set_ylabel("Depth (m)")
    axis.set_xlim(bounds.min_x_m, bounds.max_x_m)
    axis.set_ylim(bounds.max_depth_m, 0.0)
    axis.set_title(title or "Soil Temperature Field")
    axis.grid(False)

    figure.savefig(path, dpi=dpi)
    plt.close(figure)
    return path


def _draw_isotherms(
    axis,
    xs: NDArray[np.float64],
    depths: NDArray[np.float64],
    raster: NDArray[np.float64],
    levels: Sequence[float],
    colours: Optional[Sequence[str]],
) -> None:
    if raster.shape[0] < 2 or raster.shape[1] < 2:
        return
    low, high = float(np.nanmin(raster)), float(np.nanmax(raster))
    for index, level in enumerate(levels):
        if not low < level < high:
            continue
        colour = colours[index] if colours and index < len(colours) else "#ffdd00"
        contour = axis.contour(xs, depths, raster, levels=[level], colors=[colour], linewidths=1.2)
        axis.clabel(contour, fmt="%.1f °C", fontsize=7)


def _draw_pipes(axis, pipes: Iterable[FieldPipe], bounds: SceneBounds) -> None:
    handles = []
    for pipe in pipes:
        colour = "#ff4136" if pipe.is_source else "#00c6ff"
        if pipe.orientation is PipeOrientation.PERPENDICULAR:
            # Runs along x, so it shows as a band at its depth.
            outline = patches.Rectangle(
                (bounds.min_x_m, pipe.z_m - pipe.bedding_radius_m),
                bounds.width_m,
                2.0 * pipe.bedding_radius_m,
                edgecolor=colour,
                facecolor="none",
                linewidth=0.8,
                linestyle=":",
                label=pipe.name,
            )
        else:
            outline = patches.Circle(
                (pipe.x_m, pipe.z_m),
                radius=pipe.bedding_radius_m,
                edgecolor=colour,
                facecolor="none",
                linewidth=1.0,
                label=pipe.name,
            )
            axis.add_patch(
                patches.Circle(
                    (pipe.x_m, pipe.z_m),
                    radius=pipe.pipe_radius_m,
                    edgecolor=colour,
                    facecolor="none",
                    linewidth=0.5,
                )
            )
        axis.add_patch(outline)
        handles.append(outline)
    if handles:
        axis.legend(handles=handles, loc="lower right", fontsize=8, frameon=True)


def _draw_flux(axis, scene: FieldScene, bounds: SceneBounds) -> None:
    xs = np.linspace(bounds.min_x_m, bounds.max_x_m, FLUX_ARROWS_X + 2)[1:-1]
    depths = np.linspace(0.0, bounds.max_depth_m, FLUX_ARROWS_Z + 2)[1:-1]
    grid_x, grid_z = np.meshgrid(xs, depths)
    u = np.zeros_like(grid_x)
    w = np.zeros_like(grid_z)
    for index in np.ndindex(grid_x.shape):
        qx, qz = heat_flux_at(scene, float(grid_x[index]), float(grid_z[index]))
        u[index] = qx
        w[index] = qz
    magnitude = np.hypot(u, w)
    scale = np.where(magnitude > 0.0, magnitude, 1.0)
    # Arrow angles are in screen space and depth grows downward.
    axis.quiver(grid_x, grid_z, u / scale, -w / scale, color="white", alpha=0.7, width=0.003)
