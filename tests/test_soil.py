"""Tests for layered soil conductivity sampling."""

import pytest

from pipeheat.model import build_soil_layers
from pipeheat.model.materials import MOIST_SOIL_CONDUCTIVITY
from pipeheat.thermal.soil import effective_k_for_path, effective_k_for_pipe, k_at_depth


def test_k_at_depth_uses_half_open_layers(two_layers):
    assert k_at_depth(0.0, two_layers) == 1.0
    assert k_at_depth(0.999, two_layers) == 1.0
    assert k_at_depth(1.0, two_layers) == 2.0


def test_k_at_depth_below_column_reads_deepest_layer(two_layers):
    assert k_at_depth(3.0, two_layers) == 2.0
    assert k_at_depth(50.0, two_layers) == 2.0


def test_k_at_depth_without_layers():
    assert k_at_depth(1.0, []) == MOIST_SOIL_CONDUCTIVITY


def test_effective_k_for_pipe_averages_overlapped_layers(two_layers):
    assert effective_k_for_pipe((1.0, 0.2), two_layers) == pytest.approx(1.5)
    assert effective_k_for_pipe((0.5, 0.1), two_layers) == 1.0


def test_effective_k_for_pipe_touching_boundary_is_not_overlap(two_layers):
    assert effective_k_for_pipe((0.8, 0.2), two_layers) == 1.0


def test_effective_k_for_pipe_fallbacks(two_layers):
    assert effective_k_for_pipe((10.0, 0.1), two_layers) == 1.0
    assert effective_k_for_pipe((1.0, 0.1), []) == MOIST_SOIL_CONDUCTIVITY


def test_effective_k_for_pipe_accepts_pipe(bare_source, single_layer):
    assert effective_k_for_pipe(bare_source, single_layer) == 1.5


@pytest.mark.parametrize(
    "start, end",
    [((0.0, 0.5), (3.0, 4.5)), ((-2.0, 1.0), (2.0, 1.0)), ((0.0, 0.1), (0.0, 4.9))],
)
def test_effective_k_for_path_single_layer_is_exact(single_layer, start, end):
    assert effective_k_for_path(start, end, single_layer) == 1.5


def test_effective_k_for_path_series_average(two_layers):
    # Equal lengths in k=1 and k=2: L / (L/2/1 + L/2/2) = 4/3.
    assert effective_k_for_path((0.0, 0.0), (0.0, 2.0), two_layers) == pytest.approx(4.0 / 3.0)


def test_effective_k_for_path_degenerate_length_falls_back(two_layers):
    assert effective_k_for_path((1.0, 1.5), (1.0, 1.5), two_layers) == 1.0


def test_effective_k_for_path_skips_zero_conductivity():
    layers = build_soil_layers([(0.0, 1.0), (2.0, 2.0)])
    # Only the lower half contributes resistance.
    assert effective_k_for_path((0.0, 0.0), (0.0, 2.0), layers) == pytest.approx(4.0)
