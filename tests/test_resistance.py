"""Tests for the per-source resistance network."""

import math

import pytest

from pipeheat.model import Pipe, PipeOrientation, PipeRole
from pipeheat.thermal.resistance import radial_resistance, soil_resistance, solve_source_resistances


def test_radial_resistance_matches_cylindrical_shell():
    assert radial_resistance(0.1, 0.2, 1.0) == pytest.approx(math.log(2.0) / (2.0 * math.pi))


@pytest.mark.parametrize(
    "inner, outer, k",
    [(0.1, 0.2, 0.0), (0.1, 0.1, 1.0), (0.2, 0.1, 1.0), (0.0, 0.1, 1.0)],
)
def test_radial_resistance_missing_layer_is_zero(inner, outer, k):
    assert radial_resistance(inner, outer, k) == 0.0


def test_soil_resistance_line_source():
    expected = math.log(2.0 * 1.5 / 0.1) / (2.0 * math.pi * 1.5)
    assert soil_resistance(1.5, 0.1, 1.5) == pytest.approx(expected)
    assert soil_resistance(1.5, 0.1, 0.0) == 0.0


def test_heat_flux_is_temperature_difference_over_total_resistance():
    pipe = Pipe(
        name="Insulated",
        role=PipeRole.HEAT_SOURCE,
        orientation=PipeOrientation.PARALLEL,
        z_m=2.0,
        outer_diameter_m=0.3239,
        wall_thickness_m=0.0103,
        wall_conductivity_w_per_mk=54.0,
        insulation_thickness_m=0.05,
        insulation_conductivity_w_per_mk=0.05,
        bedding_thickness_m=0.15,
        bedding_conductivity_w_per_mk=0.27,
        temperature_c=180.0,
    )
    result = solve_source_resistances(pipe, 1.5, 15.0)

    assert result.r_pipe > 0.0
    assert result.r_insulation > result.r_pipe
    assert result.r_bedding > 0.0
    assert result.r_total == pytest.approx(result.r_pipe + result.r_insulation + result.r_bedding + result.r_soil)
    assert result.heat_flux_w_per_m == pytest.approx((180.0 - 15.0) / result.r_total)


def test_heat_flux_zero_without_resistance(bare_source):
    result = solve_source_resistances(bare_source, 0.0, 17.0)
    assert result.r_total == 0.0
    assert result.heat_flux_w_per_m == 0.0


def test_heat_flux_zero_at_ambient():
    pipe = Pipe(
        name="Cold",
        role=PipeRole.HEAT_SOURCE,
        orientation=PipeOrientation.PARALLEL,
        z_m=1.5,
        outer_diameter_m=0.2,
        temperature_c=17.0,
    )
    assert solve_source_resistances(pipe, 1.5, 17.0).heat_flux_w_per_m == 0.0
