"""Tests for unit conversions and the materials catalogue."""

import pytest

from pipeheat.model import MaterialKind, units
from pipeheat.model.materials import (
    MOIST_SOIL_CONDUCTIVITY,
    all_materials,
    find_material,
    find_pipe_preset,
    materials_for_kinds,
)


def test_length_conversions():
    assert units.feet_to_m(10.0) == pytest.approx(3.048)
    assert units.inches_to_m(12.75) == pytest.approx(0.32385)
    assert units.m_to_feet(units.feet_to_m(7.0)) == pytest.approx(7.0)


def test_temperature_conversions():
    assert units.fahrenheit_to_c(212.0) == pytest.approx(100.0)
    assert units.c_to_fahrenheit(-40.0) == pytest.approx(-40.0)
    assert units.temperature_delta_to_fahrenheit(10.0) == pytest.approx(18.0)


def test_conductivity_conversion():
    assert units.btu_to_w_per_mk(1.0) == pytest.approx(1.73073)
    assert units.w_per_mk_to_btu(1.73073) == pytest.approx(1.0)


def test_find_material_is_case_insensitive():
    material = find_material("  moist soil ")
    assert material is not None
    assert material.conductivity_w_per_mk == MOIST_SOIL_CONDUCTIVITY


def test_find_material_by_kind():
    assert find_material("Gravel", MaterialKind.BEDDING).conductivity_w_per_mk == 0.35
    assert find_material("Gravel", MaterialKind.PIPE) is None
    assert find_material("Unobtainium") is None


def test_materials_for_kinds():
    insulation = materials_for_kinds([MaterialKind.INSULATION])
    assert insulation
    assert all(material.kind is MaterialKind.INSULATION for material in insulation)
    assert len(all_materials()) >= len(insulation)


def test_pipe_presets():
    preset = find_pipe_preset('12"')
    assert preset is not None
    assert preset.outer_diameter_m == pytest.approx(0.32385)
    assert preset.label == "12-inch Sch. 40"
    assert find_pipe_preset("7") is None
