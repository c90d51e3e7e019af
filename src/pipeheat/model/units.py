"""Unit conversions between the imperial input system and the SI engine."""

from __future__ import annotations

from enum import Enum

FT_TO_M = 0.3048
IN_TO_M = 0.0254
BTU_HR_FT_F_TO_W_MK = 1.73073


class UnitSystem(Enum):
    METRIC = "metric"
    IMPERIAL = "imperial"

    @property
    def temperature_label(self) -> str:
        return "°F" if self is UnitSystem.IMPERIAL else "°C"


def feet_to_m(value: float) -> float:
    return value * FT_TO_M


def m_to_feet(value: float) -> float:
    return value / FT_TO_M


def inches_to_m(value: float) -> float:
    return value * IN_TO_M


def m_to_inches(value: float) -> float:
    return value / IN_TO_M


def fahrenheit_to_c(value: float) -> float:
    return (value - 32.0) * 5.0 / 9.0


def c_to_fahrenheit(value: float) -> float:
    return value * 9.0 / 5.0 + 32.0


def btu_to_w_per_mk(value: float) -> float:
    """BTU/(hr·ft·°F) to W/(m·K)."""
    return value * BTU_HR_FT_F_TO_W_MK


def w_per_mk_to_btu(value: float) -> float:
    return value / BTU_HR_FT_F_TO_W_MK


def temperature_delta_to_fahrenheit(value: float) -> float:
    """Convert a temperature difference (not an absolute temperature)."""
    return value * 9.0 / 5.0
