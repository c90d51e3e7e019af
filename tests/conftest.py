from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import pytest

from pipeheat.model import Pipe, PipeOrientation, PipeRole, build_soil_layers


@pytest.fixture
def single_layer():
    return build_soil_layers([(1.5, 5.0)])


@pytest.fixture
def two_layers():
    return build_soil_layers([(1.0, 1.0), (2.0, 2.0)])


@pytest.fixture
def bare_source():
    """Bare 0.1 m radius heat source at 1.5 m, 232 °C."""
    return Pipe(
        name="Source",
        role=PipeRole.HEAT_SOURCE,
        orientation=PipeOrientation.PARALLEL,
        x_m=0.0,
        z_m=1.5,
        outer_diameter_m=0.2,
        temperature_c=232.0,
        identifier="source",
    )


@pytest.fixture
def affected_pipe():
    return Pipe(
        name="Affected",
        role=PipeRole.AFFECTED_PIPE,
        orientation=PipeOrientation.PARALLEL,
        x_m=1.0,
        z_m=1.5,
        outer_diameter_m=0.1,
        identifier="affected",
    )
