"""Shared fixtures."""
from __future__ import annotations

from types import SimpleNamespace

import numpy as np
import pytest

from hybrid_sim.dynamics import drone, pendulum
from hybrid_sim.sim import Actuator, PhysicalBody


@pytest.fixture
def pendulum_body() -> PhysicalBody:
    return pendulum.make_body({"g": 9.81})


@pytest.fixture
def drone_body() -> PhysicalBody:
    return drone.make_body()


def make_stub_system(f, horizon: float = 4.0):
    """A one-dimensional point mass driven by actuator 'u', with a custom f."""
    return SimpleNamespace(
        __name__="tests.stub",
        STATE_NAMES=["x", "v"],
        ACTUATOR_NAMES=["u"],
        HORIZON=horizon,
        f=f,
        observe=lambda state: np.array(state, dtype=float),
    )


def point_mass(state, params, t):
    return np.array([state[1], params.controls["u"]], dtype=float)


@pytest.fixture
def stub_body_factory():
    def _make(f=point_mass, horizon: float = 4.0, max_failures: int = 3, name: str = "stub") -> PhysicalBody:
        cps = make_stub_system(f, horizon)
        return PhysicalBody(
            name,
            cps=cps,
            params=None,
            state=[0.0, 0.0],
            actuators=[Actuator("u", -1000.0, 1000.0)],
            max_failures=max_failures,
        )

    return _make
