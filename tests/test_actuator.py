"""Actuator clamping and bookkeeping."""
from __future__ import annotations

import math

import pytest

from hybrid_sim.errors import ValidationError
from hybrid_sim.sim import Actuator
from hybrid_sim.sim.actuator import HISTORY_LENGTH


def test_command_clamps_to_bounds() -> None:
    a = Actuator("torque", -2.0, 2.0)
    assert a.command(5.0) == 2.0
    assert a.current == 2.0
    assert a.desired == 5.0
    assert a.command(-5.0) == -2.0
    assert a.current == -2.0


def test_clamp_invariant_over_arbitrary_commands() -> None:
    a = Actuator("left", -15.0, 15.0)
    for value in [0.0, 1e9, -1e9, 14.999, -15.0, 15.0, math.inf, -math.inf, 3.3, -0.0]:
        a.command(value)
        assert a.min_value <= a.current <= a.max_value


def test_command_sets_dirty_and_clear_resets() -> None:
    a = Actuator("u", 0.0, 1.0)
    assert not a.dirty
    a.command(0.5)
    assert a.dirty
    a.clear()
    assert not a.dirty
    assert a.current == 0.5


def test_last_write_wins_and_history_keeps_applied_values() -> None:
    a = Actuator("u", -1.0, 1.0)
    a.command(0.2)
    a.command(3.0)
    a.command(-0.4)
    assert a.current == -0.4
    assert list(a.history) == [0.2, 1.0, -0.4]


def test_invalid_bounds_rejected() -> None:
    with pytest.raises(ValidationError):
        Actuator("u", 1.0, -1.0)
    with pytest.raises(ValidationError):
        Actuator("u", -1.0, 1.0, current=2.0)


def test_nan_command_rejected() -> None:
    a = Actuator("u", -1.0, 1.0)
    with pytest.raises(ValidationError):
        a.command(float("nan"))
    assert a.current == 0.0
    assert not a.dirty


def test_history_is_bounded_and_skips_initial_value() -> None:
    a = Actuator("left", -15.0, 15.0, current=4.905)
    assert list(a.history) == []
    for i in range(HISTORY_LENGTH + 10):
        a.command(float(i))
    assert len(a.history) == HISTORY_LENGTH
    assert a.history[0] == 10.0
    assert a.history[-1] == 15.0
