"""Trajectory segment solve, evaluation and staleness."""
from __future__ import annotations

import numpy as np
import pytest

from hybrid_sim.dynamics import drone, pendulum
from hybrid_sim.dynamics.base import DynamicsParameters
from hybrid_sim.errors import DomainError, SolverError, ValidationError
from hybrid_sim.sim import SolverOptions, TrajectorySegment


def _drone_params(left: float = 10.0, right: float = 10.0) -> DynamicsParameters:
    return DynamicsParameters.snapshot(drone.Params(), {"left": left, "right": right})


def _pendulum_segment(method: str = "rk45") -> TrajectorySegment:
    params = DynamicsParameters.snapshot(pendulum.Params(), {"torque": 1.0})
    return TrajectorySegment.solve(pendulum.f, [0.3, 0.0, 1.0], params, 10.0, SolverOptions(method=method))


@pytest.mark.parametrize("method", ["rk45", "dop853", "rk4"])
def test_initial_condition_is_exact(method: str) -> None:
    start = np.array([0.1, -0.2, 0.5, 0.0, 0.05, 0.0])
    seg = TrajectorySegment.solve(drone.f, start, _drone_params(), 5.0, SolverOptions(method=method))
    assert np.array_equal(seg.evaluate(0.0), start)
    assert seg.elapsed == 0.0
    assert seg.horizon == 5.0


@pytest.mark.parametrize("method", ["rk45", "rk4"])
def test_evaluation_is_continuous(method: str) -> None:
    seg = _pendulum_segment(method)
    for t in np.linspace(0.0, 9.9, 12):
        a = seg.evaluate(t)
        b = seg.evaluate(t + 1e-7)
        assert np.max(np.abs(b - a)) < 1e-4


def test_fixed_step_agrees_with_adaptive() -> None:
    adaptive = TrajectorySegment.solve(drone.f, np.zeros(6), _drone_params(11.0, 9.0), 5.0)
    fixed = TrajectorySegment.solve(drone.f, np.zeros(6), _drone_params(11.0, 9.0), 5.0,
                                    SolverOptions(method="rk4", rk4_dt=0.005))
    for t in (0.5, 2.0, 5.0):
        assert np.allclose(adaptive.evaluate(t), fixed.evaluate(t), atol=1e-5)


def test_evaluate_outside_horizon_raises() -> None:
    seg = _pendulum_segment()
    with pytest.raises(DomainError):
        seg.evaluate(-1e-9)
    with pytest.raises(DomainError):
        seg.evaluate(10.0 + 1e-9)
    seg.evaluate(10.0)


def test_advance_consumes_horizon() -> None:
    seg = _pendulum_segment()
    state = seg.advance(4.0)
    assert seg.elapsed == 4.0
    assert seg.remaining == 6.0
    assert np.allclose(state, seg.evaluate(4.0))
    with pytest.raises(DomainError):
        seg.advance(6.5)
    assert seg.elapsed == 4.0


def test_staleness_rule() -> None:
    seg = _pendulum_segment()
    seg.advance(9.0)
    assert not seg.is_stale(1.0)
    assert seg.is_stale(1.5)
    assert seg.is_stale(0.1, any_actuator_dirty=True)


def test_degenerate_segment_is_stale() -> None:
    seg = TrajectorySegment.degenerate([1.0, 2.0])
    assert seg.horizon == 0.0
    assert np.array_equal(seg.evaluate(0.0), [1.0, 2.0])
    assert seg.is_stale(1e-6)
    assert seg.remaining == 0.0


def test_solve_rejects_bad_horizon() -> None:
    with pytest.raises(ValidationError):
        TrajectorySegment.solve(drone.f, np.zeros(6), _drone_params(), 0.0)
    with pytest.raises(ValidationError):
        SolverOptions(method="euler")


def test_solver_failures_surface_as_solver_error() -> None:
    def exploding(state, params, t):
        raise OverflowError("diverged")

    with pytest.raises(SolverError):
        TrajectorySegment.solve(exploding, [0.0], None, 1.0)

    def non_finite(state, params, t):
        return np.array([np.inf])

    with pytest.raises(SolverError):
        TrajectorySegment.solve(non_finite, [0.0], None, 1.0, SolverOptions(method="rk4"))


def test_solve_is_deterministic() -> None:
    a = _pendulum_segment()
    b = _pendulum_segment()
    for t in (1.0, 5.5, 10.0):
        assert np.array_equal(a.evaluate(t), b.evaluate(t))


def test_start_state_is_read_only() -> None:
    seg = _pendulum_segment()
    with pytest.raises(ValueError):
        seg.start_state[0] = 1.0
