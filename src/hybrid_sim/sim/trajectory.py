"""Cached, interpolable solutions of a body's equations of motion."""
from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Callable, Optional

import numpy as np
from scipy.integrate import solve_ivp
from scipy.interpolate import CubicHermiteSpline

from ..dynamics.base import DynamicsParameters, rk4_step
from ..errors import DomainError, SolverError, ValidationError

# solve_ivp methods that provide dense output
_ADAPTIVE_METHODS = {
    "rk45": "RK45",
    "dop853": "DOP853",
    "radau": "Radau",
    "lsoda": "LSODA",
}


@dataclass
class SolverOptions:
    """How a segment is integrated.

    `rk45`/`dop853`/`radau`/`lsoda` use scipy's adaptive solvers with dense
    output. `rk4` uses fixed steps of `rk4_dt` joined by a cubic Hermite
    spline.
    """

    method: str = "rk45"
    rtol: float = 1e-8
    atol: float = 1e-10
    rk4_dt: float = 0.01

    def __post_init__(self):
        self.method = self.method.lower()
        if self.method != "rk4" and self.method not in _ADAPTIVE_METHODS:
            raise ValidationError(
                f"Unknown integrator '{self.method}'. Use one of {['rk4'] + sorted(_ADAPTIVE_METHODS)}"
            )
        for name in ("rtol", "atol", "rk4_dt"):
            value = float(getattr(self, name))
            if not math.isfinite(value) or value <= 0:
                raise ValidationError(f"Solver option {name} must be positive, got {value}")
            setattr(self, name, value)

    @classmethod
    def from_cfg(cls, sim_cfg: Optional[dict]) -> "SolverOptions":
        sim_cfg = sim_cfg or {}
        return cls(
            method=str(sim_cfg.get("integrator", "rk45")),
            rtol=sim_cfg.get("rtol", 1e-8),
            atol=sim_cfg.get("atol", 1e-10),
            rk4_dt=sim_cfg.get("rk4_dt", 0.01),
        )


def _solve_rk4(f, y0, params, horizon, step):
    n = max(1, math.ceil(horizon / step))
    ts = np.linspace(0.0, horizon, n + 1)
    ys = np.empty((n + 1, y0.size))
    dys = np.empty_like(ys)
    ys[0] = y0
    for k in range(n):
        dys[k] = f(ys[k], params, ts[k])
        ys[k + 1] = rk4_step(ys[k], f, params, ts[k], ts[k + 1] - ts[k])
    dys[n] = f(ys[n], params, ts[n])
    if not (np.all(np.isfinite(ys)) and np.all(np.isfinite(dys))):
        raise SolverError("Fixed-step integration produced non-finite values")
    return CubicHermiteSpline(ts, ys, dys, axis=0)


def _solve_adaptive(f, y0, params, horizon, options):
    sol = solve_ivp(
        lambda t, y: f(y, params, t),
        (0.0, horizon),
        y0,
        method=_ADAPTIVE_METHODS[options.method],
        dense_output=True,
        rtol=options.rtol,
        atol=options.atol,
    )
    if not sol.success:
        raise SolverError(f"solve_ivp failed: {sol.message}")
    if not np.all(np.isfinite(sol.y)):
        raise SolverError("solve_ivp produced non-finite values")
    return sol.sol


class TrajectorySegment:
    """Solution of an initial-value problem over [0, horizon].

    The segment is never re-solved in place: a recompute replaces it with a
    new segment. `elapsed` tracks how much of the horizon has been consumed.
    """

    def __init__(self, start_state, horizon: float, interpolant: Optional[Callable] = None):
        self.start_state = np.array(start_state, dtype=float)
        self.start_state.setflags(write=False)
        self.horizon = float(horizon)
        self.elapsed = 0.0
        self._interpolant = interpolant

    def __repr__(self) -> str:
        return f"TrajectorySegment(horizon={self.horizon}, elapsed={self.elapsed})"

    @classmethod
    def degenerate(cls, state) -> "TrajectorySegment":
        """Zero-length segment; stale for any positive dt."""
        return cls(state, 0.0)

    @classmethod
    def solve(
        cls,
        f: Callable,
        start_state,
        params: DynamicsParameters,
        horizon: float,
        options: Optional[SolverOptions] = None,
    ) -> "TrajectorySegment":
        """Integrate `f` forward from `start_state` over [0, horizon].

        Raises:
            ValidationError: non-positive horizon or non-finite start state
            SolverError: the integrator failed or diverged
        """
        options = options or SolverOptions()
        horizon = float(horizon)
        if not math.isfinite(horizon) or horizon <= 0:
            raise ValidationError(f"Horizon must be positive, got {horizon}")
        y0 = np.array(start_state, dtype=float)
        if not np.all(np.isfinite(y0)):
            raise ValidationError(f"Start state must be finite, got {y0}")

        try:
            if options.method == "rk4":
                interpolant = _solve_rk4(f, y0, params, horizon, options.rk4_dt)
            else:
                interpolant = _solve_adaptive(f, y0, params, horizon, options)
        except (ArithmeticError, np.linalg.LinAlgError) as e:
            raise SolverError(f"Integration failed: {e}") from e
        return cls(y0, horizon, interpolant)

    @property
    def remaining(self) -> float:
        return self.horizon - self.elapsed

    def evaluate(self, t: float) -> np.ndarray:
        """State at elapsed time t, t in [0, horizon]."""
        t = float(t)
        if not 0.0 <= t <= self.horizon:
            raise DomainError(f"Segment evaluated at t={t} outside [0, {self.horizon}]")
        if t == 0.0 or self._interpolant is None:
            return self.start_state.copy()
        return np.asarray(self._interpolant(t), dtype=float)

    def is_stale(self, dt: float, any_actuator_dirty: bool = False) -> bool:
        return any_actuator_dirty or self.elapsed + dt > self.horizon

    def advance(self, dt: float) -> np.ndarray:
        """Consume dt of the horizon and return the state reached."""
        t = self.elapsed + dt
        state = self.evaluate(t)
        self.elapsed = t
        return state
