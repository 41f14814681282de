"""A simulated body: state vector, actuators and the current trajectory segment."""
from __future__ import annotations

from enum import Enum
import logging
import math
import threading
from typing import Dict, Iterable, Optional

import numpy as np

from ..dynamics.base import DynamicsParameters
from ..errors import RoutingError, SimulationFault, SolverError, ValidationError
from .actuator import Actuator
from .trajectory import SolverOptions, TrajectorySegment

logger = logging.getLogger(__name__)

DEFAULT_MAX_FAILURES = 3


class BodyStatus(Enum):
    FRESH = "fresh"
    STALE = "stale"
    RECOMPUTING = "recomputing"


class PhysicalBody:
    """Owns a state vector, its actuators and one trajectory segment.

    `cps` is the dynamics module of the body's system (see
    hybrid_sim.dynamics.pendulum): it supplies STATE_NAMES, f and observe.
    All access to state, actuators and segment goes through a per-body lock,
    so ticks and commands on one body never interleave while independent
    bodies progress without contention.
    """

    def __init__(
        self,
        name: str,
        cps,
        params,
        state,
        actuators: Iterable[Actuator] = (),
        horizon: Optional[float] = None,
        options: Optional[SolverOptions] = None,
        max_failures: int = DEFAULT_MAX_FAILURES,
    ):
        self.name = name
        self.cps = cps
        self.params = params
        self.state_names = list(cps.STATE_NAMES)

        state = np.array(state, dtype=float)
        if state.shape != (len(self.state_names),) or not np.all(np.isfinite(state)):
            raise ValidationError(
                f"Body '{name}' needs a finite state of size {len(self.state_names)}, got {state}"
            )
        self._state = state

        self.actuators: Dict[str, Actuator] = {}
        for actuator in actuators:
            if actuator.name in self.actuators:
                raise ValidationError(f"Body '{name}' has duplicate actuator '{actuator.name}'")
            self.actuators[actuator.name] = actuator

        self.horizon = float(cps.HORIZON if horizon is None else horizon)
        if not math.isfinite(self.horizon) or self.horizon <= 0:
            raise ValidationError(f"Body '{name}' horizon must be positive, got {self.horizon}")
        if int(max_failures) < 1:
            raise ValidationError(f"max_failures must be >= 1, got {max_failures}")
        self.max_failures = int(max_failures)
        self.options = options or SolverOptions()

        # horizon 0 forces a solve on the first tick
        self.segment = TrajectorySegment.degenerate(self._state)
        self.recompute_count = 0
        self.failures = 0
        self._next_horizon = self.horizon
        self._recomputing = False
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"PhysicalBody(name={self.name!r}, system={self.cps.__name__.rsplit('.', 1)[-1]!r})"

    # --- Read-only accessors ---------------------------------------------
    @property
    def state(self) -> np.ndarray:
        """Copy of the current state vector."""
        with self._lock:
            return self._state.copy()

    @property
    def status(self) -> BodyStatus:
        if self._recomputing:
            return BodyStatus.RECOMPUTING
        if self.any_dirty() or self.segment.remaining <= 0.0:
            return BodyStatus.STALE
        return BodyStatus.FRESH

    def any_dirty(self) -> bool:
        return any(a.dirty for a in self.actuators.values())

    def controls(self) -> Dict[str, float]:
        return {name: a.current for name, a in self.actuators.items()}

    def observe(self, raw: bool = False) -> np.ndarray:
        """ Read the current state.

        Args:
            raw (bool): return the full state vector instead of cps.observe(state)

        Returns:
            np.ndarray: observation, or a copy of the state when raw is True
        """
        with self._lock:
            state = self._state.copy()
        return state if raw else self.cps.observe(state)

    def snapshot(self) -> dict:
        """ State and actuator values as one flat row, taken under the body lock.

        Returns:
            dict: {state_name: value, ..., "u_<actuator>": value, ...}
        """
        with self._lock:
            row = {n: float(v) for n, v in zip(self.state_names, self._state)}
            row.update({f"u_{n}": a.current for n, a in self.actuators.items()})
        return row

    # --- Commands ----------------------------------------------------------
    def receive(self, actuator_id: str, value: float) -> float:
        """ Apply a command to one of this body's actuators.

        Waits for a running recompute to finish. The command marks the
        actuator dirty, so the next tick solves a new segment.

        Args:
            actuator_id (str): actuator name
            value (float): commanded value, clamped to the actuator range

        Raises:
            RoutingError: the body has no such actuator
            ValidationError: NaN command

        Returns:
            float: the value actually applied
        """
        with self._lock:
            try:
                actuator = self.actuators[actuator_id]
            except KeyError:
                raise RoutingError(
                    f"Body '{self.name}' has no actuator '{actuator_id}'. Known: {list(self.actuators)}"
                ) from None
            return actuator.command(value)

    # --- Time stepping -----------------------------------------------------
    def tick(self, dt: float):
        """ Advance the body by dt.

        A dt longer than the horizon is consumed in horizon-sized chunks,
        recomputing each time a segment runs out. A failed solve holds the
        last good state and drops the rest of dt.

        Args:
            dt (float): tick interval in seconds

        Raises:
            ValidationError: dt is not a positive finite number
            SimulationFault: max_failures consecutive solves have failed
        """
        dt = float(dt)
        if not math.isfinite(dt) or dt <= 0:
            raise ValidationError(f"dt must be a positive finite number, got {dt}")

        with self._lock:
            remaining = dt
            while remaining > 0.0:
                step = min(remaining, self._next_horizon)
                if self.segment.is_stale(step, self.any_dirty()):
                    if not self._recompute():
                        return  # hold the last good state, retry next tick
                self._state = self.segment.advance(step)
                remaining -= step

    def _recompute(self) -> bool:
        horizon = self._next_horizon
        controls = self.controls()
        start = self._state.copy()
        # actuator values that also live in the state vector (held, not integrated)
        for name, value in controls.items():
            if name in self.state_names:
                start[self.state_names.index(name)] = value

        params = DynamicsParameters.snapshot(self.params, controls)
        self._recomputing = True
        try:
            segment = TrajectorySegment.solve(self.cps.f, start, params, horizon, self.options)
        except SolverError as e:
            self.failures += 1
            if self.failures >= self.max_failures:
                logger.error("Body %s: %d consecutive solve failures, giving up", self.name, self.failures)
                raise SimulationFault(
                    f"Body '{self.name}' failed to recompute its trajectory {self.failures} times in a row: {e}"
                ) from e
            self._next_horizon = horizon / 2.0
            logger.warning(
                "Body %s: solve failed (%s); holding state, retrying with horizon %.4g",
                self.name, e, self._next_horizon,
            )
            return False
        finally:
            self._recomputing = False

        self.segment = segment
        self._state = segment.evaluate(0.0)
        for actuator in self.actuators.values():
            actuator.clear()
        self.failures = 0
        self._next_horizon = self.horizon
        self.recompute_count += 1
        logger.debug(
            "Body %s: recomputed trajectory over %.4g with %s, controls=%s",
            self.name, horizon, self.options.method, controls,
        )
        return True
