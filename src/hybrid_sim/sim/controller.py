"""Routes commands to actuators and drives ticks for a set of bodies."""
from __future__ import annotations

import math
import threading
from typing import Dict, List, Optional

import numpy as np

from ..errors import RoutingError, SimulationFault, ValidationError
from .body import PhysicalBody
from .routing import Message, dispatch


class SimulationController:
    """One environment: an index of bodies advanced by a common tick source.

    The controller holds no lock across a tick. Each body serializes its own
    ticks and commands; the controller lock only guards the body index.
    """

    def __init__(self, name: str = "environment"):
        self.name = name
        self.time = 0.0
        self.tick_count = 0
        self._bodies: Dict[str, PhysicalBody] = {}
        self._index_lock = threading.Lock()

    def __repr__(self) -> str:
        return f"SimulationController(name={self.name!r}, bodies={self.bodies})"

    # --- Body index ----------------------------------------------------------
    @property
    def bodies(self) -> List[str]:
        with self._index_lock:
            return list(self._bodies)

    def add_body(self, body: PhysicalBody) -> PhysicalBody:
        """ Register a body under its name.

        Args:
            body (PhysicalBody): body to add

        Raises:
            ValidationError: a body with the same name is already registered

        Returns:
            PhysicalBody: the body, for chaining
        """
        with self._index_lock:
            if body.name in self._bodies:
                raise ValidationError(f"Environment '{self.name}' already has a body named '{body.name}'")
            self._bodies[body.name] = body
        return body

    def remove_body(self, name: str) -> PhysicalBody:
        with self._index_lock:
            try:
                return self._bodies.pop(name)
            except KeyError:
                raise RoutingError(f"Environment '{self.name}' has no body '{name}'") from None

    def body(self, name: str) -> PhysicalBody:
        with self._index_lock:
            try:
                return self._bodies[name]
            except KeyError:
                raise RoutingError(
                    f"Environment '{self.name}' has no body '{name}'. Known: {list(self._bodies)}"
                ) from None

    # --- External interface --------------------------------------------------
    def receive(self, body: str, actuator_id: str, value: float) -> float:
        """ Apply a control command to one actuator of one body.

        Args:
            body (str): body name
            actuator_id (str): actuator name on that body, e.g. "torque" or "left"
            value (float): commanded value, clamped to the actuator range

        Raises:
            RoutingError: unknown body or actuator
            ValidationError: NaN command

        Returns:
            float: the value actually applied
        """
        return self.body(body).receive(actuator_id, value)

    def tick(self, dt: float, body: Optional[str] = None):
        """ Advance one body, or every body when `body` is None, by dt.

        Every body is ticked even when another one faults, and the environment
        clock advances. A faulted body holds its last good state.

        Args:
            dt (float): tick interval in seconds
            body (str, optional): tick only this body; the clock is left alone

        Raises:
            ValidationError: dt is not a positive finite number
            SimulationFault: one or more bodies exhausted their solve retries
        """
        if body is not None:
            self.body(body).tick(dt)
            return
        dt = float(dt)
        if not math.isfinite(dt) or dt <= 0:
            raise ValidationError(f"dt must be a positive finite number, got {dt}")

        with self._index_lock:
            targets = list(self._bodies.values())
        faults = []
        for target in targets:
            try:
                target.tick(dt)
            except SimulationFault as e:
                faults.append(e)
        self.time += dt
        self.tick_count += 1

        if len(faults) == 1:
            raise faults[0]
        if faults:
            raise SimulationFault(
                f"{len(faults)} bodies in '{self.name}' faulted: " + "; ".join(str(e) for e in faults)
            ) from faults[0]

    def observe(self, body: str, raw: bool = False) -> np.ndarray:
        """ Read one body's state.

        Args:
            body (str): body name
            raw (bool): full state vector instead of the system's observation

        Returns:
            np.ndarray: observation or state copy
        """
        return self.body(body).observe(raw=raw)

    def dispatch(self, message: Message):
        """Deliver a routing.Message through the route table."""
        return dispatch(self, message)
