"""Hybrid continuous/discrete simulation core."""

from .actuator import Actuator  # noqa: F401
from .trajectory import SolverOptions, TrajectorySegment  # noqa: F401
from .body import BodyStatus, PhysicalBody  # noqa: F401
from .routing import Message, PayloadKind, Role, dispatch, routes  # noqa: F401
from .controller import SimulationController  # noqa: F401
from .clock import PeriodicTicker  # noqa: F401
