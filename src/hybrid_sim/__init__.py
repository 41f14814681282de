"""Trajectory-caching simulation of a damped pendulum and planar drones."""

from .errors import (  # noqa: F401
    SimulationError,
    ValidationError,
    DomainError,
    SolverError,
    SimulationFault,
    RoutingError,
)
from .sim import (  # noqa: F401
    Actuator,
    SolverOptions,
    TrajectorySegment,
    BodyStatus,
    PhysicalBody,
    Message,
    PayloadKind,
    Role,
    SimulationController,
    PeriodicTicker,
)
from .environments import create_environment, add_drone  # noqa: F401

__version__ = "0.1.0"
