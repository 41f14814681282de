"""Exceptions raised by the simulation core."""


class SimulationError(Exception):
    """Base class for all simulation errors."""


class ValidationError(SimulationError, ValueError):
    """Malformed construction inputs (params, actuator bounds, horizon, dt)."""


class DomainError(SimulationError, ValueError):
    """A trajectory segment was queried outside of its solved horizon."""


class SolverError(SimulationError):
    """The ODE solve failed or produced non-finite values."""


class SimulationFault(SimulationError):
    """Raised from tick() once a body has failed to recompute too many times in a row."""


class RoutingError(SimulationError, KeyError):
    """Unknown body, actuator or message route."""

    def __str__(self):
        # KeyError quotes its argument, keep the plain message
        return str(self.args[0]) if self.args else ""
