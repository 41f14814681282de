import math
import numpy as np
from types import MappingProxyType
from typing import Mapping, get_type_hints
from dataclasses import dataclass, is_dataclass, fields, MISSING
from ..errors import ValidationError

@dataclass(frozen=True)
class DynamicsParameters:
    """ Snapshot handed to a dynamics function at recompute time.

    Holds the immutable physical constants of a body together with the
    actuator values that were current when the snapshot was taken. Later
    commands do not touch an existing snapshot.
    """
    physical: object
    controls: Mapping[str, float]

    @classmethod
    def snapshot(cls, physical, controls: Mapping[str, float]) -> "DynamicsParameters":
        return cls(physical, MappingProxyType({k: float(v) for k, v in controls.items()}))

def rk4_step(x, f, p, t, dt=0.01):
    """ Runge-Kutta 4th order integration step.

    Args:
        x (np.ndarray): current state
        f (callable): dynamics function f(x, p, t)
        p (DynamicsParameters): parameters snapshot
        t (float): current time
        dt (float): time step size

    Returns:
        np.ndarray: next state after one RK4 step
    """
    k1 = f(x, p, t)
    k2 = f(x + 0.5*dt*k1, p, t + 0.5*dt)
    k3 = f(x + 0.5*dt*k2, p, t + 0.5*dt)
    k4 = f(x + dt*k3, p, t + dt)
    return x + (dt/6.0)*(k1 + 2*k2 + 2*k3 + k4)

def validate_params(dataclass_params, params):
    """ Validate that all required parameters are present at any level of nesting.

    Args:
        dataclass_params (dataclass): dataclass type from the dynamics module (e.g. hybrid_sim.dynamics.pendulum.Params)
        params (dict | dataclass | None): parameters dictionary from config file, or an already built instance.
    Raises:
        ValidationError: if a required parameter is missing or has the wrong type
    Returns:
        Param dataclass instance if all required parameters are present
    """

    if not is_dataclass(dataclass_params):
        raise ValidationError("The Params attribute in the dynamics module is not a dataclass.")

    if isinstance(params, dataclass_params):
        return params
    if params is None:
        params = {}
    if not isinstance(params, dict):
        raise ValidationError(f"Parameters for {dataclass_params.__name__} should be a dictionary. Got {type(params).__name__}.")

    unknown = set(params) - {f.name for f in fields(dataclass_params)}
    if unknown:
        raise ValidationError(f"Unknown parameter(s) for {dataclass_params.__name__}: {sorted(unknown)}")

    # Create a dictionary to store the processed parameters
    processed_params = {}
    hints = get_type_hints(dataclass_params) # resolves string annotations

    for field in fields(dataclass_params):
        field_name = field.name
        field_type = hints.get(field_name, field.type)
        has_default = field.default is not MISSING or field.default_factory is not MISSING

        if field_name not in params:
            if not has_default:
                raise ValidationError(f"Missing required parameter: {field_name}")
            continue  # Optional field with a default value, will use the default

        field_value = params[field_name]
        if is_dataclass(field_type):
            if not isinstance(field_value, dict):
                raise ValidationError(f"Parameter {field_name} should be a dictionary.")

            # Recursively create dataclass instance for nested dataclass
            processed_params[field_name] = validate_params(field_type, field_value)
        elif field_type is float and isinstance(field_value, int) and not isinstance(field_value, bool):
            processed_params[field_name] = float(field_value) # yaml reads "10" as int
        else:
            if not isinstance(field_value, field_type):
                raise ValidationError(f"Parameter {field_name} should be of type {field_type.__name__}. "
                                      f"Got {field_value} of type {type(field_value).__name__} instead.")
            processed_params[field_name] = field_value

    return dataclass_params(**processed_params)

def require_positive(name: str, value: float):
    """ Fail fast on non-positive or non-finite physical constants. """
    if not math.isfinite(value) or value <= 0:
        raise ValidationError(f"{name} must be a positive finite number, got {value}")

def require_finite(name: str, value: float):
    if not math.isfinite(value):
        raise ValidationError(f"{name} must be finite, got {value}")

def initial_state(x0, state_names, default):
    """ Resolve an initial state vector.

    Args:
        x0 (array-like | None): initial state, or None for the system default
        state_names (list[str]): names of state variables, in order
        default (np.ndarray): system default initial state

    Raises:
        ValidationError: if the state has the wrong size or non-finite entries

    Returns:
        np.ndarray: initial state as a float array
    """
    x = np.array(default if x0 is None else x0, dtype=float)
    if x.shape != (len(state_names),):
        raise ValidationError(f"Initial state must have {len(state_names)} entries {state_names}. Got shape {x.shape}.")
    if not np.all(np.isfinite(x)):
        raise ValidationError(f"Initial state must be finite. Got {x}.")
    return x
