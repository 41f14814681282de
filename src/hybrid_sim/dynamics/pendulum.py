import sys
import numpy as np
from dataclasses import dataclass
from .base import validate_params, require_finite, require_positive, initial_state
from ..sim.actuator import Actuator
from ..sim.body import PhysicalBody

STATE_NAMES = ["theta", "theta_dot", "torque"] # Names of state variables, in order
ACTUATOR_NAMES = ["torque"] # torque is held in the state vector, not integrated
HORIZON = 10.0 # seconds solved ahead per recompute
X0 = np.array([-np.pi / 2, 0.0, 0.0]) # hanging at rest (stable equilibrium)

@dataclass(frozen=True)
class Params:
    g: float = 9.81           # gravity (m/s^2)
    max_torque: float = 2.0   # torque limit, commands are clamped to [-max_torque, max_torque] (N*m)
    damping: float = 0.5      # viscous damping on angular velocity (1/s)


def check_params(params: Params) -> Params:
    require_finite("g", params.g)
    require_positive("max_torque", params.max_torque)
    require_finite("damping", params.damping)
    return params


def f(state: np.ndarray, params, t: float = 0.0) -> np.ndarray:
    """ Pendulum continuous-time dynamics.

    Args:
        state (np.ndarray): state [theta, theta_dot, torque]
        params (DynamicsParameters): physical Params plus held actuator values {'torque': value}
        t (float): elapsed time (unused, the system is autonomous)

    Returns:
        np.ndarray: state derivative [theta_dot, theta_ddot, 0]
    """

    theta = float(state[0])
    theta_dot = float(state[1])
    torque = float(params.controls["torque"])
    p = params.physical

    # theta_ddot = -(3g/2 * cos(theta) + 3 * torque) - damping * theta_dot
    theta_ddot = -(3.0 * p.g / 2.0 * np.cos(theta) + 3.0 * torque) - p.damping * theta_dot

    return np.array([theta_dot, theta_ddot, 0.0], dtype=float)


def observe(state: np.ndarray) -> np.ndarray:
    """ Observation sent to agents: (cos(theta), sin(theta), theta_dot). """
    theta, theta_dot = float(state[0]), float(state[1])
    return np.array([np.cos(theta), np.sin(theta), theta_dot], dtype=float)


def make_body(params=None, x0=None, name: str = "pendulum", **body_kwargs) -> PhysicalBody:
    """ Build a pendulum body.

    Args:
        params (dict | Params | None): physical parameters. Defaults to Params().
        x0 (array-like | None): initial [theta, theta_dot, torque]. Defaults to X0.
        name (str): body name inside its environment
        **body_kwargs: horizon, options, max_failures forwarded to PhysicalBody

    Returns:
        PhysicalBody: body with a single 'torque' actuator
    """
    p = check_params(validate_params(Params, params))
    x = initial_state(x0, STATE_NAMES, X0)
    torque0 = float(np.clip(x[2], -p.max_torque, p.max_torque))
    x[2] = torque0
    torque = Actuator("torque", -p.max_torque, p.max_torque, current=torque0, desired=torque0)
    return PhysicalBody(name, cps=sys.modules[__name__], params=p, state=x, actuators=[torque], **body_kwargs)
