import sys
import numpy as np
from dataclasses import dataclass, field
from .base import validate_params, require_finite, require_positive, initial_state
from ..errors import ValidationError
from ..sim.actuator import Actuator
from ..sim.body import PhysicalBody

STATE_NAMES = ["x", "y", "vx", "vy", "theta", "omega"] # Names of state variables, in order
ACTUATOR_NAMES = ["left", "right"] # one thrust channel per engine
HORIZON = 5.0 # seconds solved ahead per recompute
X0 = np.zeros(len(STATE_NAMES))


# --- Leaf-level dataclasses ---
@dataclass(frozen=True)
class BodyParams:
    mass: float = 1.0     # kg
    inertia: float = 1.0  # kg*m^2
    radius: float = 0.2   # engine lever arm (m)

@dataclass(frozen=True)
class EnvironmentParams:
    gravity: float = 9.81

@dataclass(frozen=True)
class EngineParams:
    max_thrust: float = 15.0
    min_thrust: float = -15.0
    initial_thrust: float = 4.905  # half the weight of the default body

# --- Top-level dataclass that groups them ---
@dataclass(frozen=True)
class Params:
    body: BodyParams = field(default_factory=BodyParams)
    environment: EnvironmentParams = field(default_factory=EnvironmentParams)
    engines: EngineParams = field(default_factory=EngineParams)


def check_params(params: Params) -> Params:
    require_positive("body.mass", params.body.mass)
    require_positive("body.inertia", params.body.inertia)
    require_positive("body.radius", params.body.radius)
    require_finite("environment.gravity", params.environment.gravity)
    e = params.engines
    if not e.min_thrust <= e.initial_thrust <= e.max_thrust:
        raise ValidationError(f"Engine thrust needs min <= initial <= max. Got {e.min_thrust}, {e.initial_thrust}, {e.max_thrust}")
    return params


# Compute forces and torques acting on the drone
def compute_forces_and_torques(m, g, Fl, Fr, theta, r):
    Fg = m * g
    Fy = (Fl + Fr) * np.cos(theta) - Fg
    Fx = (Fl + Fr) * np.sin(theta)
    tau = (Fl - Fr) * r
    return Fx, Fy, tau

# Linear accelerations, with drag proportional to velocity
def compute_accelerations(Fx, Fy, vx, vy, m):
    ax = (Fx - vx) / m
    ay = (Fy - vy) / m
    return ax, ay

def compute_angular_acceleration(tau, I):
    return tau / I


def f(state: np.ndarray, params, t: float = 0.0) -> np.ndarray:
    """ Planar drone dynamics with a left and a right engine.

    Args:
        state (np.ndarray): state [x, y, vx, vy, theta, omega]
        params (DynamicsParameters): physical Params plus engine thrusts {'left': Fl, 'right': Fr}
        t (float): elapsed time (unused)

    Returns:
        np.ndarray: state derivative [vx, vy, ax, ay, omega, alpha]
    """
    x, y, vx, vy, theta, omega = state
    p = params.physical
    m, I, r = p.body.mass, p.body.inertia, p.body.radius
    g = p.environment.gravity
    Fl, Fr = params.controls["left"], params.controls["right"]

    Fx, Fy, tau = compute_forces_and_torques(m, g, Fl, Fr, theta, r)
    ax, ay = compute_accelerations(Fx, Fy, vx, vy, m)
    alpha = compute_angular_acceleration(tau, I)

    return np.array([vx, vy, ax, ay, omega, alpha], dtype=float)


def torque(params, controls) -> float:
    """ Net torque produced by the engines for the given thrusts. """
    _, _, tau = compute_forces_and_torques(0.0, 0.0, controls["left"], controls["right"], 0.0, params.body.radius)
    return tau


def observe(state: np.ndarray) -> np.ndarray:
    """ Drones report their full state. """
    return np.array(state, dtype=float)


def make_body(params=None, x0=None, name: str = "drone", **body_kwargs) -> PhysicalBody:
    """ Build a drone body with 'left' and 'right' engines.

    Both engines start at the configured initial thrust and are marked dirty,
    so the first tick solves with them.

    Args:
        params (dict | Params | None): physical parameters. Defaults to Params().
        x0 (array-like | None): initial [x, y, vx, vy, theta, omega]. Defaults to rest at the origin.
        name (str): body name inside its environment
        **body_kwargs: horizon, options, max_failures forwarded to PhysicalBody

    Returns:
        PhysicalBody: the drone body
    """
    p = check_params(validate_params(Params, params))
    x = initial_state(x0, STATE_NAMES, X0)
    e = p.engines
    engines = [
        Actuator(side, e.min_thrust, e.max_thrust, current=e.initial_thrust, desired=e.initial_thrust, dirty=True)
        for side in ACTUATOR_NAMES
    ]
    return PhysicalBody(name, cps=sys.modules[__name__], params=p, state=x, actuators=engines, **body_kwargs)
