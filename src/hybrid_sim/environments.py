"""Factories that build environments from configuration.

Nothing here runs at import time; callers build the environments they need.
"""
from __future__ import annotations

from typing import Optional

from .sim.body import DEFAULT_MAX_FAILURES, PhysicalBody
from .sim.controller import SimulationController
from .sim.trajectory import SolverOptions
from .utils import import_system


def _body_kwargs(sim_cfg: dict) -> dict:
    return {
        "horizon": sim_cfg.get("horizon"),
        "options": SolverOptions.from_cfg(sim_cfg),
        "max_failures": sim_cfg.get("max_failures", DEFAULT_MAX_FAILURES),
    }


def create_environment(system: str, cfg: Optional[dict] = None) -> SimulationController:
    """ Build a controller holding freshly constructed bodies of one system.

    Args:
        system (str): dynamics module name, e.g. "pendulum" or "drone"
        cfg (dict, optional): config with optional 'dynamics.params', 'sim' and
            'bodies' sections. 'bodies' is a list of {name, x0} entries; one
            default body is created when it is missing.

    Returns:
        SimulationController: the environment
    """
    cfg = cfg or {}
    cps = import_system(system)
    params = cfg.get("dynamics", {}).get("params")
    kwargs = _body_kwargs(cfg.get("sim", {}))

    controller = SimulationController(name=system)
    bodies = cfg.get("bodies") or [{}]
    for i, entry in enumerate(bodies):
        name = entry.get("name") or (system if len(bodies) == 1 else f"{system}_{i}")
        controller.add_body(cps.make_body(params, x0=entry.get("x0"), name=name, **kwargs))
    return controller


def add_drone(controller: SimulationController, name: Optional[str] = None, params=None,
              x0=None, **body_kwargs) -> PhysicalBody:
    """ Add a drone with default engines to an existing environment.

    Args:
        controller (SimulationController): environment to add to
        name (str, optional): body name. Defaults to drone_<n>.
        params (dict | drone.Params, optional): physical parameters
        x0 (array-like, optional): initial state

    Returns:
        PhysicalBody: the new drone
    """
    drone = import_system("drone")
    if name is None:
        taken = set(controller.bodies)
        n = len(taken)
        while f"drone_{n}" in taken:
            n += 1
        name = f"drone_{n}"
    return controller.add_body(drone.make_body(params, x0=x0, name=name, **body_kwargs))
