from pathlib import Path
import pandas as pd
from ..environments import create_environment
from ..errors import ValidationError
from ..utils import import_system

def _resolve_time_params(cfg):
    """ Resolve tick parameters from config.

    Args:
        cfg (dict): config dictionary
    Raises:
        ValidationError: if time parameters are not properly specified
    Returns:
        tuple: (T, dt, n_ticks)
    """
    dt = float(cfg.get("sim", {}).get("dt", 0.02))  # tick interval
    if dt <= 0:
        raise ValidationError(f"sim.dt must be positive, got {dt}")

    # Get total sim time or number of ticks
    data = cfg.get("data", {})
    T = data.get("sim_time", None)  # total sim time in seconds
    n = data.get("n_ticks", None)   # total number of ticks

    if T is None and n is None:
        raise ValidationError("Either 'sim_time' (seconds) or 'n_ticks' must be specified in config data section.")
    if T is not None and n is not None:
        raise ValidationError("Only one of 'sim_time' (seconds) or 'n_ticks' should be specified in config data section, not both.")
    if n is None:
        n = int(round(float(T) / dt))
    T = n * dt

    return T, dt, int(n)

def _resolve_commands(cfg, default_body):
    """ Resolve the command schedule, sorted by time.

    Each entry is {t, actuator, value} with an optional body (defaults to the
    only body of a single-body environment).
    """
    commands = []
    for i, c in enumerate(cfg.get("commands") or []):
        missing = [k for k in ("t", "actuator", "value") if k not in c]
        if missing:
            raise ValidationError(f"Command #{i} is missing {missing}: {c}")
        body = c.get("body", default_body)
        if body is None:
            raise ValidationError(f"Command #{i} needs a 'body' in a multi-body environment: {c}")
        commands.append((float(c["t"]), body, c["actuator"], float(c["value"])))
    return sorted(commands, key=lambda c: c[0]) # stable, so same-time commands keep file order

def _next_filename(out_dir):
    """ Generate the next available filename in a directory.

    Args:
        out_dir (Path): output directory

    Returns:
        str: next available filename, e.g. "traj_000.csv"
    """
    existing = [f.name for f in out_dir.glob("traj_*.csv")]
    if not existing:
        return "traj_000.csv"
    nums = [int(f[5:8]) for f in existing if f[5:8].isdigit()]
    next_num = max(nums) + 1 if nums else 0
    return f"traj_{next_num:03d}.csv"

def rollout(controller, cps, dt, n_ticks, commands=()):
    """ Tick an environment and record every body after each tick.

    Commands scheduled at time t are applied before the tick that starts at t.

    Args:
        controller (SimulationController): environment to run
        cps (module): dynamics module of the environment's bodies
        dt (float): tick interval
        n_ticks (int): number of ticks
        commands (list): (t, body, actuator, value) tuples sorted by t

    Returns:
        pd.DataFrame: one row per body per tick
    """
    pending = list(commands)
    rows = []
    tol = 1e-9 * max(dt, 1.0)

    for k in range(n_ticks):
        t = k * dt
        while pending and pending[0][0] <= t + tol:
            _, body, actuator, value = pending.pop(0)
            controller.receive(body, actuator, value)

        controller.tick(dt)

        # --- record a row aligned as (t, body, state_t, u_t) ---
        for name in controller.bodies:
            row = {"t": (k + 1) * dt, "body": name}
            row.update(controller.body(name).snapshot())
            rows.append(row)

    col_order = ["t", "body"] + cps.STATE_NAMES + [f"u_{a}" for a in cps.ACTUATOR_NAMES]
    return pd.DataFrame(rows, columns=col_order)

def simulate(cfg, out_dir="data/raw"):
    """ Run a configured environment and save its trajectory.

    Args:
        cfg (dict): configuration dictionary
        out_dir (str, optional): output directory. The CSV lands in <out_dir>/<system>/. Defaults to "data/raw".

    Returns:
        str: path to the saved trajectory CSV file
    """
    sys_name = cfg["system"]
    out = Path(out_dir) / sys_name
    out.mkdir(parents=True, exist_ok=True) # ensure output directory exists

    cps = import_system(sys_name)
    controller = create_environment(sys_name, cfg)

    _, dt, n_ticks = _resolve_time_params(cfg)
    bodies = controller.bodies
    commands = _resolve_commands(cfg, bodies[0] if len(bodies) == 1 else None)

    df = rollout(controller, cps, dt, n_ticks, commands)

    out_path = out / _next_filename(out)
    df.to_csv(out_path, index=False)
    print(f"Saved trajectory to {out_path}")
    return str(out_path)
