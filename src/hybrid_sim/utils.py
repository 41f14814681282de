import argparse, json, logging, yaml
import importlib

def import_system(system_name: str):
    """ Import a dynamics module by system name.

    Args:
        system_name (str): system name, e.g. "pendulum"

    Raises:
        ModuleNotFoundError: if the module cannot be found

    Returns:
        module: the imported dynamics module
    """
    # e.g. "pendulum" -> "hybrid_sim.dynamics.pendulum"
    try:
        mod = importlib.import_module(f"hybrid_sim.dynamics.{system_name}")
    except ModuleNotFoundError as e:
        raise ModuleNotFoundError(f"Could not find dynamics module for system '{system_name}'. Ensure 'src/hybrid_sim/dynamics/{system_name}.py' exists.") from e
    return mod

def setup_logging(level="INFO"):
    """ Configure root logging for command-line scripts.

    Args:
        level (str | int, optional): logging level. Defaults to "INFO".
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

def load_cfg(path:str):
    """ Load configuration from a YAML or JSON file.

    Args:
        path (str): Path to the YAML configuration file.

    Returns:
        dict: Configuration dictionary.
    """
    with open(path) as f:
        text = f.read()
    if path.endswith(".yaml") or path.endswith(".yml"):
        return yaml.safe_load(text) or {}
    elif path.endswith(".json"):
        return json.loads(text)
    else:
        raise ValueError("Unsupported config file format. Use .yaml, .yml, or .json")

def _coerce(v: str):
    if v.lower() in {"true","false"}: return v.lower()=="true" # if v is "true" or "false", convert to bool
    try: return int(v) # try to convert to int
    except ValueError:
        try: return float(v) # try to convert to float
        except ValueError: return v

def apply_overrides(cfg:dict, pairs:list[str]|None):
    """ Apply command-line overrides to a configuration dictionary.

    Args:
        cfg (dict): Base configuration dictionary.
        pairs (list[str] | None): List of key-value pairs in the format "key=value" to override.

    Returns:
        dict: Updated configuration dictionary with overrides applied.
    """

    for kv in (pairs or []): # if pairs is None, do nothing (empty list)
        if "=" not in kv:
            raise ValueError(f"Override '{kv}' is not of the form key=value")

        k, v = kv.split("=", 1) # split only on the first '='

        d = cfg

        *ks, last = k.split(".") # e.g. sim.dt -> ks=["sim"], last="dt"

        for kk in ks:
            # walk intermediate keys, creating nested dicts as needed
            d = d.setdefault(kk, {})

        d[last] = _coerce(v) # set the final key to the value

    return cfg

def parse_with_config(argv=None):
    """ Parse command-line arguments and load configuration.
    e.g. python scripts/simulate.py --config configs/drone.yaml --set sim.dt=0.01 data.sim_time=5 --exp hover

    Args:
        argv (list[str] | None, optional): arguments to parse. Defaults to sys.argv[1:].

    Returns:
        tuple: Configuration dictionary and parsed arguments.
    """
    p = argparse.ArgumentParser()
    p.add_argument("--config", default="configs/pendulum.yaml")
    p.add_argument("--set", nargs="*")           # e.g. sim.dt=0.01 sim.integrator=rk4
    p.add_argument("--exp", default=None)
    p.add_argument("--log-level", default="INFO")

    args = p.parse_args(argv) # parse command-line arguments

    # apply command-line overrides
    cfg = apply_overrides(load_cfg(args.config), args.set)

    if args.exp: cfg["exp"] = args.exp # set experiment name if provided

    if "system" not in cfg:
        raise ValueError(f"Config {args.config} does not name a 'system'")
    import_system(cfg["system"]) # fail early on unknown systems

    return cfg, args
