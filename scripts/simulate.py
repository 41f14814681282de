from hybrid_sim.utils import parse_with_config, setup_logging
from hybrid_sim.data.generate import simulate
from pathlib import Path
import yaml


if __name__ == "__main__":
    """ Simulate a configured environment and save the trajectory as CSV.

    e.g. python scripts/simulate.py --config configs/drone.yaml --set sim.integrator=rk4
    """

    cfg, args = parse_with_config() # get config from command-line args
    setup_logging(args.log_level)

    out_dir = Path("data/raw") / cfg["exp"] if cfg.get("exp") else Path("data/raw")

    # simulate and save raw data
    raw_path = simulate(cfg, out_dir=out_dir)

    # save config used for this data to <out_dir>/<system>/configs/traj_name_from_raw_path.yaml
    config_dir = Path(out_dir) / cfg["system"] / "configs"
    config_dir.mkdir(parents=True, exist_ok=True)
    config_path = config_dir / (Path(raw_path).stem + ".yaml")
    with open(config_path, "w") as f:
        yaml.safe_dump(cfg, f)
    print(f"Config used for this data saved to: {config_path}")
