"""Configuration helpers and parameter validation."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pytest

from hybrid_sim.dynamics import drone
from hybrid_sim.dynamics.base import validate_params
from hybrid_sim.errors import ValidationError
from hybrid_sim.utils import apply_overrides, import_system, load_cfg, parse_with_config

ROOT = Path(__file__).resolve().parents[1]


@dataclass
class _Required:
    mass: float
    label: str = "x"


def test_apply_overrides_coerces_values() -> None:
    cfg = {"sim": {"dt": 0.02}}
    apply_overrides(cfg, ["sim.dt=0.01", "sim.max_failures=4", "sim.verbose=true",
                          "sim.integrator=rk4", "data.sim_time=2"])
    assert cfg["sim"] == {"dt": 0.01, "max_failures": 4, "verbose": True, "integrator": "rk4"}
    assert cfg["data"]["sim_time"] == 2
    assert apply_overrides(cfg, None) is cfg
    with pytest.raises(ValueError):
        apply_overrides(cfg, ["sim.dt"])


def test_load_cfg_yaml_and_json(tmp_path: Path) -> None:
    (tmp_path / "a.yaml").write_text("system: drone\nsim:\n  dt: 0.05\n")
    (tmp_path / "b.json").write_text('{"system": "pendulum"}')
    (tmp_path / "c.toml").write_text("system = 'x'")
    assert load_cfg(str(tmp_path / "a.yaml")) == {"system": "drone", "sim": {"dt": 0.05}}
    assert load_cfg(str(tmp_path / "b.json")) == {"system": "pendulum"}
    with pytest.raises(ValueError):
        load_cfg(str(tmp_path / "c.toml"))


def test_shipped_configs_load() -> None:
    for name in ("pendulum", "drone"):
        cfg, args = parse_with_config(["--config", str(ROOT / "configs" / f"{name}.yaml"),
                                       "--set", "sim.dt=0.05", "--exp", "smoke"])
        assert cfg["system"] == name
        assert cfg["sim"]["dt"] == 0.05
        assert cfg["exp"] == "smoke"


def test_import_system() -> None:
    assert import_system("drone") is drone
    with pytest.raises(ModuleNotFoundError):
        import_system("windy_gridworld")


def test_validate_params() -> None:
    assert validate_params(_Required, {"mass": 3}).mass == 3.0
    assert validate_params(_Required, {"mass": 1.0, "label": "y"}).label == "y"
    with pytest.raises(ValidationError):
        validate_params(_Required, {})
    with pytest.raises(ValidationError):
        validate_params(_Required, {"mass": True})
    with pytest.raises(ValidationError):
        validate_params(_Required, {"mass": 1.0, "colour": "red"})
    with pytest.raises(ValidationError):
        validate_params(_Required, [1.0])
    built = drone.Params()
    assert validate_params(drone.Params, built) is built
