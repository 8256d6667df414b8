"""Tests for configuration loading."""

import json
import pytest
from gravity_sim.errors import ConfigError
from gravity_sim.utils.config import Config, config_from_env, load_config, save_config


def test_defaults_are_valid():
    config = Config().validate()
    assert config.G == 6.67430e-11
    assert config.epsilon == 1.0
    assert config.algorithm == "barnes_hut"
    assert config.spawn_mass == 1.0e2
    assert config.heavy_mass == 1.0e12


@pytest.mark.parametrize("overrides", [
    {"epsilon": 0.0},
    {"G": -1.0},
    {"theta": -0.5},
    {"min_dt": 1.0, "max_dt": 0.1},
    {"num_workers": 0},
    {"benchmark_repetitions": 0},
    {"algorithm": "fmm"},
])
def test_invalid_values(overrides):
    with pytest.raises(ConfigError):
        Config(**overrides).validate()


@pytest.mark.parametrize("suffix", [".json", ".yaml"])
def test_save_and_load(tmp_path, suffix):
    path = tmp_path / f"config{suffix}"
    config = Config(G=1.0, theta=0.7, algorithm="brute_force", num_workers=2, seed=11)
    save_config(config, str(path))
    assert load_config(str(path)) == config


def test_unknown_keys_rejected(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"G": 1.0, "softening": 0.1}))
    with pytest.raises(ConfigError):
        load_config(str(path))


def test_env_overrides():
    environ = {
        "GRAVITY_SIM_G": "2.5",
        "GRAVITY_SIM_NUM_WORKERS": "4",
        "GRAVITY_SIM_ALGORITHM": "brute_force",
        "GRAVITY_SIM_SEED": "9",
        "UNRELATED": "x",
    }
    config = config_from_env(Config(theta=0.9), environ=environ)
    assert config.G == 2.5
    assert config.num_workers == 4
    assert config.algorithm == "brute_force"
    assert config.seed == 9
    assert config.theta == 0.9


def test_env_bad_value():
    with pytest.raises(ConfigError):
        config_from_env(environ={"GRAVITY_SIM_EPSILON": "soft"})
