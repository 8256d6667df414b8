"""Configuration management."""

import json
import os
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Mapping, Optional
import yaml
from gravity_sim.errors import ConfigError

ENV_PREFIX = "GRAVITY_SIM_"


@dataclass
class Config:
    """Simulation configuration."""
    # Physics
    G: float = 6.67430e-11
    epsilon: float = 1.0
    theta: float = 0.5

    # Stepping
    dt: float = 1.0 / 60.0
    min_dt: float = 1e-6
    max_dt: float = 0.1
    time_scale: float = 1.0

    # Force computation
    algorithm: str = "barnes_hut"
    num_workers: int = 1

    # Benchmark
    benchmark_particles: int = 1000
    benchmark_repetitions: int = 10
    benchmark_max_duration: float = 30.0

    # Spawning
    spawn_mass: float = 1.0e2
    heavy_mass: float = 1.0e12

    # Viewer
    view_radius: float = 1000.0

    # Reproducibility
    seed: Optional[int] = None

    def validate(self) -> "Config":
        """Check every field; returns self so calls can be chained.

        Raises:
            ConfigError: On the first invalid field
        """
        from gravity_sim.physics.force_algorithms.factory import list_algorithms

        for name in ("G", "epsilon", "dt", "min_dt", "max_dt", "time_scale",
                     "spawn_mass", "heavy_mass", "view_radius", "benchmark_max_duration"):
            if not getattr(self, name) > 0:
                raise ConfigError(f"{name} must be positive, got {getattr(self, name)!r}")
        if self.theta < 0:
            raise ConfigError(f"theta must be non-negative, got {self.theta!r}")
        if self.min_dt > self.max_dt:
            raise ConfigError(f"min_dt ({self.min_dt}) exceeds max_dt ({self.max_dt})")
        if self.num_workers < 1:
            raise ConfigError(f"num_workers must be at least 1, got {self.num_workers!r}")
        if self.benchmark_particles < 1 or self.benchmark_repetitions < 1:
            raise ConfigError("benchmark_particles and benchmark_repetitions must be at least 1")
        if self.algorithm not in list_algorithms():
            raise ConfigError(
                f"Unknown algorithm '{self.algorithm}'. Available: {list_algorithms()}"
            )
        return self


def _coerce(name: str, raw: str, default):
    if isinstance(default, bool):
        return raw.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(default, int) or name == "seed":
        return int(raw)
    if isinstance(default, float):
        return float(raw)
    return raw


def config_from_env(config: Optional[Config] = None, environ: Optional[Mapping[str, str]] = None) -> Config:
    """Apply GRAVITY_SIM_<FIELD> environment variables on top of a config.

    Args:
        config: Base config (defaults if None)
        environ: Mapping to read instead of os.environ

    Returns:
        New Config with overrides applied

    Raises:
        ConfigError: If a variable cannot be converted to its field's type
    """
    config = config or Config()
    environ = os.environ if environ is None else environ
    data = asdict(config)
    defaults = Config()
    for f in fields(Config):
        key = ENV_PREFIX + f.name.upper()
        if key not in environ:
            continue
        try:
            data[f.name] = _coerce(f.name, environ[key], getattr(defaults, f.name))
        except ValueError as exc:
            raise ConfigError(f"Invalid value for {key}: {environ[key]!r}") from exc
    return Config(**data)


def load_config(config_path: str) -> Config:
    """Load configuration from file.

    Args:
        config_path: Path to config file (.json or .yaml)

    Returns:
        Config object

    Raises:
        ConfigError: If the file holds unknown keys
    """
    config_path = Path(config_path)

    with open(config_path, 'r') as f:
        if config_path.suffix in ('.yaml', '.yml'):
            data = yaml.safe_load(f) or {}
        else:
            data = json.load(f)

    known = {f.name for f in fields(Config)}
    unknown = set(data) - known
    if unknown:
        raise ConfigError(f"Unknown config keys in {config_path}: {sorted(unknown)}")
    return Config(**data)


def save_config(config: Config, output_path: str):
    """Save configuration to file.

    Args:
        config: Config object
        output_path: Output file path (.json or .yaml)
    """
    output_path = Path(output_path)
    data = asdict(config)

    with open(output_path, 'w') as f:
        if output_path.suffix in ('.yaml', '.yml'):
            yaml.dump(data, f, default_flow_style=False)
        else:
            json.dump(data, f, indent=2)
