"""Utility functions for configuration, logging and reproducibility."""

from gravity_sim.utils.config import Config, load_config, save_config, config_from_env
from gravity_sim.utils.logging_config import setup_logging
from gravity_sim.utils.reproducibility import set_all_seeds, make_rng

__all__ = [
    "Config",
    "load_config",
    "save_config",
    "config_from_env",
    "setup_logging",
    "set_all_seeds",
    "make_rng",
]
