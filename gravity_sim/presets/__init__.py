"""Generators producing initial particle sets."""

from gravity_sim.presets.base import Preset
from gravity_sim.presets.random_cloud import RandomCloud, random_cloud
from gravity_sim.presets.solar_system import SolarSystem, solar_system_preset
from gravity_sim.presets.bodies import heavy_body, spawn_body, HEAVY_BODY_MASS, SPAWN_MASS

__all__ = [
    "Preset",
    "RandomCloud",
    "random_cloud",
    "SolarSystem",
    "solar_system_preset",
    "heavy_body",
    "spawn_body",
    "HEAVY_BODY_MASS",
    "SPAWN_MASS",
]
