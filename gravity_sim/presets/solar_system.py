"""Solar system preset (SI units: kg, m, m/s)."""

import math
import numpy as np
from gravity_sim.physics.particle import ParticleSet
from gravity_sim.presets.base import Preset

# name: (mass kg, mean orbital radius m, mean orbital speed m/s)
BODIES = (
    ("sun", 1.989e30, 0.0, 0.0),
    ("mercury", 3.301e23, 5.791e10, 4.736e4),
    ("venus", 4.867e24, 1.0821e11, 3.502e4),
    ("earth", 5.972e24, 1.496e11, 2.978e4),
    ("mars", 6.417e23, 2.2792e11, 2.4077e4),
    ("jupiter", 1.898e27, 7.7857e11, 1.307e4),
    ("saturn", 5.683e26, 1.43353e12, 9.68e3),
    ("uranus", 8.681e25, 2.87246e12, 6.80e3),
    ("neptune", 1.024e26, 4.49506e12, 5.43e3),
)

CENTRAL_INDEX = 0


class SolarSystem(Preset):
    """Sun plus the eight planets on circular, prograde orbits.

    Planets are spread around the Sun at fixed phase angles rather than
    lined up, so the scene is not degenerate along one axis.
    """

    central_index = CENTRAL_INDEX

    def __init__(self, phase_step: float = 2.399963, center_momentum: bool = True):
        """Initialize solar system preset.

        Args:
            phase_step: Angle (radians) between successive planets
            center_momentum: Give the Sun the velocity that zeroes total momentum
        """
        super().__init__(len(BODIES), None)
        self.phase_step = phase_step
        self.center_momentum = center_momentum

    @property
    def name(self) -> str:
        return "solar_system"

    @property
    def body_names(self):
        return [body[0] for body in BODIES]

    def generate(self) -> ParticleSet:
        masses = np.array([body[1] for body in BODIES])
        positions = np.zeros((len(BODIES), 2))
        velocities = np.zeros((len(BODIES), 2))
        for k, (_, _, radius, speed) in enumerate(BODIES):
            angle = k * self.phase_step
            positions[k] = (radius * math.cos(angle), radius * math.sin(angle))
            velocities[k] = (-speed * math.sin(angle), speed * math.cos(angle))
        if self.center_momentum:
            momentum = np.sum(masses[:, np.newaxis] * velocities, axis=0)
            velocities[CENTRAL_INDEX] -= momentum / masses[CENTRAL_INDEX]
        return ParticleSet(masses, positions, velocities)


def solar_system_preset() -> ParticleSet:
    return SolarSystem().generate()
