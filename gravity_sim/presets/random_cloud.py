"""Uniform random particle cloud."""

from typing import Optional, Tuple, Union
import numpy as np
from gravity_sim.errors import ConstructionError
from gravity_sim.physics.particle import ParticleSet
from gravity_sim.presets.base import Preset

Range = Tuple[float, float]
# Either one (low, high) range for both axes or ((x_low, x_high), (y_low, y_high))
Bounds = Union[Range, Tuple[Range, Range]]


def as_axis_bounds(bounds: Bounds, label: str) -> np.ndarray:
    """Normalise shared or per-axis bounds to a (2, 2) array of [[x_low, x_high], [y_low, y_high]]."""
    arr = np.asarray(bounds, dtype=np.float64)
    if arr.shape == (2,):
        arr = np.stack([arr, arr])
    if arr.shape != (2, 2) or not np.all(np.isfinite(arr)):
        raise ConstructionError(f"Invalid {label} {bounds!r}")
    if np.any(arr[:, 0] > arr[:, 1]):
        raise ConstructionError(f"{label} low bound exceeds high bound: {bounds!r}")
    return arr


class RandomCloud(Preset):
    """Particles with uniformly distributed masses, positions and velocities."""

    def __init__(
        self,
        n_particles: int = 1000,
        seed: Optional[int] = None,
        mass_range: Range = (1.0e2, 1.0e4),
        position_range: Bounds = (-500.0, 500.0),
        velocity_range: Bounds = (0.0, 0.0),
    ):
        """Initialize random cloud preset.

        Args:
            n_particles: Number of particles
            seed: Random seed; identical seeds give bit-identical sets
            mass_range: (low, high) mass, low must be positive
            position_range: Position bounds, shared or per axis
            velocity_range: Velocity bounds, shared or per axis

        Raises:
            ConstructionError: For negative counts or invalid ranges
        """
        super().__init__(n_particles, seed)
        if n_particles < 0:
            raise ConstructionError(f"n_particles must be non-negative, got {n_particles}")
        low, high = (float(v) for v in mass_range)
        if not (np.isfinite(low) and np.isfinite(high)) or low <= 0 or high < low:
            raise ConstructionError(f"mass_range must satisfy 0 < low <= high, got {mass_range!r}")
        self.mass_range = (low, high)
        self.position_bounds = as_axis_bounds(position_range, "position_range")
        self.velocity_bounds = as_axis_bounds(velocity_range, "velocity_range")

    @property
    def name(self) -> str:
        return "random"

    def generate(self) -> ParticleSet:
        """Generate random cloud initial conditions."""
        n = self.n_particles
        rng = self.rng()
        masses = rng.uniform(self.mass_range[0], self.mass_range[1], n)
        positions = rng.uniform(self.position_bounds[:, 0], self.position_bounds[:, 1], (n, 2))
        velocities = rng.uniform(self.velocity_bounds[:, 0], self.velocity_bounds[:, 1], (n, 2))
        return ParticleSet(masses, positions, velocities)


def random_cloud(
    count: int,
    mass_range: Range = (1.0e2, 1.0e4),
    position_range: Bounds = (-500.0, 500.0),
    velocity_range: Bounds = (0.0, 0.0),
    seed: Optional[int] = None,
) -> ParticleSet:
    return RandomCloud(count, seed, mass_range, position_range, velocity_range).generate()
