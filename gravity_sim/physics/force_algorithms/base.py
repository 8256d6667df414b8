"""Abstract base class for force algorithms."""

from abc import ABC, abstractmethod
import numpy as np
from gravity_sim.errors import MalformedInputError
from gravity_sim.physics.particle import ParticleSet

# Gravitational constant in SI units (m^3 kg^-1 s^-2)
DEFAULT_G = 6.67430e-11
# Minimum separation used in the force law (world units)
DEFAULT_EPSILON = 1.0


class ForceAlgorithm(ABC):
    """Computes the net gravitational acceleration on every particle.

    Implementations must be deterministic for a given input order and
    must never modify the particle set they are given.
    """

    def __init__(self, G: float = DEFAULT_G, epsilon: float = DEFAULT_EPSILON, num_workers: int = 1):
        """Initialize force algorithm.

        Args:
            G: Gravitational constant
            epsilon: Softening distance; separations below it are clamped to it
            num_workers: Number of threads the particle range is sharded across
        """
        if epsilon <= 0:
            raise ValueError(f"epsilon must be positive, got {epsilon}")
        if num_workers < 1:
            raise ValueError(f"num_workers must be at least 1, got {num_workers}")
        self.G = float(G)
        self.epsilon = float(epsilon)
        self.num_workers = int(num_workers)

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of this algorithm."""
        pass

    def compute_accelerations(self, particles: ParticleSet) -> np.ndarray:
        """Compute accelerations (n, 2), one row per particle, same order.

        An empty set yields an empty (0, 2) array.

        Raises:
            MalformedInputError: If masses or positions are not finite or
                masses are not positive
        """
        n = len(particles)
        if n == 0:
            return np.zeros((0, 2))
        validate_particles(particles)
        return self._compute(particles.positions, particles.masses)

    @abstractmethod
    def _compute(self, positions: np.ndarray, masses: np.ndarray) -> np.ndarray:
        """Compute accelerations for validated, non-empty arrays."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(G={self.G}, epsilon={self.epsilon}, num_workers={self.num_workers})"


def validate_particles(particles: ParticleSet):
    masses = particles.masses
    positions = particles.positions
    if positions.shape != (masses.shape[0], 2):
        raise MalformedInputError(
            f"Positions shape {positions.shape} does not match {masses.shape[0]} masses"
        )
    if not np.all(np.isfinite(masses)) or np.any(masses <= 0):
        raise MalformedInputError("Particle masses must be positive and finite")
    if not np.all(np.isfinite(positions)):
        raise MalformedInputError("Particle positions must be finite")
