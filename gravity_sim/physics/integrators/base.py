"""Abstract base class for numerical integrators."""

from abc import ABC, abstractmethod
import numpy as np
from gravity_sim.errors import MalformedInputError
from gravity_sim.physics.particle import ParticleSet
from gravity_sim.physics.store import StateUpdate


class Integrator(ABC):
    """Abstract interface for numerical integrators."""

    def integrate(self, particles: ParticleSet, accelerations: np.ndarray, dt: float) -> StateUpdate:
        """Advance every particle by one time step.

        Args:
            particles: Current particle state (not modified)
            accelerations: (n, 2) accelerations, same order as particles
            dt: Time step, must be positive

        Returns:
            StateUpdate covering every particle

        Raises:
            ValueError: If dt is not positive
            MalformedInputError: If accelerations do not match the particles
        """
        if not dt > 0:
            raise ValueError(f"dt must be positive, got {dt}")
        accelerations = np.asarray(accelerations, dtype=np.float64)
        n = len(particles)
        if accelerations.shape != (n, 2):
            raise MalformedInputError(f"Expected accelerations of shape ({n}, 2), got {accelerations.shape}")
        new_positions, new_velocities = self.step(
            particles.positions, particles.velocities, accelerations, dt
        )
        return StateUpdate(np.arange(n), new_positions, new_velocities)

    @abstractmethod
    def step(self, positions: np.ndarray, velocities: np.ndarray, accelerations: np.ndarray, dt: float):
        """Return (new_positions, new_velocities) as new arrays."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of this integrator."""
        pass

    @property
    @abstractmethod
    def order(self) -> int:
        """Return the order of accuracy."""
        pass
