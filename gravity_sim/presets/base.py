"""Base class for scene generators."""

from abc import ABC, abstractmethod
from typing import Optional
import numpy as np
from gravity_sim.physics.particle import ParticleSet
from gravity_sim.utils.reproducibility import make_rng


class Preset(ABC):
    """A named recipe for an initial ParticleSet.

    Generators are pure: calling ``generate`` twice with the same seed
    yields bit-identical sets, and nothing outside the returned set is
    touched.
    """

    def __init__(self, n_particles: int = 0, seed: Optional[int] = None):
        self.n_particles = n_particles
        self.seed = seed

    def rng(self) -> np.random.Generator:
        """Fresh generator for one ``generate`` call."""
        return make_rng(self.seed)

    @abstractmethod
    def generate(self) -> ParticleSet:
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    def load_into(self, simulator) -> int:
        """Replace a simulator's scene with this preset. Returns the particle count."""
        particles = self.generate()
        simulator.reset_to(particles)
        return len(particles)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(n_particles={self.n_particles}, seed={self.seed})"
