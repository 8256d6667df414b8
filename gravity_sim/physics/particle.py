"""Particle and ParticleSet: the physical state the simulation advances."""

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Sequence, Tuple
import numpy as np
from gravity_sim.errors import ConstructionError


Vector2 = Tuple[float, float]


@dataclass(frozen=True)
class Particle:
    """A single point mass.

    Mass is fixed for the particle's lifetime; position and velocity are
    2D vectors in world units.
    """

    mass: float
    position: Vector2 = (0.0, 0.0)
    velocity: Vector2 = (0.0, 0.0)

    def __post_init__(self):
        mass = float(self.mass)
        if not np.isfinite(mass) or mass <= 0:
            raise ConstructionError(f"Particle mass must be positive and finite, got {self.mass!r}")
        object.__setattr__(self, "mass", mass)
        object.__setattr__(self, "position", _as_vector(self.position, "position"))
        object.__setattr__(self, "velocity", _as_vector(self.velocity, "velocity"))


def _as_vector(value, label: str) -> Vector2:
    try:
        x, y = value
        vec = (float(x), float(y))
    except (TypeError, ValueError) as exc:
        raise ConstructionError(f"Particle {label} must be a 2D vector, got {value!r}") from exc
    if not (np.isfinite(vec[0]) and np.isfinite(vec[1])):
        raise ConstructionError(f"Particle {label} must be finite, got {value!r}")
    return vec


class ParticleSet:
    """Ordered, contiguous collection of particles.

    Stored as structure-of-arrays: ``masses`` (n,), ``positions`` (n, 2)
    and ``velocities`` (n, 2), all float64. A particle's identity is its
    row index.
    """

    __slots__ = ("masses", "positions", "velocities")

    def __init__(self, masses, positions, velocities, validate: bool = True):
        """Create a particle set from arrays.

        Args:
            masses: Array-like of shape (n,)
            positions: Array-like of shape (n, 2)
            velocities: Array-like of shape (n, 2)
            validate: Reject non-positive masses and non-finite values

        Raises:
            ConstructionError: If shapes disagree or values are invalid
        """
        masses = np.array(masses, dtype=np.float64).reshape(-1)
        positions = np.array(positions, dtype=np.float64)
        velocities = np.array(velocities, dtype=np.float64)
        n = masses.shape[0]
        if n == 0:
            positions = positions.reshape(0, 2)
            velocities = velocities.reshape(0, 2)
        if positions.shape != (n, 2) or velocities.shape != (n, 2):
            raise ConstructionError(
                f"Expected positions and velocities of shape ({n}, 2), "
                f"got {positions.shape} and {velocities.shape}"
            )
        if validate:
            if not np.all(np.isfinite(masses)) or np.any(masses <= 0):
                raise ConstructionError("All particle masses must be positive and finite")
            if not (np.all(np.isfinite(positions)) and np.all(np.isfinite(velocities))):
                raise ConstructionError("Particle positions and velocities must be finite")
        self.masses = masses
        self.positions = positions
        self.velocities = velocities

    @classmethod
    def empty(cls) -> "ParticleSet":
        return cls(np.zeros(0), np.zeros((0, 2)), np.zeros((0, 2)))

    @classmethod
    def from_particles(cls, particles: Iterable[Particle]) -> "ParticleSet":
        particles = list(particles)
        if not particles:
            return cls.empty()
        return cls(
            [p.mass for p in particles],
            [p.position for p in particles],
            [p.velocity for p in particles],
        )

    @classmethod
    def concatenate(cls, sets: Sequence["ParticleSet"]) -> "ParticleSet":
        sets = [s for s in sets if len(s) > 0]
        if not sets:
            return cls.empty()
        return cls(
            np.concatenate([s.masses for s in sets]),
            np.concatenate([s.positions for s in sets]),
            np.concatenate([s.velocities for s in sets]),
            validate=False,
        )

    def __len__(self) -> int:
        return self.masses.shape[0]

    def __getitem__(self, index: int) -> Particle:
        return Particle(
            self.masses[index],
            tuple(self.positions[index]),
            tuple(self.velocities[index]),
        )

    def __iter__(self) -> Iterator[Particle]:
        for i in range(len(self)):
            yield self[i]

    def __repr__(self) -> str:
        return f"ParticleSet(n={len(self)})"

    @property
    def writeable(self) -> bool:
        return bool(self.positions.flags.writeable)

    def copy(self) -> "ParticleSet":
        """Deep copy with writeable arrays."""
        return ParticleSet(
            self.masses.copy(), self.positions.copy(), self.velocities.copy(), validate=False
        )

    def read_only(self) -> "ParticleSet":
        """Deep copy whose arrays reject in-place writes."""
        frozen = self.copy()
        for arr in (frozen.masses, frozen.positions, frozen.velocities):
            arr.flags.writeable = False
        return frozen

    def equals(self, other: Optional["ParticleSet"]) -> bool:
        """Bit-for-bit equality of all arrays."""
        if other is None or len(self) != len(other):
            return False
        return (
            np.array_equal(self.masses, other.masses)
            and np.array_equal(self.positions, other.positions)
            and np.array_equal(self.velocities, other.velocities)
        )
