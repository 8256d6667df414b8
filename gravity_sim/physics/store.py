"""Particle store: exclusive owner of the live particle arrays."""

import logging
import threading
from dataclasses import dataclass
from typing import List
import numpy as np
from gravity_sim.errors import IndexOutOfRangeError, MalformedInputError
from gravity_sim.physics.particle import Particle, ParticleSet

logger = logging.getLogger(__name__)


@dataclass
class StateUpdate:
    """New positions and velocities for the particles at ``indices``."""

    indices: np.ndarray
    positions: np.ndarray
    velocities: np.ndarray

    def __len__(self) -> int:
        return int(np.shape(self.indices)[0])


class ParticleStore:
    """Owns the mutable ParticleSet for one simulation session.

    The store never resizes while a step is being computed: ``append``
    only queues particles, and ``commit_pending`` folds them in at a step
    boundary. ``apply`` validates the whole update before writing, so a
    rejected update leaves the previous state untouched.
    """

    def __init__(self, initial: ParticleSet = None):
        self._particles = initial.copy() if initial is not None else ParticleSet.empty()
        self._pending: List[Particle] = []
        self._lock = threading.Lock()

    @classmethod
    def create(cls, initial) -> "ParticleStore":
        """Create a store from a ParticleSet or a sequence of Particles."""
        if not isinstance(initial, ParticleSet):
            initial = ParticleSet.from_particles(initial)
        return cls(initial)

    def __len__(self) -> int:
        return len(self._particles)

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def snapshot(self) -> ParticleSet:
        """Read-only copy of the current particles.

        Later ``apply``/``commit_pending`` calls never change a snapshot
        that has already been handed out.
        """
        with self._lock:
            return self._particles.read_only()

    def append(self, particle: Particle):
        """Queue a particle to be added at the next step boundary."""
        with self._lock:
            self._pending.append(particle)

    def extend(self, particles: ParticleSet):
        with self._lock:
            self._pending.extend(particles)

    def commit_pending(self) -> int:
        """Append every queued particle. Returns how many were added."""
        with self._lock:
            if not self._pending:
                return 0
            added = ParticleSet.from_particles(self._pending)
            self._pending = []
            self._particles = ParticleSet.concatenate([self._particles, added])
            return len(added)

    def discard_pending(self) -> int:
        with self._lock:
            dropped = len(self._pending)
            self._pending = []
            return dropped

    def replace(self, particles: ParticleSet):
        """Replace the whole scene."""
        with self._lock:
            self._particles = particles.copy()

    def apply(self, update: StateUpdate):
        """Write new positions and velocities, all-or-nothing.

        Raises:
            IndexOutOfRangeError: If any index is outside the current store
            MalformedInputError: If the update's shapes disagree or it
                contains non-finite values
        """
        indices = np.asarray(update.indices, dtype=np.intp).reshape(-1)
        positions = np.asarray(update.positions, dtype=np.float64)
        velocities = np.asarray(update.velocities, dtype=np.float64)
        k = indices.shape[0]
        if positions.shape != (k, 2) or velocities.shape != (k, 2):
            raise MalformedInputError(
                f"Update for {k} particles has positions {positions.shape} "
                f"and velocities {velocities.shape}"
            )
        if not (np.all(np.isfinite(positions)) and np.all(np.isfinite(velocities))):
            raise MalformedInputError("Update contains non-finite positions or velocities")

        with self._lock:
            n = len(self._particles)
            if k and (indices.min() < 0 or indices.max() >= n):
                bad = indices[(indices < 0) | (indices >= n)]
                raise IndexOutOfRangeError(
                    f"Update references index {int(bad[0])} but store holds {n} particles"
                )
            self._particles.positions[indices] = positions
            self._particles.velocities[indices] = velocities
        logger.debug("Applied update to %d particles", k)
