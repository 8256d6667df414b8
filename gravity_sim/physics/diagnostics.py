"""Conserved-quantity diagnostics for a particle set."""

import numpy as np
from gravity_sim.physics.particle import ParticleSet


def kinetic_energy(particles: ParticleSet) -> float:
    """K = 0.5 * sum(m_i * |v_i|^2)."""
    v_sq = np.sum(particles.velocities ** 2, axis=1)
    return float(0.5 * np.sum(particles.masses * v_sq))


def potential_energy(particles: ParticleSet, G: float, epsilon: float) -> float:
    """Pairwise potential using the same distance clamp as the force law.

    U = -G * sum_{i<j} m_i * m_j / max(r_ij, eps)
    """
    n = len(particles)
    if n < 2:
        return 0.0
    positions = particles.positions
    masses = particles.masses
    U = 0.0
    for i in range(n - 1):
        r_diff = positions[i + 1:] - positions[i]
        r = np.sqrt(np.sum(r_diff ** 2, axis=1))
        U -= np.sum(masses[i] * masses[i + 1:] / np.maximum(r, epsilon))
    return float(G * U)


def total_energy(particles: ParticleSet, G: float, epsilon: float) -> float:
    return kinetic_energy(particles) + potential_energy(particles, G, epsilon)


def total_momentum(particles: ParticleSet) -> np.ndarray:
    """Total linear momentum as a 2-vector."""
    return np.sum(particles.masses[:, np.newaxis] * particles.velocities, axis=0)


def center_of_mass(particles: ParticleSet) -> np.ndarray:
    if len(particles) == 0:
        return np.zeros(2)
    total = np.sum(particles.masses)
    return np.sum(particles.masses[:, np.newaxis] * particles.positions, axis=0) / total


def angular_momentum(particles: ParticleSet) -> float:
    """L_z = sum(m_i * (x_i * vy_i - y_i * vx_i)) about the origin."""
    pos = particles.positions
    vel = particles.velocities
    return float(np.sum(particles.masses * (pos[:, 0] * vel[:, 1] - pos[:, 1] * vel[:, 0])))
