"""Tests for conserved-quantity diagnostics."""

import numpy as np
from gravity_sim.physics import diagnostics
from gravity_sim.physics.particle import Particle, ParticleSet


def test_kinetic_energy():
    particles = ParticleSet([2.0, 1.0], np.zeros((2, 2)), [[1.0, 0.0], [0.0, 2.0]])
    assert np.isclose(diagnostics.kinetic_energy(particles), 0.5 * 2.0 + 0.5 * 4.0)


def test_potential_energy_uses_clamp():
    near = ParticleSet.from_particles([Particle(1.0, (0.0, 0.0)), Particle(2.0, (0.1, 0.0))])
    far = ParticleSet.from_particles([Particle(1.0, (0.0, 0.0)), Particle(2.0, (4.0, 0.0))])
    assert np.isclose(diagnostics.potential_energy(near, 1.0, 0.5), -2.0 / 0.5)
    assert np.isclose(diagnostics.potential_energy(far, 1.0, 0.5), -2.0 / 4.0)


def test_single_particle_has_no_potential():
    single = ParticleSet([5.0], [[1.0, 1.0]], [[0.0, 0.0]])
    assert diagnostics.potential_energy(single, 1.0, 1.0) == 0.0


def test_momentum_and_center_of_mass():
    particles = ParticleSet([1.0, 3.0], [[0.0, 0.0], [4.0, 0.0]], [[3.0, 0.0], [-1.0, 0.0]])
    assert np.allclose(diagnostics.total_momentum(particles), [0.0, 0.0])
    assert np.allclose(diagnostics.center_of_mass(particles), [3.0, 0.0])
    assert np.allclose(diagnostics.center_of_mass(ParticleSet.empty()), [0.0, 0.0])


def test_angular_momentum():
    particles = ParticleSet([2.0], [[1.0, 0.0]], [[0.0, 3.0]])
    assert np.isclose(diagnostics.angular_momentum(particles), 6.0)
