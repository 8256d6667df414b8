"""Physics engine for 2D N-body gravity."""

from gravity_sim.physics.particle import Particle, ParticleSet
from gravity_sim.physics.store import ParticleStore, StateUpdate
from gravity_sim.physics.simulator import Simulator

__all__ = ["Particle", "ParticleSet", "ParticleStore", "StateUpdate", "Simulator"]
