"""
Gravity Simulator - interactive 2D N-body gravity.

Features:
- Exact all-pairs and Barnes-Hut quadtree force algorithms, switchable per step
- Thread-sharded force computation
- Semi-implicit Euler integration
- Benchmark harness comparing algorithms
- Random cloud and solar system presets
- CLI and matplotlib viewer
"""

__version__ = "0.1.0"

from gravity_sim.physics.simulator import Simulator
from gravity_sim.physics.particle import Particle, ParticleSet
from gravity_sim.physics.force_algorithms.factory import AlgorithmKind, get_algorithm, list_algorithms
from gravity_sim.utils.config import Config

__all__ = [
    "Simulator",
    "Particle",
    "ParticleSet",
    "AlgorithmKind",
    "get_algorithm",
    "list_algorithms",
    "Config",
]
