"""Force algorithms computing per-particle gravitational acceleration."""

from gravity_sim.physics.force_algorithms.base import ForceAlgorithm
from gravity_sim.physics.force_algorithms.brute_force import BruteForce
from gravity_sim.physics.force_algorithms.barnes_hut import BarnesHut, QuadTree
from gravity_sim.physics.force_algorithms.factory import (
    AlgorithmKind,
    get_algorithm,
    list_algorithms,
)

__all__ = [
    "ForceAlgorithm",
    "BruteForce",
    "BarnesHut",
    "QuadTree",
    "AlgorithmKind",
    "get_algorithm",
    "list_algorithms",
]
