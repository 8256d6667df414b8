"""Factory for creating force algorithms by kind."""

from enum import Enum
from typing import List, Union
from gravity_sim.physics.force_algorithms.base import ForceAlgorithm, DEFAULT_G, DEFAULT_EPSILON
from gravity_sim.physics.force_algorithms.brute_force import BruteForce
from gravity_sim.physics.force_algorithms.barnes_hut import BarnesHut, DEFAULT_THETA


class AlgorithmKind(str, Enum):
    """Selectable force algorithm variants."""

    BRUTE_FORCE = "brute_force"
    BARNES_HUT = "barnes_hut"

    @classmethod
    def parse(cls, value: Union[str, "AlgorithmKind"]) -> "AlgorithmKind":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(
                f"Unknown algorithm '{value}'. Available: {list_algorithms()}"
            ) from None


def list_algorithms() -> List[str]:
    """List all algorithm names."""
    return [kind.value for kind in AlgorithmKind]


def get_algorithm(
    kind: Union[str, AlgorithmKind],
    G: float = DEFAULT_G,
    epsilon: float = DEFAULT_EPSILON,
    theta: float = DEFAULT_THETA,
    num_workers: int = 1,
) -> ForceAlgorithm:
    """Get a force algorithm instance.

    Args:
        kind: Algorithm name ('brute_force', 'barnes_hut')
        G: Gravitational constant
        epsilon: Softening distance
        theta: Opening threshold (Barnes-Hut only)
        num_workers: Worker threads per computation

    Raises:
        ValueError: If the algorithm is unknown
    """
    kind = AlgorithmKind.parse(kind)
    if kind is AlgorithmKind.BRUTE_FORCE:
        return BruteForce(G=G, epsilon=epsilon, num_workers=num_workers)
    return BarnesHut(G=G, epsilon=epsilon, theta=theta, num_workers=num_workers)


def algorithm_from_config(kind: Union[str, AlgorithmKind], config) -> ForceAlgorithm:
    return get_algorithm(
        kind,
        G=config.G,
        epsilon=config.epsilon,
        theta=config.theta,
        num_workers=config.num_workers,
    )
