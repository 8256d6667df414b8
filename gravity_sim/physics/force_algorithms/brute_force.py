"""Exact all-pairs force algorithm, O(N^2)."""

import numpy as np
from gravity_sim.physics.force_algorithms.base import ForceAlgorithm
from gravity_sim.physics.force_algorithms.workers import run_sharded

# Rows per vectorized block; bounds the (block, n, 2) temporaries
BLOCK_SIZE = 256


def pairwise_accelerations(
    targets: np.ndarray,
    sources: np.ndarray,
    source_masses: np.ndarray,
    G: float,
    epsilon: float,
) -> np.ndarray:
    """Acceleration on each target point from every source point mass.

    Contribution of source j on target i is G*m_j/max(r, eps)^2 along the
    unit vector from i to j. Coincident points (r == 0) contribute nothing,
    which also excludes self-interaction.

    Args:
        targets: (k, 2) positions receiving acceleration
        sources: (n, 2) source positions
        source_masses: (n,) source masses

    Returns:
        (k, 2) accelerations
    """
    r_diff = sources[np.newaxis, :, :] - targets[:, np.newaxis, :]
    r = np.sqrt(np.sum(r_diff ** 2, axis=2))
    r_clamped = np.maximum(r, epsilon)
    with np.errstate(divide="ignore", invalid="ignore"):
        scale = np.where(r > 0, source_masses[np.newaxis, :] / (r_clamped ** 2 * r), 0.0)
    return G * np.sum(scale[:, :, np.newaxis] * r_diff, axis=1)


class BruteForce(ForceAlgorithm):
    """Sums the contribution of every other particle on every particle.

    Exact under the softened force law; used as the reference the
    approximate algorithms are checked against.
    """

    @property
    def name(self) -> str:
        return "brute_force"

    def _compute(self, positions: np.ndarray, masses: np.ndarray) -> np.ndarray:
        def fill(start: int, stop: int, out: np.ndarray):
            for block_start in range(start, stop, BLOCK_SIZE):
                block_stop = min(block_start + BLOCK_SIZE, stop)
                out[block_start:block_stop] = pairwise_accelerations(
                    positions[block_start:block_stop], positions, masses, self.G, self.epsilon
                )

        return run_sharded(fill, positions.shape[0], self.num_workers)
