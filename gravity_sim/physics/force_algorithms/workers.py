"""Shard a per-particle computation across worker threads.

Each shard covers a contiguous index range and writes only its own rows
of the output array, so workers share the inputs read-only and need no
locks. The executor's futures act as the join barrier. Shards only run
concurrently when ``fn`` releases the GIL, as numpy kernels and the
compiled Barnes-Hut walk do.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Tuple
import numpy as np


def shard_ranges(n: int, num_shards: int) -> List[Tuple[int, int]]:
    """Split range(n) into at most num_shards contiguous (start, stop) ranges."""
    num_shards = max(1, min(num_shards, n))
    bounds = np.linspace(0, n, num_shards + 1).astype(int)
    return [(int(a), int(b)) for a, b in zip(bounds[:-1], bounds[1:]) if b > a]


def run_sharded(
    fn: Callable[[int, int, np.ndarray], None],
    n: int,
    num_workers: int,
) -> np.ndarray:
    """Run ``fn(start, stop, out)`` over shards of range(n).

    ``fn`` fills ``out[start:stop]``. With one worker it runs inline.

    Returns:
        Output array of shape (n, 2)
    """
    out = np.zeros((n, 2))
    if num_workers <= 1 or n < 2:
        fn(0, n, out)
        return out
    ranges = shard_ranges(n, num_workers)
    with ThreadPoolExecutor(max_workers=len(ranges)) as executor:
        futures = [executor.submit(fn, start, stop, out) for start, stop in ranges]
        for future in futures:
            future.result()
    return out
