"""Benchmark harness timing force algorithms in isolation.

Only ``compute_accelerations`` is timed: no integration, no store. The
workload is a private copy (or a freshly generated cloud) so a benchmark
never touches live simulation state.
"""

import logging
import time
from dataclasses import dataclass
from typing import IO, Iterable, List, Optional, Union
from gravity_sim.errors import BenchmarkError
from gravity_sim.physics.force_algorithms.base import ForceAlgorithm
from gravity_sim.physics.particle import ParticleSet
from gravity_sim.presets.random_cloud import random_cloud

logger = logging.getLogger(__name__)

DEFAULT_REPETITIONS = 10


@dataclass
class BenchmarkResult:
    """Timing of one algorithm over one workload."""

    algorithm: str
    particle_count: int
    repetitions: int
    elapsed: float

    @property
    def average_time(self) -> float:
        """Mean seconds per compute_accelerations call."""
        return self.elapsed / self.repetitions

    @property
    def pairs_per_second(self) -> float:
        """Ordered particle pairs covered per second, n*(n-1)/average."""
        n = self.particle_count
        if self.average_time <= 0:
            return float("inf")
        return n * (n - 1) / self.average_time

    @property
    def particles_per_second(self) -> float:
        if self.average_time <= 0:
            return float("inf")
        return self.particle_count / self.average_time

    def __str__(self) -> str:
        return (
            f"Result from benchmark: Algorithm={self.algorithm}, Particles={self.particle_count}, "
            f"Time={self.elapsed:.6f}s, Iterations={self.repetitions}, "
            f"Average={self.average_time:.6f}s, Pairs/s={self.pairs_per_second:.3e}"
        )


def benchmark_workload(particle_count: int, seed: Optional[int] = 0) -> ParticleSet:
    """Fixed random cloud used when a benchmark is given only a count."""
    if particle_count < 1:
        raise BenchmarkError(f"Benchmark needs at least one particle, got {particle_count}")
    return random_cloud(
        particle_count,
        mass_range=(1.0e2, 1.0e4),
        position_range=(-1000.0, 1000.0),
        seed=seed,
    )


def benchmark(
    algorithm: ForceAlgorithm,
    particles: Union[int, ParticleSet],
    repetitions: int = DEFAULT_REPETITIONS,
    warmup: int = 1,
    max_duration: Optional[float] = None,
    seed: Optional[int] = 0,
) -> BenchmarkResult:
    """Time ``algorithm.compute_accelerations`` over a fixed workload.

    Args:
        algorithm: Force algorithm to time
        particles: Particle count (a seeded random cloud is generated) or
            a ParticleSet (copied, never modified)
        repetitions: Number of timed calls
        warmup: Untimed calls made first
        max_duration: Stop early once this many seconds have been timed;
            at least one call is always timed
        seed: Seed for the generated workload

    Returns:
        BenchmarkResult with the number of calls actually timed

    Raises:
        BenchmarkError: For an empty workload or non-positive repetitions
    """
    if repetitions < 1:
        raise BenchmarkError(f"repetitions must be at least 1, got {repetitions}")
    if isinstance(particles, ParticleSet):
        if len(particles) == 0:
            raise BenchmarkError("Benchmark needs at least one particle, got an empty set")
        workload = particles.read_only()
    else:
        workload = benchmark_workload(int(particles), seed).read_only()

    n = len(workload)
    logger.info("Running benchmark: %s with %d particles, %d repetitions", algorithm.name, n, repetitions)
    for _ in range(warmup):
        algorithm.compute_accelerations(workload)

    elapsed = 0.0
    completed = 0
    while completed < repetitions:
        t0 = time.perf_counter()
        algorithm.compute_accelerations(workload)
        elapsed += time.perf_counter() - t0
        completed += 1
        if max_duration is not None and elapsed >= max_duration:
            logger.warning(
                "Benchmark stopped after %d of %d repetitions (max duration %.1fs)",
                completed, repetitions, max_duration,
            )
            break

    result = BenchmarkResult(algorithm.name, n, completed, elapsed)
    logger.info("Completed benchmark")
    return result


def compare_algorithms(
    algorithms: Iterable[ForceAlgorithm],
    particle_counts: Iterable[int],
    repetitions: int = DEFAULT_REPETITIONS,
    max_duration: Optional[float] = None,
    seed: Optional[int] = 0,
) -> List[BenchmarkResult]:
    """Benchmark every algorithm on every particle count (same workloads)."""
    algorithms = list(algorithms)
    results = []
    for count in particle_counts:
        workload = benchmark_workload(count, seed)
        for algorithm in algorithms:
            results.append(
                benchmark(algorithm, workload, repetitions=repetitions, max_duration=max_duration)
            )
    return results


def format_results(results: Iterable[BenchmarkResult]) -> str:
    """Render results as a fixed-width text table."""
    header = f"{'Algorithm':<14} {'N':>8} {'Reps':>6} {'Avg (ms)':>12} {'Pairs/s':>12} {'Particles/s':>12}"
    lines = [header, "-" * len(header)]
    for r in results:
        lines.append(
            f"{r.algorithm:<14} {r.particle_count:>8d} {r.repetitions:>6d} "
            f"{r.average_time * 1000.0:>12.3f} {r.pairs_per_second:>12.3e} {r.particles_per_second:>12.3e}"
        )
    return "\n".join(lines)


def report(result: BenchmarkResult, stream: Optional[IO[str]] = None):
    """Write a result line to a text stream, or to the log if none is given."""
    if stream is None:
        logger.info("%s", result)
    else:
        stream.write(f"{result}\n")
