"""Benchmarking of force algorithms."""

from gravity_sim.bench.harness import (
    BenchmarkResult,
    benchmark,
    benchmark_workload,
    compare_algorithms,
    format_results,
    report,
)

__all__ = [
    "BenchmarkResult",
    "benchmark",
    "benchmark_workload",
    "compare_algorithms",
    "format_results",
    "report",
]
