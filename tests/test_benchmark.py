"""Tests for the benchmark harness."""

import io
import pytest
from gravity_sim.bench import (
    BenchmarkResult,
    benchmark,
    compare_algorithms,
    format_results,
    report,
)
from gravity_sim.errors import BenchmarkError
from gravity_sim.physics.force_algorithms import BarnesHut, BruteForce
from gravity_sim.presets import random_cloud


def test_result_fields():
    result = benchmark(BruteForce(G=1.0), 40, repetitions=3)
    assert result.algorithm == "brute_force"
    assert result.particle_count == 40
    assert result.repetitions == 3
    assert result.elapsed > 0
    assert result.average_time == pytest.approx(result.elapsed / 3)
    assert result.pairs_per_second > 0


def test_result_properties():
    result = BenchmarkResult("barnes_hut", 100, 4, 2.0)
    assert result.average_time == 0.5
    assert result.pairs_per_second == pytest.approx(100 * 99 / 0.5)
    assert result.particles_per_second == pytest.approx(200.0)
    text = str(result)
    assert text.startswith("Result from benchmark:")
    assert "Iterations=4" in text


def test_invalid_workloads():
    algorithm = BruteForce(G=1.0)
    with pytest.raises(BenchmarkError):
        benchmark(algorithm, 0)
    with pytest.raises(BenchmarkError):
        benchmark(algorithm, random_cloud(0, seed=1))
    with pytest.raises(BenchmarkError):
        benchmark(algorithm, 10, repetitions=0)


def test_input_set_not_modified():
    particles = random_cloud(30, seed=5)
    before = particles.copy()
    result = benchmark(BarnesHut(G=1.0), particles, repetitions=2)
    assert result.particle_count == 30
    assert particles.equals(before)


def test_brute_force_time_grows_with_n():
    """Best-of-several timings so scheduler noise cannot flip the order."""
    algorithm = BruteForce(G=1.0)
    small = min(benchmark(algorithm, 50, repetitions=3).average_time for _ in range(3))
    large = min(benchmark(algorithm, 1500, repetitions=3).average_time for _ in range(3))
    assert large > small


def test_max_duration_stops_early():
    result = benchmark(BarnesHut(G=1.0), 200, repetitions=1000, max_duration=1e-9)
    assert result.repetitions == 1


def test_compare_and_format():
    results = compare_algorithms([BruteForce(G=1.0), BarnesHut(G=1.0)], [20, 40], repetitions=1)
    assert [(r.algorithm, r.particle_count) for r in results] == [
        ("brute_force", 20), ("barnes_hut", 20), ("brute_force", 40), ("barnes_hut", 40),
    ]
    table = format_results(results)
    lines = table.splitlines()
    assert lines[0].startswith("Algorithm")
    assert len(lines) == 2 + len(results)


def test_report_to_stream():
    stream = io.StringIO()
    report(BenchmarkResult("brute_force", 10, 2, 0.5), stream)
    assert stream.getvalue() == str(BenchmarkResult("brute_force", 10, 2, 0.5)) + "\n"


def test_barnes_hut_time_grows_with_n():
    algorithm = BarnesHut(G=1.0)
    small = min(benchmark(algorithm, 50, repetitions=3).average_time for _ in range(3))
    large = min(benchmark(algorithm, 5000, repetitions=3).average_time for _ in range(3))
    assert large > small
