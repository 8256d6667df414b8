"""Tests for the simulation loop."""

import io
import threading
import numpy as np
import pytest
from gravity_sim.errors import ConstructionError, IndexOutOfRangeError, MalformedInputError
from gravity_sim.physics.force_algorithms.base import ForceAlgorithm
from gravity_sim.physics.particle import Particle, ParticleSet
from gravity_sim.physics.simulator import Simulator
from gravity_sim.utils.config import Config


def unit_config(**overrides):
    """G = 1, dt = 1 and a negligible softening distance."""
    values = dict(G=1.0, epsilon=1e-3, dt=1.0, max_dt=1.0, algorithm="brute_force", seed=0)
    values.update(overrides)
    return Config(**values)


def two_bodies():
    return ParticleSet.from_particles([
        Particle(5.0, (0.0, 0.0)),
        Particle(5.0, (10.0, 0.0)),
    ])


class HookAlgorithm(ForceAlgorithm):
    """Zero forces, but runs a callback while the step is in progress."""

    def __init__(self, hook=None):
        super().__init__(G=1.0, epsilon=1.0)
        self.hook = hook
        self.calls = 0

    @property
    def name(self) -> str:
        return "hook"

    def _compute(self, positions, masses):
        self.calls += 1
        if self.hook is not None:
            self.hook()
        return np.zeros_like(positions)


class FailingAlgorithm(ForceAlgorithm):

    def __init__(self, error):
        super().__init__()
        self.error = error

    @property
    def name(self) -> str:
        return "failing"

    def _compute(self, positions, masses):
        raise self.error


def install(sim, algorithm):
    sim.algorithms[algorithm.name] = algorithm
    sim.set_algorithm(algorithm.name)
    return algorithm


def test_two_bodies_attract():
    """Two equal masses 10 apart accelerate towards each other at 0.05."""
    for name in ("brute_force", "barnes_hut"):
        sim = Simulator(two_bodies(), config=unit_config(algorithm=name))
        assert sim.step()

        snap = sim.get_snapshot()
        assert np.allclose(snap.velocities, [[0.05, 0.0], [-0.05, 0.0]])
        assert np.allclose(snap.positions, [[0.05, 0.0], [9.95, 0.0]])
        assert sim.step_count == 1
        assert sim.time == 1.0


def test_empty_scene_steps():
    sim = Simulator(config=unit_config())
    assert sim.step()
    assert sim.particle_count == 0


def test_default_algorithm_and_setting():
    sim = Simulator()
    assert sim.algorithm == "barnes_hut"
    sim.set_algorithm("brute_force")
    assert sim.active_algorithm.name == "brute_force"
    with pytest.raises(ValueError):
        sim.set_algorithm("fmm")
    assert sim.algorithm == "brute_force"


def test_cycle_algorithm():
    sim = Simulator(config=unit_config())
    assert sim.cycle_algorithm() == "barnes_hut"
    assert sim.cycle_algorithm() == "brute_force"


def test_spawn_is_deferred_to_end_of_step():
    sim = Simulator(two_bodies(), config=unit_config())
    seen = []

    def hook():
        sim.request_spawn(Particle(1.0, (50.0, 50.0)))
        seen.append(len(sim.get_snapshot()))

    install(sim, HookAlgorithm(hook))
    assert sim.step()
    assert seen == [2]
    assert sim.particle_count == 3
    assert sim.get_snapshot()[2].position == (50.0, 50.0)


def test_spawn_between_steps_appears_after_next_step():
    sim = Simulator(two_bodies(), config=unit_config())
    sim.spawn_at((1.0, 1.0))
    assert sim.particle_count == 2
    sim.step()
    assert sim.particle_count == 3
    assert sim.get_snapshot()[2].mass == sim.config.spawn_mass


def test_algorithm_switch_applies_to_next_step():
    sim = Simulator(two_bodies(), config=unit_config())
    hook = install(sim, HookAlgorithm(lambda: sim.set_algorithm("brute_force")))

    sim.step()
    assert hook.calls == 1
    assert sim.algorithm == "brute_force"
    # The step that switched still used zero forces
    assert np.allclose(sim.get_snapshot().velocities, 0.0)

    sim.step()
    assert hook.calls == 1
    assert not np.allclose(sim.get_snapshot().velocities, 0.0)


def test_failed_step_leaves_state_unchanged():
    sim = Simulator(two_bodies(), config=unit_config())
    errors = []
    sim.on_error_callback = lambda s, exc: errors.append(exc)
    before = sim.get_snapshot()
    install(sim, FailingAlgorithm(MalformedInputError("bad input")))

    assert not sim.step()
    assert sim.get_snapshot().equals(before)
    assert isinstance(sim.last_error, MalformedInputError)
    assert errors == [sim.last_error]
    assert sim.step_count == 0

    # Later steps still run
    sim.set_algorithm("brute_force")
    assert sim.step()


def test_spawns_survive_failed_step():
    sim = Simulator(two_bodies(), config=unit_config())
    install(sim, FailingAlgorithm(MalformedInputError("bad input")))
    sim.spawn_at((3.0, 3.0))
    assert not sim.step()
    assert sim.particle_count == 3


def test_index_error_is_fatal():
    sim = Simulator(two_bodies(), config=unit_config())
    install(sim, FailingAlgorithm(IndexOutOfRangeError("index 9")))
    with pytest.raises(IndexOutOfRangeError):
        sim.step()


def test_on_step_callback():
    sim = Simulator(two_bodies(), config=unit_config())
    calls = []
    sim.on_step_callback = lambda s: calls.append(s.step_count)
    sim.run(3)
    assert calls == [1, 2, 3]


def test_pause_and_resume():
    sim = Simulator(two_bodies(), config=unit_config())
    sim.pause()
    assert not sim.step()
    assert sim.step_count == 0
    sim.resume()
    assert sim.step()


def test_clamp_dt():
    sim = Simulator(config=Config(min_dt=0.01, max_dt=0.1, time_scale=2.0, dt=0.02))
    assert sim.clamp_dt() == pytest.approx(0.04)
    assert sim.clamp_dt(1.0) == pytest.approx(0.1)
    assert sim.clamp_dt(0.0) == pytest.approx(0.01)
    assert sim.clamp_dt(float('nan')) == pytest.approx(0.04)


def test_spawn_at_rejects_invalid_particle():
    sim = Simulator(config=unit_config())
    with pytest.raises(ConstructionError):
        sim.spawn_at((0.0, 0.0), mass=-1.0)
    with pytest.raises(TypeError):
        sim.request_spawn((1.0, (0.0, 0.0)))
    assert sim.store.pending_count == 0


def test_request_spawn_many():
    sim = Simulator(config=unit_config())
    assert sim.request_spawn_many(25, ((0.0, 10.0), (-5.0, 5.0)), seed=3) == 25
    assert sim.particle_count == 0
    sim.step(1e-3)
    snap = sim.get_snapshot()
    assert len(snap) == 25
    assert np.all(snap.masses == sim.config.spawn_mass)


def test_reset_to_replaces_scene():
    sim = Simulator(two_bodies(), config=unit_config())
    sim.run(2)
    sim.spawn_at((1.0, 1.0))
    sim.reset_to(ParticleSet.from_particles([Particle(1.0)]))
    assert sim.particle_count == 1
    assert sim.time == 0.0
    assert sim.step_count == 0
    # The spawn queued before the reset is dropped
    sim.step()
    assert sim.particle_count == 1


def test_reset_during_step_is_deferred():
    sim = Simulator(two_bodies(), config=unit_config())
    replacement = ParticleSet.from_particles([Particle(7.0, (1.0, 2.0))])

    def hook():
        sim.reset_to(replacement)
        assert sim.particle_count == 2

    install(sim, HookAlgorithm(hook))
    sim.step()
    snap = sim.get_snapshot()
    assert len(snap) == 1
    assert snap[0].mass == 7.0
    assert sim.step_count == 0


def test_clear():
    sim = Simulator(two_bodies(), config=unit_config())
    sim.clear()
    assert sim.particle_count == 0
    assert sim.step()


def test_run_benchmark_leaves_state_untouched():
    sim = Simulator(two_bodies(), config=unit_config(benchmark_particles=30, benchmark_repetitions=2))
    before = sim.get_snapshot()
    stream = io.StringIO()

    result = sim.run_benchmark(stream=stream)

    assert result.algorithm == "brute_force"
    assert result.particle_count == 30
    assert result.repetitions == 2
    assert stream.getvalue().startswith("Result from benchmark:")
    assert sim.get_snapshot().equals(before)
    assert sim.step_count == 0


def test_run_benchmark_other_variant():
    sim = Simulator(config=unit_config())
    result = sim.run_benchmark("barnes_hut", particle_count=20, repetitions=1, stream=io.StringIO())
    assert result.algorithm == "barnes_hut"
    assert sim.algorithm == "brute_force"


def test_energy_and_momentum():
    sim = Simulator(two_bodies(), config=unit_config())
    assert sim.get_energy() == pytest.approx(-25.0 / 10.0)
    assert np.allclose(sim.get_momentum(), 0.0)


class GateAlgorithm(ForceAlgorithm):
    """Holds the caller inside compute until released."""

    def __init__(self):
        super().__init__(G=1.0, epsilon=1.0)
        self.entered = threading.Event()
        self.release = threading.Event()

    @property
    def name(self) -> str:
        return "gate"

    def _compute(self, positions, masses):
        self.entered.set()
        self.release.wait(timeout=10)
        return np.zeros_like(positions)


class ShortAlgorithm(ForceAlgorithm):
    """Returns one row too few."""

    @property
    def name(self) -> str:
        return "short"

    def _compute(self, positions, masses):
        return np.zeros((positions.shape[0] - 1, 2))


def start_gated_benchmark(sim):
    gate = GateAlgorithm()
    sim.algorithms[gate.name] = gate
    results = []
    thread = threading.Thread(
        target=lambda: results.append(
            sim.run_benchmark("gate", particle_count=5, repetitions=1, stream=io.StringIO())
        )
    )
    thread.start()
    assert gate.entered.wait(timeout=10)
    return gate, thread, results


def test_reset_waits_for_running_benchmark():
    sim = Simulator(two_bodies(), config=unit_config())
    gate, bench, results = start_gated_benchmark(sim)

    resetter = threading.Thread(target=sim.reset_to, args=(ParticleSet.empty(),))
    resetter.start()
    resetter.join(timeout=0.2)
    assert resetter.is_alive()
    assert sim.particle_count == 2

    gate.release.set()
    bench.join(timeout=10)
    resetter.join(timeout=10)
    assert not resetter.is_alive()
    # The reset landed without another step
    assert sim.particle_count == 0
    assert results[0].algorithm == "gate"


def test_step_waits_for_running_benchmark():
    sim = Simulator(two_bodies(), config=unit_config())
    gate, bench, _ = start_gated_benchmark(sim)

    outcome = []
    stepper = threading.Thread(target=lambda: outcome.append(sim.step()))
    stepper.start()
    stepper.join(timeout=0.2)
    assert stepper.is_alive()
    assert sim.step_count == 0

    gate.release.set()
    bench.join(timeout=10)
    stepper.join(timeout=10)
    assert outcome == [True]
    assert sim.step_count == 1


def test_reset_while_paused():
    sim = Simulator(two_bodies(), config=unit_config())
    sim.pause()
    sim.reset_to(ParticleSet.from_particles([Particle(3.0)]))
    assert sim.particle_count == 1


def test_mismatched_accelerations_abort_step():
    sim = Simulator(two_bodies(), config=unit_config())
    errors = []
    sim.on_error_callback = lambda s, exc: errors.append(exc)
    before = sim.get_snapshot()
    install(sim, ShortAlgorithm(G=1.0))
    sim.spawn_at((4.0, 4.0))

    assert not sim.step()
    assert isinstance(sim.last_error, MalformedInputError)
    assert errors == [sim.last_error]
    snap = sim.get_snapshot()
    assert len(snap) == 3
    assert sim.store.pending_count == 0
    np.testing.assert_array_equal(snap.positions[:2], before.positions)
