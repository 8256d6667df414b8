"""Main simulator controller."""

import logging
import threading
from typing import Callable, Dict, IO, Optional, Union
import numpy as np
from gravity_sim.errors import GravitySimError, IndexOutOfRangeError
from gravity_sim.physics import diagnostics
from gravity_sim.physics.force_algorithms.base import ForceAlgorithm
from gravity_sim.physics.force_algorithms.factory import AlgorithmKind, algorithm_from_config
from gravity_sim.physics.integrators.base import Integrator
from gravity_sim.physics.integrators.semi_implicit_euler import SemiImplicitEulerIntegrator
from gravity_sim.physics.particle import Particle, ParticleSet, Vector2
from gravity_sim.physics.store import ParticleStore
from gravity_sim.utils.config import Config

logger = logging.getLogger(__name__)


class Simulator:
    """Main simulation controller.

    Owns the particle store and the algorithm selection for one session.
    Each ``step`` snapshots the store, runs the algorithm selected at the
    start of the step, integrates, applies the result and then folds in
    particles spawned in the meantime. Steps never overlap.
    """

    def __init__(
        self,
        particles: Optional[ParticleSet] = None,
        config: Optional[Config] = None,
        integrator: Optional[Integrator] = None,
        algorithm: Union[str, AlgorithmKind, None] = None,
    ):
        """Initialize simulator.

        Args:
            particles: Initial scene (empty if None)
            config: Configuration (defaults if None); validated here
            integrator: Integrator to use (default: semi-implicit Euler)
            algorithm: Initial algorithm (default: config.algorithm)
        """
        self.config = (config or Config()).validate()
        self.integrator = integrator or SemiImplicitEulerIntegrator()
        self.store = ParticleStore(particles)
        self.algorithms: Dict[str, ForceAlgorithm] = {
            kind.value: algorithm_from_config(kind, self.config) for kind in AlgorithmKind
        }
        self.algorithm = AlgorithmKind.parse(algorithm or self.config.algorithm).value

        self.time = 0.0
        self.step_count = 0
        self.paused = False
        self.last_error: Optional[GravitySimError] = None

        # Callbacks
        self.on_step_callback: Optional[Callable] = None
        self.on_error_callback: Optional[Callable] = None

        self._step_lock = threading.Lock()
        self._reset_lock = threading.Lock()
        self._pending_reset: Optional[ParticleSet] = None
        # Thread currently holding the step lock, if any
        self._lock_owner: Optional[int] = None

    @property
    def particle_count(self) -> int:
        return len(self.store)

    @property
    def active_algorithm(self) -> ForceAlgorithm:
        return self.algorithms[self.algorithm]

    def set_algorithm(self, variant: Union[str, AlgorithmKind]):
        """Select the algorithm used from the next step on.

        A step already in progress keeps the algorithm it started with.
        """
        name = variant.value if isinstance(variant, AlgorithmKind) else str(variant).lower()
        if name not in self.algorithms:
            raise ValueError(f"Unknown algorithm '{variant}'. Available: {list(self.algorithms)}")
        if name != self.algorithm:
            logger.info("Changed algorithm to %s", name)
        self.algorithm = name

    def cycle_algorithm(self) -> str:
        """Switch to the next registered algorithm and return its name."""
        names = list(self.algorithms)
        self.set_algorithm(names[(names.index(self.algorithm) + 1) % len(names)])
        return self.algorithm

    def clamp_dt(self, dt: Optional[float] = None) -> float:
        """Scale a frame time by time_scale and clamp it to [min_dt, max_dt]."""
        dt = self.config.dt if dt is None else dt
        if not np.isfinite(dt):
            dt = self.config.dt
        dt = dt * self.config.time_scale
        return float(min(max(dt, self.config.min_dt), self.config.max_dt))

    def step(self, dt: Optional[float] = None) -> bool:
        """Perform one simulation step.

        Args:
            dt: Elapsed frame time (config.dt if None); scaled and clamped

        Returns:
            True if the particles were advanced, False if paused or the
            step was aborted (see ``last_error``)

        Raises:
            IndexOutOfRangeError: If an update did not match the store
        """
        if self.paused:
            return False
        dt = self.clamp_dt(dt)
        error = None
        with self._step_lock:
            self._lock_owner = threading.get_ident()
            try:
                snapshot = self.store.snapshot()
                name = self.algorithm
                algorithm = self.algorithms[name]
                try:
                    accelerations = algorithm.compute_accelerations(snapshot)
                    update = self.integrator.integrate(snapshot, accelerations, dt)
                    self.store.apply(update)
                except IndexOutOfRangeError:
                    raise
                except GravitySimError as exc:
                    error = exc
                    self.last_error = exc
                    logger.error("Step %d aborted (%s): %s", self.step_count, name, exc)
                else:
                    self.time += dt
                    self.step_count += 1
                self._finish_step()
            finally:
                self._lock_owner = None

        if error is not None:
            if self.on_error_callback:
                self.on_error_callback(self, error)
            return False
        logger.debug("Step %d: n=%d dt=%g algorithm=%s", self.step_count, len(snapshot), dt, name)
        if self.on_step_callback:
            self.on_step_callback(self)
        return True

    def _finish_step(self):
        self._apply_pending_reset()
        added = self.store.commit_pending()
        if added:
            logger.debug("Added %d spawned particles", added)

    def _apply_pending_reset(self):
        with self._reset_lock:
            reset, self._pending_reset = self._pending_reset, None
        if reset is not None:
            self._apply_reset(reset)

    def _apply_reset(self, particles: ParticleSet):
        self.store.replace(particles)
        self.time = 0.0
        self.step_count = 0
        logger.info("Scene reset to %d particles", len(particles))

    def run(self, n_steps: int, dt: Optional[float] = None):
        """Run simulation for specified number of steps."""
        for _ in range(n_steps):
            self.step(dt)

    def pause(self):
        """Pause simulation."""
        self.paused = True

    def resume(self):
        """Resume simulation."""
        self.paused = False

    def get_snapshot(self) -> ParticleSet:
        """Read-only copy of the current particles, for rendering."""
        return self.store.snapshot()

    def request_spawn(self, particle: Particle):
        """Queue a particle; it appears after the current or next step."""
        if not isinstance(particle, Particle):
            raise TypeError(f"Expected a Particle, got {type(particle).__name__}")
        self.store.append(particle)

    def spawn_at(self, position: Vector2, mass: Optional[float] = None, velocity: Vector2 = (0.0, 0.0)) -> Particle:
        """Build and queue a particle (config.spawn_mass by default).

        Raises:
            ConstructionError: If the particle is invalid; nothing is queued
        """
        particle = Particle(self.config.spawn_mass if mass is None else mass, position, velocity)
        self.request_spawn(particle)
        return particle

    def request_spawn_many(
        self,
        count: int,
        region,
        mass_range=None,
        velocity_range=(0.0, 0.0),
        seed: Optional[int] = None,
    ) -> int:
        """Queue ``count`` random particles inside ``region``.

        Args:
            count: Number of particles
            region: ((x_min, x_max), (y_min, y_max)) or a shared (low, high)
            mass_range: (low, high); defaults to config.spawn_mass exactly
            velocity_range: Velocity bounds, shared or per axis
            seed: Random seed

        Returns:
            Number of particles queued
        """
        from gravity_sim.presets.random_cloud import random_cloud

        if mass_range is None:
            mass_range = (self.config.spawn_mass, self.config.spawn_mass)
        particles = random_cloud(count, mass_range, region, velocity_range, seed=seed)
        self.store.extend(particles)
        return len(particles)

    def reset_to(self, particles: ParticleSet):
        """Replace the whole scene and zero the clock.

        Spawns queued before the reset are dropped. Called from another
        thread, it waits for a running step or benchmark to finish and then
        replaces the scene. Called from inside a step (an algorithm or
        integrator hook), the replacement happens as that step finishes.
        """
        self.store.discard_pending()
        if self._lock_owner == threading.get_ident():
            with self._reset_lock:
                self._pending_reset = particles.copy()
            return
        with self._step_lock:
            with self._reset_lock:
                self._pending_reset = None
            self._apply_reset(particles)

    def clear(self):
        """Remove every particle."""
        self.reset_to(ParticleSet.empty())

    def run_benchmark(
        self,
        variant: Union[str, AlgorithmKind, None] = None,
        particle_count: Optional[int] = None,
        repetitions: Optional[int] = None,
        stream: Optional[IO[str]] = None,
    ):
        """Benchmark one algorithm on a generated workload.

        Holds the step lock for the duration, so no step runs concurrently.
        Live particles are not used or modified.

        Args:
            variant: Algorithm to time (active algorithm if None)
            particle_count: Workload size (config.benchmark_particles if None)
            repetitions: Timed calls (config.benchmark_repetitions if None)
            stream: Text stream for the report (log if None)

        Returns:
            BenchmarkResult

        Raises:
            BenchmarkError: For an unusable workload
        """
        from gravity_sim.bench.harness import benchmark, report

        name = self.algorithm if variant is None else (
            variant.value if isinstance(variant, AlgorithmKind) else str(variant).lower()
        )
        if name not in self.algorithms:
            raise ValueError(f"Unknown algorithm '{variant}'. Available: {list(self.algorithms)}")
        count = self.config.benchmark_particles if particle_count is None else particle_count
        reps = self.config.benchmark_repetitions if repetitions is None else repetitions
        seed = self.config.seed if self.config.seed is not None else 0
        with self._step_lock:
            self._lock_owner = threading.get_ident()
            try:
                result = benchmark(
                    self.algorithms[name],
                    count,
                    repetitions=reps,
                    max_duration=self.config.benchmark_max_duration,
                    seed=seed,
                )
            finally:
                self._lock_owner = None
            self._apply_pending_reset()
        report(result, stream)
        return result

    def get_energy(self) -> float:
        """Total energy (kinetic + potential) of the current state."""
        return diagnostics.total_energy(self.get_snapshot(), self.config.G, self.config.epsilon)

    def get_momentum(self) -> np.ndarray:
        return diagnostics.total_momentum(self.get_snapshot())
