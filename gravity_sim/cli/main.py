"""CLI main entry point."""

import argparse
import logging
import sys
from gravity_sim.bench.harness import compare_algorithms, format_results
from gravity_sim.errors import BenchmarkError, ConfigError, ConstructionError
from gravity_sim.physics import diagnostics
from gravity_sim.physics.force_algorithms.factory import algorithm_from_config, list_algorithms
from gravity_sim.physics.particle import ParticleSet
from gravity_sim.physics.simulator import Simulator
from gravity_sim.presets import RandomCloud, SolarSystem, heavy_body
from gravity_sim.utils.config import Config, config_from_env, load_config
from gravity_sim.utils.logging_config import setup_logging
from gravity_sim.utils.reproducibility import set_all_seeds

PRESETS = ['random', 'solar_system', 'heavy_body', 'empty']


def get_preset(name: str, n_particles: int, seed: int = None, config: Config = None) -> ParticleSet:
    """Build the initial scene for a preset name."""
    config = config or Config()
    name = name.lower()
    if name == 'random':
        return RandomCloud(n_particles, seed=seed).generate()
    if name == 'solar_system':
        return SolarSystem().generate()
    if name == 'heavy_body':
        return ParticleSet.from_particles([heavy_body((0.0, 0.0), mass=config.heavy_mass)])
    if name == 'empty':
        return ParticleSet.empty()
    raise ValueError(f"Unknown preset: {name}. Available: {PRESETS}")


def build_config(args) -> Config:
    """Config file, then environment, then command line flags."""
    config = load_config(args.config) if args.config else Config()
    config = config_from_env(config)
    overrides = {
        'G': args.G,
        'epsilon': args.epsilon,
        'theta': args.theta,
        'dt': args.dt,
        'time_scale': args.time_scale,
        'algorithm': args.algorithm,
        'num_workers': args.workers,
        'seed': args.seed,
        'benchmark_repetitions': args.repetitions,
    }
    for key, value in overrides.items():
        if value is not None:
            setattr(config, key, value)
    return config.validate()


def run_simulation(args, config: Config):
    """Run a headless simulation and print a diagnostics table."""
    particles = get_preset(args.preset, args.particles, config.seed, config)
    sim = Simulator(particles, config=config)

    if args.render:
        from gravity_sim.render.viewer import InteractiveViewer
        InteractiveViewer(sim).run()
        return

    print(f"Running simulation: {args.preset} with {sim.particle_count} particles")
    print(f"Algorithm: {sim.algorithm}, Integrator: {sim.integrator.name}, "
          f"dt: {sim.clamp_dt():g}, G: {config.G:g}, eps: {config.epsilon:g}, theta: {config.theta:g}")

    snapshot = sim.get_snapshot()
    E0 = diagnostics.total_energy(snapshot, config.G, config.epsilon)

    def print_row(step: int):
        snap = sim.get_snapshot()
        K = diagnostics.kinetic_energy(snap)
        U = diagnostics.potential_energy(snap, config.G, config.epsilon)
        E = K + U
        P = float((diagnostics.total_momentum(snap) ** 2).sum() ** 0.5)
        dE = (E - E0) / abs(E0) * 100 if abs(E0) > 0 else 0.0
        print(f"{step:<8} {sim.time:<12.4g} {K:<12.4e} {U:<12.4e} {E:<12.4e} {P:<12.4e} {dE:<10.4f}%")

    print(f"{'Step':<8} {'Time':<12} {'K':<12} {'U':<12} {'E':<12} {'|P|':<12} {'dE/E0':<10}")
    print("-" * 84)
    print_row(0)

    aborted = 0
    for step in range(1, args.steps + 1):
        if not sim.step():
            aborted += 1
        if step % args.debug_every == 0:
            print_row(step)

    if aborted:
        print(f"{aborted} step(s) aborted; last error: {sim.last_error}")
    print("Simulation complete!")


def run_benchmark(args, config: Config):
    """Benchmark the requested algorithms over several particle counts."""
    names = args.bench_algorithms or list_algorithms()
    algorithms = [algorithm_from_config(name, config) for name in names]
    seed = config.seed if config.seed is not None else 0
    print(f"Running benchmark: {', '.join(names)} over N = {args.bench_counts}")
    results = compare_algorithms(
        algorithms,
        args.bench_counts,
        repetitions=config.benchmark_repetitions,
        max_duration=config.benchmark_max_duration,
        seed=seed,
    )
    print(format_results(results))


def main(argv=None):
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Gravity Simulator - 2D N-body gravity")

    # Scene
    parser.add_argument('--preset', type=str, default='random', choices=PRESETS,
                        help='Initial scene')
    parser.add_argument('--particles', type=int, default=1000,
                        help='Number of particles (random preset)')
    parser.add_argument('--steps', type=int, default=100,
                        help='Number of simulation steps')
    parser.add_argument('--debug-every', type=int, default=10,
                        help='Print diagnostics every N steps')

    # Physics
    parser.add_argument('--algorithm', type=str, default=None, choices=list_algorithms(),
                        help='Force algorithm (default from config: barnes_hut)')
    parser.add_argument('--G', type=float, default=None,
                        help='Gravitational constant (default: 6.6743e-11)')
    parser.add_argument('--epsilon', type=float, default=None,
                        help='Softening distance (default: 1.0)')
    parser.add_argument('--theta', type=float, default=None,
                        help='Barnes-Hut opening threshold (default: 0.5)')
    parser.add_argument('--dt', type=float, default=None,
                        help='Time step in seconds (default: 1/60)')
    parser.add_argument('--time-scale', type=float, default=None,
                        help='Simulated seconds per real second (default: 1.0)')
    parser.add_argument('--workers', type=int, default=None,
                        help='Worker threads per force computation (default: 1)')

    # Benchmark
    parser.add_argument('--benchmark', action='store_true',
                        help='Benchmark algorithms instead of simulating')
    parser.add_argument('--bench-algorithms', type=str, nargs='+', default=None,
                        choices=list_algorithms(),
                        help='Algorithms to benchmark (default: all)')
    parser.add_argument('--bench-counts', type=int, nargs='+', default=[100, 500, 1000],
                        help='Particle counts to benchmark')
    parser.add_argument('--repetitions', type=int, default=None,
                        help='Timed calls per benchmark (default: 10)')

    # Rendering
    parser.add_argument('--render', action='store_true',
                        help='Open the interactive viewer')

    # Misc
    parser.add_argument('--config', type=str, default=None,
                        help='Config file (.json or .yaml)')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for reproducibility')
    parser.add_argument('--log-level', type=str, default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level')
    parser.add_argument('--list-algorithms', action='store_true',
                        help='List available algorithms and exit')

    args = parser.parse_args(argv)

    for flag, value, minimum in (('--particles', args.particles, 0), ('--steps', args.steps, 0),
                                 ('--debug-every', args.debug_every, 1)):
        if value < minimum:
            print(f"Invalid argument: {flag} must be at least {minimum}, got {value}")
            return 1

    if args.list_algorithms:
        print("Available algorithms:")
        for name in list_algorithms():
            print(f"  - {name}")
        return 0

    setup_logging(level=getattr(logging, args.log_level))

    try:
        config = build_config(args)
    except ConfigError as exc:
        print(f"Invalid configuration: {exc}")
        return 1

    if config.seed is not None:
        set_all_seeds(config.seed)

    if args.benchmark:
        try:
            run_benchmark(args, config)
        except BenchmarkError as exc:
            print(f"Benchmark failed: {exc}")
            return 1
        return 0

    try:
        run_simulation(args, config)
    except ConstructionError as exc:
        print(f"Invalid scene: {exc}")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
