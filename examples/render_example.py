"""Example with real-time rendering."""

from gravity_sim import Config, Simulator
from gravity_sim.presets import RandomCloud, heavy_body
from gravity_sim.render import InteractiveViewer

def main():
    """Open the viewer on a random cloud with a heavy body at the centre."""
    config = Config(G=1.0, epsilon=5.0, view_radius=600.0, seed=123)

    particles = RandomCloud(n_particles=800, seed=config.seed, mass_range=(1.0, 5.0)).generate()
    sim = Simulator(particles, config=config)
    sim.request_spawn(heavy_body((0.0, 0.0), mass=5.0e4))

    print("Running simulation with rendering...")
    print("Tab switches algorithm, click spawns, close the window to stop.")

    viewer = InteractiveViewer(sim)
    try:
        viewer.run()
    except KeyboardInterrupt:
        print("\nSimulation interrupted by user")
    finally:
        viewer.renderer.close()
        print("Simulation complete!")

if __name__ == "__main__":
    main()
