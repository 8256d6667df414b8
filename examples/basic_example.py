"""Basic example of using the gravity simulator."""

from gravity_sim import Config, Simulator
from gravity_sim.presets import SolarSystem

def main():
    """Run the solar system for one simulated year."""
    # One day per step; the clamp must allow it
    day = 86400.0
    config = Config(dt=day, max_dt=day, epsilon=1.0e3, algorithm="brute_force")

    preset = SolarSystem()
    sim = Simulator(preset.generate(), config=config)

    print("Running simulation...")
    print(f"Initial energy: {sim.get_energy():.6e}")

    for step in range(365):
        sim.step()
        if step % 73 == 0:
            energy = sim.get_energy()
            print(f"Step {step}: Time={sim.time / day:.0f}d, Energy={energy:.6e}")

    earth = sim.get_snapshot()[preset.body_names.index("earth")]
    print(f"Earth position after one year: ({earth.position[0]:.3e}, {earth.position[1]:.3e})")
    print(f"Final energy: {sim.get_energy():.6e}")
    print("Simulation complete!")

if __name__ == "__main__":
    main()
