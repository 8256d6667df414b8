"""Single-body generators for perturbing a scene."""

from gravity_sim.physics.particle import Particle, Vector2

# Viewer bindings: left click spawns a light body, '1' a heavy one
SPAWN_MASS = 1.0e2
HEAVY_BODY_MASS = 1.0e12


def heavy_body(position: Vector2, mass: float = HEAVY_BODY_MASS, velocity: Vector2 = (0.0, 0.0)) -> Particle:
    """A particle many orders of magnitude heavier than a spawned body."""
    return Particle(mass, position, velocity)


def spawn_body(position: Vector2, mass: float = SPAWN_MASS, velocity: Vector2 = (0.0, 0.0)) -> Particle:
    """A light particle, as placed by a mouse click."""
    return Particle(mass, position, velocity)
