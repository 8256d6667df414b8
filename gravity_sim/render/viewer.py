"""Interactive viewer: frame clock, key bindings and rendering.

Translates input events into calls on the Simulator's public API and
never touches the particle store directly.

Key bindings:
    Tab         cycle force algorithm
    left click  spawn a light body at the cursor
    1           spawn a heavy body at the cursor
    s           load the solar system
    g           generate a random cloud
    r           clear the scene
    p           log the particle count
    b           benchmark the active algorithm
    f           toggle fitting the view to the particles
    space       pause / resume
"""

import logging
import time
from typing import Optional
from gravity_sim.errors import BenchmarkError, ConstructionError
from gravity_sim.physics.simulator import Simulator
from gravity_sim.presets import RandomCloud, SolarSystem, heavy_body
from gravity_sim.render.renderer_2d import Renderer2D
from gravity_sim.utils.config import Config

logger = logging.getLogger(__name__)


class InteractiveViewer:
    """Drives a Simulator from wall-clock frames and renders each frame."""

    def __init__(self, simulator: Simulator, renderer: Optional[Renderer2D] = None, cloud_size: int = 500):
        self.simulator = simulator
        self.renderer = renderer or Renderer2D(view_radius=simulator.config.view_radius, auto_scale=False)
        self.cloud_size = cloud_size
        self._cursor = (0.0, 0.0)
        self._connected = False

    def _connect(self):
        if self._connected:
            return
        canvas = self.renderer.fig.canvas
        canvas.mpl_connect('key_press_event', self._on_key)
        canvas.mpl_connect('button_press_event', self._on_click)
        canvas.mpl_connect('motion_notify_event', self._on_move)
        self._connected = True

    def _world_position(self, event):
        if event.xdata is None or event.ydata is None:
            return self._cursor
        return (float(event.xdata), float(event.ydata))

    def _on_move(self, event):
        if event.xdata is not None and event.ydata is not None:
            self._cursor = self._world_position(event)

    def _on_click(self, event):
        if event.button != 1 or event.xdata is None:
            return
        try:
            self.simulator.spawn_at(self._world_position(event))
        except ConstructionError as exc:
            logger.warning("Spawn rejected: %s", exc)

    def _on_key(self, event):
        sim = self.simulator
        key = event.key
        if key == 'tab':
            sim.cycle_algorithm()
        elif key == '1':
            sim.request_spawn(heavy_body(self._cursor, mass=sim.config.heavy_mass))
        elif key == 's':
            SolarSystem().load_into(sim)
        elif key == 'g':
            RandomCloud(self.cloud_size, seed=sim.config.seed).load_into(sim)
        elif key == 'r':
            sim.clear()
        elif key == 'p':
            logger.info("Number of particles = %d", sim.particle_count)
        elif key == 'b':
            try:
                sim.run_benchmark()
            except BenchmarkError as exc:
                logger.error("Benchmark failed: %s", exc)
        elif key == 'f':
            self.renderer.auto_scale = not self.renderer.auto_scale
        elif key == ' ':
            if sim.paused:
                sim.resume()
            else:
                sim.pause()

    def status(self) -> str:
        sim = self.simulator
        line = f"[{sim.algorithm}] particles={sim.particle_count} t={sim.time:.2f}s"
        if sim.last_error is not None:
            line += "  (last step aborted)"
        return line

    def run(self, max_frames: Optional[int] = None):
        """Run until the window closes (or max_frames frames)."""
        self.renderer.initialize()
        self._connect()
        last = time.perf_counter()
        frames = 0
        while self.renderer.is_open():
            now = time.perf_counter()
            self.simulator.step(now - last)
            last = now
            self.renderer.render(self.simulator.get_snapshot(), self.status())
            frames += 1
            if max_frames is not None and frames >= max_frames:
                break
        self.renderer.close()


def run_viewer(config: Optional[Config] = None):
    """Open the viewer on an empty scene."""
    from gravity_sim.utils.logging_config import setup_logging

    setup_logging()
    InteractiveViewer(Simulator(config=config)).run()
