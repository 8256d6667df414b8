"""2D renderer using matplotlib."""

from typing import Optional, Tuple
import numpy as np
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from gravity_sim.physics.particle import ParticleSet


class Renderer2D:
    """Draws particle snapshots as a scatter plot.

    Marker size grows with log mass, colour with speed.
    """

    def __init__(
        self,
        figsize: Tuple[int, int] = (10, 10),
        dpi: int = 100,
        title: str = "Gravity Simulation",
        view_radius: float = 1000.0,
        auto_scale: bool = True,
    ):
        """Initialize 2D renderer.

        Args:
            figsize: Figure size (width, height)
            dpi: Dots per inch
            title: Base window title
            view_radius: Half-width of the initial view, world units
            auto_scale: Fit the view to the particles every frame
        """
        self.figsize = figsize
        self.dpi = dpi
        self.title = title
        self.view_radius = view_radius
        self.auto_scale = auto_scale

        self.fig: Optional[Figure] = None
        self.ax = None
        self.scatter = None
        self.initialized = False

    def initialize(self):
        """Create the figure if not already done."""
        if self.initialized:
            return
        self.fig, self.ax = plt.subplots(figsize=self.figsize, dpi=self.dpi)
        self.fig.patch.set_facecolor('black')
        self.ax.set_facecolor('black')
        self.ax.set_aspect('equal')
        self.ax.tick_params(colors='gray')
        self.scatter = self.ax.scatter([], [], s=[], c=[], cmap=plt.cm.plasma, vmin=0.0, vmax=1.0)
        self.ax.set_xlim(-self.view_radius, self.view_radius)
        self.ax.set_ylim(-self.view_radius, self.view_radius)
        plt.show(block=False)
        plt.pause(0.1)
        self.initialized = True

    def is_open(self) -> bool:
        """Check if the figure window is still open."""
        if self.fig is None:
            return False
        if not plt.fignum_exists(self.fig.number):
            self.initialized = False
            self.fig = None
            self.ax = None
            return False
        return True

    def render(self, snapshot: ParticleSet, status: str = ""):
        """Render one snapshot."""
        self.initialize()
        if not self.is_open():
            return

        positions = snapshot.positions
        if len(snapshot) == 0:
            self.scatter.set_offsets(np.zeros((0, 2)))
        else:
            speeds = np.linalg.norm(snapshot.velocities, axis=1)
            colors = (speeds - speeds.min()) / (speeds.max() - speeds.min() + 1e-10)
            log_mass = np.log10(snapshot.masses)
            sizes = 2.0 + 4.0 * (log_mass - log_mass.min())
            self.scatter.set_offsets(positions)
            self.scatter.set_array(colors)
            self.scatter.set_sizes(sizes)
            if self.auto_scale:
                self._fit_view(positions)

        self.ax.set_title(f"{self.title}  {status}".strip(), color='white')
        self.fig.canvas.draw_idle()
        plt.pause(0.001)

    def _fit_view(self, positions: np.ndarray):
        margin = 0.15
        x_min, x_max = positions[:, 0].min(), positions[:, 0].max()
        y_min, y_max = positions[:, 1].min(), positions[:, 1].max()
        max_range = max(x_max - x_min, y_max - y_min, 10.0) * (1 + margin)
        x_center = (x_max + x_min) / 2
        y_center = (y_max + y_min) / 2
        self.ax.set_xlim(x_center - max_range / 2, x_center + max_range / 2)
        self.ax.set_ylim(y_center - max_range / 2, y_center + max_range / 2)

    def close(self):
        """Close the renderer."""
        if self.fig is not None:
            plt.close(self.fig)
            self.fig = None
            self.ax = None
            self.initialized = False
