"""Presentation layer: matplotlib rendering and interactive viewer."""

from gravity_sim.render.renderer_2d import Renderer2D
from gravity_sim.render.viewer import InteractiveViewer, run_viewer

__all__ = ["Renderer2D", "InteractiveViewer", "run_viewer"]
