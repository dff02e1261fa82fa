"""Visualization and export for the physarum simulation."""

import numpy as np
import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend
import matplotlib.pyplot as plt
from pathlib import Path
from typing import List, Optional, TYPE_CHECKING
from PIL import Image

if TYPE_CHECKING:
    from ..model.state import SimulationState


class Visualizer:
    """
    Renders the trail field using matplotlib.

    Supports:
    - Single PNG snapshots (heatmap plus optional agent markers)
    - Animated GIF compilation from colormapped frames

    Intensities are normalized by the current maximum; an empty field
    renders as uniformly dark.
    """

    AGENT_COLOR = '#7FDBFF'
    SENSOR_COLOR = '#FF4136'

    def __init__(self, grid_width: int, grid_height: int,
                 cmap: str = 'magma', max_markers: int = 2000,
                 show_sensors: bool = False):
        self.width = grid_width
        self.height = grid_height
        self.cmap = matplotlib.colormaps[cmap]
        self.max_markers = max_markers
        self.show_sensors = show_sensors
        self.frames: List[Image.Image] = []

    def colorize(self, state: "SimulationState") -> np.ndarray:
        """Map the normalized field to an (H, W, 3) uint8 RGB array."""
        rgba = self.cmap(state.normalized_field())
        return (rgba[:, :, :3] * 255).astype(np.uint8)

    def render_frame(self, state: "SimulationState",
                     scale: int = 1) -> Image.Image:
        """Render the field as a PIL image, y axis pointing up."""
        img = Image.fromarray(np.flipud(self.colorize(state)))
        if scale > 1:
            img = img.resize((self.width * scale, self.height * scale),
                             Image.Resampling.NEAREST)
        return img

    def _create_figure(self, state: "SimulationState",
                       show_agents: Optional[bool] = None) -> plt.Figure:
        """Create matplotlib figure for state visualization."""
        aspect = self.width / self.height
        fig_height = 6
        fig_width = max(6, fig_height * aspect)
        fig, ax = plt.subplots(figsize=(fig_width, fig_height))

        ax.imshow(state.normalized_field(), cmap=self.cmap, vmin=0.0,
                  vmax=1.0, origin='lower', aspect='equal',
                  extent=[0, self.width, 0, self.height])

        if show_agents is None:
            show_agents = len(state.agents) <= self.max_markers
        if show_agents and state.agents:
            xs = [a.x for a in state.agents]
            ys = [a.y for a in state.agents]
            ax.scatter(xs, ys, s=2, c=self.AGENT_COLOR, alpha=0.6,
                       linewidths=0)
            if self.show_sensors:
                cells = [c for a in state.agents if a.sensors
                         for c in (a.sensors.front, a.sensors.left,
                                   a.sensors.right)]
                if cells:
                    sx, sy = zip(*cells)
                    ax.scatter(np.array(sx) + 0.5, np.array(sy) + 0.5, s=1,
                               c=self.SENSOR_COLOR, linewidths=0)

        ax.set_title(f'Step {state.step} | Agents: {len(state.agents)} | '
                     f'Trail max: {state.metrics.get("trail_max", 0):.2f}')
        ax.set_xlabel('X')
        ax.set_ylabel('Y')
        ax.set_xlim(0, self.width)
        ax.set_ylim(0, self.height)

        plt.tight_layout()
        return fig

    def buffer_frame(self, state: "SimulationState") -> None:
        """Store frame for GIF generation."""
        scale = max(1, 400 // max(self.width, self.height))
        self.frames.append(self.render_frame(state, scale=scale))

    def save_snapshot(self, state: "SimulationState", output_path: Path) -> None:
        """Save single PNG image of current state."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig = self._create_figure(state)
        fig.savefig(output_path, dpi=150, bbox_inches='tight')
        plt.close(fig)

    def generate_gif(self, output_path: Path, fps: int = 10) -> None:
        """Compile buffered frames into animated GIF."""
        if not self.frames:
            return

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        duration = int(1000 / fps)  # milliseconds per frame

        self.frames[0].save(
            output_path,
            save_all=True,
            append_images=self.frames[1:],
            duration=duration,
            loop=0
        )
