"""
Lightweight 2D visualization for missions using matplotlib.

Renders a top-down plan of a MissionSpec: the blocks its drawing decorator
places (coloured by height), plus the first agent's start, goal markers,
reward markers, distance markers and observation grids.
"""

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.patches as patches
from typing import Tuple

from ..classes.world import DrawBlock, DrawCuboid, DrawItem, DrawSphere, DrawLine
from ..misc.logger import create_logger
from ..misc.math_utils import (
    cuboid_cells, sphere_cells, line_cells, top_down_heightmap, yaw_to_direction
)


class Map2DVisualizer:
    """
    Top-down mission plan using matplotlib.

    North is up: the plot's vertical axis is z with south (+z) at the bottom.

    Example:
        >>> from pymalmo import MissionSpec
        >>> from pymalmo.visualization import Map2DVisualizer
        >>>
        >>> spec = MissionSpec()
        >>> spec.draw_cuboid(-5, 226, -5, 5, 226, 5, "stone")
        >>> spec.start_at(0.5, 227, 0.5)
        >>> Map2DVisualizer(spec).save_mission_overview("mission_map.png")
    """

    def __init__(self, mission_spec, figsize: Tuple[int, int] = (10, 10), dpi: int = 120, verbose: bool = True):
        """
        Args:
            mission_spec: MissionSpec to draw
            figsize: Figure size in inches (width, height)
            dpi: Image resolution (dots per inch)
            verbose: Whether to print progress messages
        """
        self.spec = mission_spec
        self.figsize = figsize
        self.dpi = dpi
        self.logger = create_logger(verbose=verbose, name="Map2D")

        self.colors = {
            'items': '#FF6600',       # Orange for dropped items
            'start': '#0066CC',       # Blue for the agent start
            'goal': '#CC0000',        # Red for quit-on-reach markers
            'reward': '#FFD700',      # Gold for reward markers
            'distance': '#9900CC',    # Purple for distance markers
            'grid': '#28A745',        # Green for observation grids
        }

    def _draw_objects(self):
        section = self.spec.mission.server_section
        handlers = section.server_handlers if section is not None else None
        if handlers is None or handlers.drawing_decorator is None:
            return []
        return handlers.drawing_decorator.draw_objects

    def _agent_handlers(self):
        if not self.spec.mission.agent_sections:
            return None
        return self.spec.mission.agent_sections[0].agent_handlers

    def _placement(self):
        if not self.spec.mission.agent_sections:
            return None
        start = self.spec.mission.agent_sections[0].agent_start
        return start.placement if start is not None else None

    def collect_block_cells(self) -> np.ndarray:
        """All cells filled by block draw commands, as an (N, 3) int array.

        Commands are applied in order; later air blocks are not subtracted.
        """
        chunks = []
        for obj in self._draw_objects():
            if getattr(obj, "type", None) == "air":
                continue
            if isinstance(obj, DrawBlock):
                chunks.append(np.array([[obj.x, obj.y, obj.z]]))
            elif isinstance(obj, DrawCuboid):
                chunks.append(cuboid_cells(obj.x1, obj.y1, obj.z1, obj.x2, obj.y2, obj.z2))
            elif isinstance(obj, DrawSphere):
                chunks.append(sphere_cells(obj.x, obj.y, obj.z, obj.radius))
            elif isinstance(obj, DrawLine):
                chunks.append(line_cells(obj.x1, obj.y1, obj.z1, obj.x2, obj.y2, obj.z2))
        if not chunks:
            return np.empty((0, 3), dtype=int)
        return np.concatenate(chunks).astype(int)

    def _create_blocks_layer(self, ax):
        cells = self.collect_block_cells()
        if len(cells) == 0:
            self.logger.info("No drawn blocks to plot")
            return None
        self.logger.info(f"Plotting {len(cells)} drawn block cells...")
        heights, (min_x, max_x, min_z, max_z) = top_down_heightmap(cells)
        return ax.imshow(
            heights, cmap='terrain', origin='upper', interpolation='nearest',
            extent=[min_x, max_x + 1, max_z + 1, min_z],
        )

    def _create_items_layer(self, ax):
        items = [o for o in self._draw_objects() if isinstance(o, DrawItem)]
        for item in items:
            ax.plot(item.x + 0.5, item.z + 0.5, 'o', color=self.colors['items'], markersize=5)
            ax.annotate(item.type, (item.x + 0.5, item.z + 0.5), fontsize=6,
                        xytext=(3, 3), textcoords='offset points')

    def _create_agent_layer(self, ax):
        placement = self._placement()
        if placement is None or placement.x is None or placement.z is None:
            return
        ax.plot(placement.x, placement.z, '^', color=self.colors['start'], markersize=10, label='Start')
        dx, dz = yaw_to_direction(placement.yaw or 0.0)
        ax.arrow(placement.x, placement.z, dx * 2, dz * 2, color=self.colors['start'],
                 head_width=0.5, length_includes_head=True)

        handlers = self._agent_handlers()
        grids = handlers.observation_from_grid if handlers is not None else None
        if grids is None:
            return
        # Grids are relative to the agent's block
        ox, oz = np.floor(placement.x), np.floor(placement.z)
        for grid in grids.grids:
            x1, x2 = sorted((grid.min.x, grid.max.x))
            z1, z2 = sorted((grid.min.z, grid.max.z))
            ax.add_patch(patches.Rectangle(
                (ox + x1, oz + z1), x2 - x1 + 1, z2 - z1 + 1, fill=False,
                edgecolor=self.colors['grid'], linestyle='--', linewidth=1.2))
            ax.annotate(grid.name, (ox + x1, oz + z1), fontsize=7, color=self.colors['grid'])

    def _create_markers_layer(self, ax):
        handlers = self._agent_handlers()
        if handlers is None:
            return

        quits = handlers.agent_quit_from_reaching_position
        for marker in (quits.markers if quits is not None else []):
            ax.add_patch(patches.Circle((marker.x, marker.z), marker.tolerance or 1.0,
                                        fill=False, edgecolor=self.colors['goal'], linewidth=1.5))
            ax.plot(marker.x, marker.z, 'x', color=self.colors['goal'])

        rewards = handlers.reward_for_reaching_position
        for marker in (rewards.markers if rewards is not None else []):
            ax.add_patch(patches.Circle((marker.x, marker.z), marker.tolerance or 0.0,
                                        fill=True, alpha=0.25, color=self.colors['reward']))
            ax.plot(marker.x, marker.z, '*', color=self.colors['reward'], markersize=10)
            ax.annotate(f"{marker.reward or 0:+g}", (marker.x, marker.z), fontsize=7,
                        xytext=(4, -8), textcoords='offset points')

        distances = handlers.observation_from_distance
        for marker in (distances.markers if distances is not None else []):
            ax.plot(marker.x, marker.z, 'D', color=self.colors['distance'], markersize=5)
            ax.annotate(marker.name, (marker.x, marker.z), fontsize=7,
                        xytext=(4, 4), textcoords='offset points')

    def create_mission_overview(self, title: str = None):
        """Builds the plan figure and returns (fig, ax)."""
        fig, ax = plt.subplots(figsize=self.figsize, dpi=self.dpi)

        image = self._create_blocks_layer(ax)
        if image is not None:
            fig.colorbar(image, ax=ax, shrink=0.7, label='Top block height (y)')
        self._create_items_layer(ax)
        self._create_markers_layer(ax)
        self._create_agent_layer(ax)

        ax.set_aspect('equal')
        if not ax.yaxis_inverted():
            ax.invert_yaxis()
        ax.set_xlabel('x (east)')
        ax.set_ylabel('z (south)')
        ax.set_title(title or self.spec.get_summary() or 'Mission plan')
        ax.grid(True, alpha=0.2)
        return fig, ax

    def save_mission_overview(self, output_path: str, title: str = None) -> str:
        """Renders the plan and saves it as an image."""
        fig, _ = self.create_mission_overview(title)
        fig.savefig(output_path, dpi=self.dpi, bbox_inches='tight')
        plt.close(fig)
        self.logger.info(f"Mission map saved to {output_path}")
        return output_path


def save_mission_map(mission_spec, output_path: str, **kwargs) -> str:
    """
    One-call helper: render a mission plan to `output_path`.

    Args:
        mission_spec: MissionSpec to draw
        output_path: Image path (format from the extension, e.g. .png)
        **kwargs: Passed to Map2DVisualizer (figsize, dpi, verbose)
    """
    return Map2DVisualizer(mission_spec, **kwargs).save_mission_overview(output_path)
