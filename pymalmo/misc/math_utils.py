"""
Block-grid geometry helpers for pymalmo.

Turns draw commands into the integer cells they fill, so missions can be
inspected (e.g. by the 2D map) without running the simulator.
"""
import math
import numpy as np
from typing import Tuple

Position3D = Tuple[float, float, float]


def calculate_3d_distance(pos1: Position3D, pos2: Position3D) -> float:
    """
    Euclidean distance between two points.

    Examples:
        >>> calculate_3d_distance((0, 0, 0), (3, 4, 0))
        5.0
    """
    x1, y1, z1 = pos1
    x2, y2, z2 = pos2
    return math.sqrt((x2 - x1)**2 + (y2 - y1)**2 + (z2 - z1)**2)


def yaw_to_direction(yaw_degrees: float) -> Tuple[float, float]:
    """
    Unit (dx, dz) facing vector for a Minecraft yaw.

    Yaw 0 faces south (+z), 90 faces west (-x).
    """
    rad = math.radians(yaw_degrees)
    return -math.sin(rad), math.cos(rad)


def cuboid_cells(x1: int, y1: int, z1: int, x2: int, y2: int, z2: int) -> np.ndarray:
    """
    All cells of a cuboid, corners inclusive and in any order.

    Returns:
        (N, 3) int array of x, y, z.
    """
    xs = np.arange(min(x1, x2), max(x1, x2) + 1)
    ys = np.arange(min(y1, y2), max(y1, y2) + 1)
    zs = np.arange(min(z1, z2), max(z1, z2) + 1)
    grid = np.stack(np.meshgrid(xs, ys, zs, indexing="ij"), axis=-1)
    return grid.reshape(-1, 3)


def sphere_cells(x: int, y: int, z: int, radius: int) -> np.ndarray:
    """
    Cells within `radius` of the centre cell (squared distance <= radius**2).

    Returns:
        (N, 3) int array; empty for a negative radius.
    """
    if radius < 0:
        return np.empty((0, 3), dtype=int)
    offsets = cuboid_cells(-radius, -radius, -radius, radius, radius, radius)
    inside = (offsets ** 2).sum(axis=1) <= radius * radius
    return offsets[inside] + np.array([x, y, z])


def line_cells(x1: int, y1: int, z1: int, x2: int, y2: int, z2: int) -> np.ndarray:
    """
    Cells along a straight line, one per step of the longest axis.

    Returns:
        (N, 3) int array of unique cells, ordered from the first end point.

    Examples:
        >>> line_cells(0, 0, 0, 3, 0, 0).tolist()
        [[0, 0, 0], [1, 0, 0], [2, 0, 0], [3, 0, 0]]
    """
    start = np.array([x1, y1, z1], dtype=float)
    end = np.array([x2, y2, z2], dtype=float)
    steps = int(np.abs(end - start).max())
    t = np.linspace(0.0, 1.0, steps + 1)[:, None]
    cells = np.rint(start + t * (end - start)).astype(int)
    # np.unique sorts; keep first-seen order instead
    _, first = np.unique(cells, axis=0, return_index=True)
    return cells[np.sort(first)]


def top_down_heightmap(cells: np.ndarray) -> Tuple[np.ndarray, Tuple[int, int, int, int]]:
    """
    Highest occupied y for every (x, z) column.

    Args:
        cells: (N, 3) int array of occupied cells.

    Returns:
        (heights, (min_x, max_x, min_z, max_z)) where heights is indexed
        [z - min_z, x - min_x] and empty columns are NaN.
    """
    if len(cells) == 0:
        return np.full((1, 1), np.nan), (0, 0, 0, 0)
    min_x, min_z = cells[:, 0].min(), cells[:, 2].min()
    max_x, max_z = cells[:, 0].max(), cells[:, 2].max()
    heights = np.full((max_z - min_z + 1, max_x - min_x + 1), -np.inf)
    np.maximum.at(heights, (cells[:, 2] - min_z, cells[:, 0] - min_x), cells[:, 1].astype(float))
    heights[np.isneginf(heights)] = np.nan
    return heights, (int(min_x), int(max_x), int(min_z), int(max_z))
