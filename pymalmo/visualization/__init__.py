"""
Visualization module for pymalmo.

2D plan view (matplotlib):
- Install with: pip install pymalmo[viz-light]
- Provides: Map2DVisualizer, save_mission_map
"""

import importlib.util

MATPLOTLIB_AVAILABLE = importlib.util.find_spec("matplotlib") is not None

__all__ = ['Map2DVisualizer', 'save_mission_map', 'MATPLOTLIB_AVAILABLE']

if MATPLOTLIB_AVAILABLE:
    from .map2d import Map2DVisualizer, save_mission_map
else:
    def _raise_matplotlib_error(*args, **kwargs):
        raise ImportError(
            "2D visualization features require matplotlib. "
            "Install with: pip install pymalmo[viz-light]"
        )

    class Map2DVisualizer:
        def __init__(self, *args, **kwargs):
            _raise_matplotlib_error()

    def save_mission_map(*args, **kwargs):
        _raise_matplotlib_error()
