"""
EcoVision - Visualization Module
Map viewport: projection-to-screen transform, drag/zoom input, selection.
"""

from ecovision.visualization.viewport import (
    Dragging,
    Idle,
    Vector,
    ViewportController,
    ViewportState,
)

__all__ = [
    "Dragging",
    "Idle",
    "Vector",
    "ViewportController",
    "ViewportState",
]
