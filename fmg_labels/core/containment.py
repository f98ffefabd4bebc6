"""
Check that a laid-out label stays visually inside its state.
"""

import math

from typing import List, Tuple

from .map_context import MapContext

MIN_POINTS_INSIDE = 4  # more than this many of 6 sample points must be inside


def label_sample_points(
    center: Tuple[float, float], angle_rad: float, half_width: float, half_height: float
) -> List[Tuple[float, float]]:
    """Bounding box corners and top/bottom midpoints rotated around center."""
    cx, cy = center
    points = [
        (-half_width, -half_height),
        (+half_width, -half_height),
        (+half_width, half_height),
        (-half_width, half_height),
        (0, half_height),
        (0, -half_height),
    ]

    sin, cos = math.sin(angle_rad), math.cos(angle_rad)
    return [(cx + x * cos - y * sin, cy + x * sin + y * cos) for x, y in points]


def check_label_fits_state(
    context: MapContext,
    state_id: int,
    center: Tuple[float, float],
    angle_rad: float,
    half_width: float,
    half_height: float,
) -> bool:
    """
    Check whether a multi-line label is mostly inside the state.

    Args:
        context: Map data used to resolve points to cells
        state_id: State the label belongs to
        center: Center of the rendered text block
        angle_rad: Orientation of the label path
        half_width, half_height: Half extents of the text bounding box

    Returns:
        True as soon as more than 4 of the 6 sample points are inside
    """
    points_inside = 0
    for x, y in label_sample_points(center, angle_rad, half_width, half_height):
        if context.in_canvas(x, y) and context.region_of(context.cell_at(x, y)) == state_id:
            points_inside += 1
        if points_inside > MIN_POINTS_INSIDE:
            return True

    return False
