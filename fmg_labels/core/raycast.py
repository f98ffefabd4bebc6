"""
Ray casting from a state pole towards its borders.

A state label path is anchored at the state's pole and stretches towards
two of its borders. To find candidate ends, rays are cast from the pole
at regular angular intervals; each ray advances in fixed steps while the
ray point and two points offset perpendicular to it stay inside the state.

Lakes count as part of a state when the state fully encloses them or when
they are small compared to the state, so labels may run across them.
"""

import math

from dataclasses import dataclass
from typing import List, NamedTuple, Sequence

import numpy as np
import structlog

from .errors import LabelConfigurationError
from .map_context import MapContext

logger = structlog.get_logger()

# Increase step to 15 or 30 to make it faster and more horizontal,
# decrease step to 5 to improve accuracy
ANGLE_STEP = 9

LENGTH_START = 5
LENGTH_STEP = 5
LENGTH_MAX = 300  # exclusive


class Direction(NamedTuple):
    """Unit vector for a sampling angle in degrees."""

    angle: float
    dx: float
    dy: float


@dataclass(frozen=True)
class Ray:
    """Farthest point reached from the pole along a direction."""

    angle: float
    length: float
    x: float
    y: float


def precalculate_angles(step: float = ANGLE_STEP) -> List[Direction]:
    """
    Precompute directions covering [0, 360) at regular intervals.

    Args:
        step: Angular step in degrees

    Returns:
        Directions ordered by ascending angle, starting at 0

    Raises:
        LabelConfigurationError: If step is not positive
    """
    if step <= 0:
        raise LabelConfigurationError(f"Angle step must be positive, got {step}")

    directions = []
    for i in range(math.ceil(360 / step)):
        angle = i * step
        if angle >= 360:
            break
        rad = math.radians(angle)
        directions.append(Direction(angle, math.cos(rad), math.sin(rad)))
    return directions


def get_offset_width(
    cells_number: int,
    small_state_cells: int = 40,
    medium_state_cells: int = 200,
    small_offset: float = 0,
    medium_offset: float = 5,
    large_offset: float = 10,
) -> float:
    """Perpendicular probe offset depending on state size."""
    if cells_number < small_state_cells:
        return small_offset
    if cells_number < medium_state_cells:
        return medium_offset
    return large_offset


class StateContainment:
    """
    Point-in-state predicate for one state.

    A point is inside when it lies on the canvas and its closest cell
    either belongs to the state or is part of a lake that the state
    encloses or that is not larger than max_lake_size.
    """

    def __init__(self, context: MapContext, state_id: int, max_lake_size: float):
        self.context = context
        self.state_id = state_id
        self.max_lake_size = max_lake_size

        n_features = len(context.features)
        self.lake_features = np.zeros(n_features, dtype=bool)
        self.lake_inside = np.zeros(n_features, dtype=bool)

        for feature in context.features:
            if feature is None or not feature.is_lake:
                continue
            self.lake_features[feature.id] = True
            self.lake_inside[feature.id] = self._is_inner_lake(
                feature.shoreline
            ) or self._is_small_lake(feature.cells)

    def _is_inner_lake(self, shoreline: Sequence[int]) -> bool:
        if len(shoreline) == 0:
            return True
        return bool(np.all(self.context.cell_state[list(shoreline)] == self.state_id))

    def _is_small_lake(self, cells: int) -> bool:
        return cells <= self.max_lake_size

    def contains(self, points: np.ndarray) -> np.ndarray:
        """
        Classify an (n, 2) array of points.

        Returns:
            Boolean array, True where the point counts as inside the state
        """
        points = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        inside = np.zeros(len(points), dtype=bool)

        on_canvas = self.context.in_canvas_mask(points)
        if not on_canvas.any():
            return inside

        cells = self.context.cells_at(points[on_canvas])
        feature_ids = self.context.feature_ids[cells]
        in_state = self.context.cell_state[cells] == self.state_id
        is_lake = self.lake_features[feature_ids]

        inside[on_canvas] = np.where(is_lake, self.lake_inside[feature_ids], in_state)
        return inside

    def contains_point(self, x: float, y: float) -> bool:
        return bool(self.contains(np.array([[x, y]]))[0])


def cast_rays(
    containment: StateContainment,
    x0: float,
    y0: float,
    directions: Sequence[Direction],
    offset: float,
    length_start: float = LENGTH_START,
    length_step: float = LENGTH_STEP,
    length_max: float = LENGTH_MAX,
) -> List[Ray]:
    """
    Cast one ray per direction from (x0, y0).

    Every candidate point of every direction is classified in a single
    batched lookup; each ray then keeps the last length before its first
    rejected step.

    Args:
        containment: Point-in-state predicate
        x0, y0: Ray origin (state pole)
        directions: Directions to cast along
        offset: Distance of the perpendicular probes from the ray point
        length_start: First tested length
        length_step: Length increment
        length_max: Exclusive upper bound for tested lengths

    Returns:
        One Ray per direction, in input order
    """
    if length_step <= 0:
        raise LabelConfigurationError(f"Length step must be positive, got {length_step}")

    lengths = np.arange(length_start, length_max, length_step, dtype=np.float64)
    if len(directions) == 0:
        return []
    if len(lengths) == 0:
        return [Ray(d.angle, 0, x0, y0) for d in directions]

    dx = np.array([d.dx for d in directions])[:, None]
    dy = np.array([d.dy for d in directions])[:, None]

    # (n_directions, n_lengths)
    x = x0 + lengths[None, :] * dx
    y = y0 + lengths[None, :] * dy

    # offset points are perpendicular to the ray
    probes = np.stack(
        [
            np.stack([x, y], axis=-1),
            np.stack([x - dy * offset, y + dx * offset], axis=-1),
            np.stack([x + dy * offset, y - dx * offset], axis=-1),
        ],
        axis=2,
    )
    inside = containment.contains(probes.reshape(-1, 2)).reshape(probes.shape[:3])
    accepted = inside.all(axis=2)

    rays = []
    for i, direction in enumerate(directions):
        rejected = np.flatnonzero(~accepted[i])
        steps = rejected[0] if len(rejected) else len(lengths)
        if steps == 0:
            rays.append(Ray(direction.angle, 0, x0, y0))
        else:
            k = steps - 1
            rays.append(
                Ray(direction.angle, float(lengths[k]), float(x[i, k]), float(y[i, k]))
            )
    return rays


def raycast(
    containment: StateContainment,
    x0: float,
    y0: float,
    direction: Direction,
    offset: float,
    **lengths,
) -> Ray:
    """Cast a single ray; see cast_rays() for the parameters."""
    return cast_rays(containment, x0, y0, [direction], offset, **lengths)[0]
