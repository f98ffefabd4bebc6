"""
Ray pair selection for curved state labels.

Every unordered pair of rays is scored. A ray's own score is its length
weighted by how horizontal it is; a pair's score adds both ray scores and
multiplies the sum by a curvature factor that forbids acute pairs and
favors straight lines through the pole.
"""

import math

from typing import List, Sequence, Tuple

from .errors import DegenerateRegionError
from .raycast import Ray

Point = Tuple[float, float]


def score_ray_angle(angle: float) -> float:
    """Score a ray angle, preferring horizontal rays (0 or 180 degrees)."""
    normalized_angle = abs(math.fmod(angle, 180))  # [0, 180]
    horizontality = abs(normalized_angle - 90) / 90  # [0, 1]

    if horizontality == 1:
        return 1  # horizontal
    if horizontality >= 0.75:
        return 0.9
    if horizontality >= 0.5:
        return 0.6
    if horizontality >= 0.25:
        return 0.5
    if horizontality >= 0.15:
        return 0.2
    return 0.1  # almost vertical


def get_angle_delta(angle1: float, angle2: float) -> float:
    """Angle between two directions, in [0, 180]."""
    delta = math.fmod(abs(angle1 - angle2), 360)
    if delta > 180:
        delta = 360 - delta
    return delta


def evaluate_arc(angle1: float, angle2: float) -> float:
    """Similarity of the two angles' proximity to the x-axis, in [0, 1]."""
    proximity1 = abs(math.fmod(angle1, 180) - 90)
    proximity2 = abs(math.fmod(angle2, 180) - 90)
    return 1 - abs(proximity1 - proximity2) / 90


def score_curvature(angle1: float, angle2: float) -> float:
    """Curvature multiplier of a ray pair."""
    delta = get_angle_delta(angle1, angle2)
    similarity = evaluate_arc(angle1, angle2)

    if delta == 180:
        return 1  # straight line
    if delta < 90:
        return 0  # acute
    if delta < 120:
        return 0.6 * similarity
    if delta < 140:
        return 0.7 * similarity
    if delta < 160:
        return 0.8 * similarity
    return similarity


def score_ray_pair(ray1: Ray, ray2: Ray) -> float:
    score1 = ray1.length * score_ray_angle(ray1.angle)
    score2 = ray2.length * score_ray_angle(ray2.angle)
    return (score1 + score2) * score_curvature(ray1.angle, ray2.angle)


def find_best_ray_pair(rays: Sequence[Ray]) -> Tuple[Ray, Ray]:
    """
    Find the best pair of rays for a curved label path.

    Pairs are scanned in (i, j) order with i < j; only a strictly greater
    score replaces the current best, so the first pair found wins ties.

    Raises:
        DegenerateRegionError: If fewer than two rays are supplied
    """
    if len(rays) < 2:
        raise DegenerateRegionError(f"At least 2 rays are required, got {len(rays)}")

    best_pair = None
    best_score = -math.inf

    for i in range(len(rays)):
        for j in range(i + 1, len(rays)):
            pair_score = score_ray_pair(rays[i], rays[j])
            if pair_score > best_score:
                best_score = pair_score
                best_pair = (rays[i], rays[j])

    return best_pair


def build_label_path(ray1: Ray, ray2: Ray, pole: Point) -> List[Point]:
    """Label path through the pole, ordered left to right."""
    path = [(ray1.x, ray1.y), (float(pole[0]), float(pole[1])), (ray2.x, ray2.y)]
    if ray1.x > ray2.x:
        path.reverse()
    return path
