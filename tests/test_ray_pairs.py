"""Tests for ray scoring and best pair selection."""

import pytest

from fmg_labels.core.errors import DegenerateRegionError
from fmg_labels.core.ray_pairs import (
    build_label_path,
    evaluate_arc,
    find_best_ray_pair,
    get_angle_delta,
    score_curvature,
    score_ray_angle,
    score_ray_pair,
)
from fmg_labels.core.raycast import Ray


def ray(angle, length=10.0, x=0.0, y=0.0):
    return Ray(angle=angle, length=length, x=x, y=y)


class TestScoreRayAngle:
    """Test horizontality bands."""

    @pytest.mark.parametrize(
        "angle,expected",
        [
            (0, 1),
            (180, 1),
            (9, 0.9),  # horizontality 0.9
            (27, 0.6),  # 0.7
            (45, 0.6),  # 0.5
            (63, 0.5),  # 0.3
            (72, 0.2),  # 0.2
            (81, 0.1),  # 0.1
            (90, 0.1),
            (270, 0.1),
            (351, 0.9),
        ],
    )
    def test_bands(self, angle, expected):
        """Test horizontality score bands."""
        assert score_ray_angle(angle) == expected


class TestCurvature:
    """Test angle deltas, arc similarity and curvature multipliers."""

    def test_angle_delta_wraps_around(self):
        """Test angle deltas across 0 degrees."""
        assert get_angle_delta(350, 10) == 20
        assert get_angle_delta(0, 270) == 90
        assert get_angle_delta(90, 270) == 180

    def test_arc_similarity(self):
        """Test arc similarity of two angles."""
        assert evaluate_arc(9, 171) == 1
        assert evaluate_arc(0, 90) == 0
        assert evaluate_arc(0, 150) == pytest.approx(1 - 30 / 90)

    def test_straight_line_multiplier_is_exactly_one(self):
        """Test opposite rays get a multiplier of 1."""
        assert score_curvature(0, 180) == 1
        assert score_curvature(90, 270) == 1
        assert score_curvature(27, 207) == 1

    def test_acute_pairs_score_zero(self):
        """Test acute pairs score 0 whatever their length."""
        assert score_curvature(0, 80) == 0
        assert score_ray_pair(ray(0, 1000), ray(80, 1000)) == 0
        assert score_ray_pair(ray(350, 300), ray(70, 300)) == 0

    @pytest.mark.parametrize(
        "angle2,factor",
        [(100, 0.6), (119, 0.6), (120, 0.7), (130, 0.7), (140, 0.8), (150, 0.8), (160, 1), (170, 1)],
    )
    def test_bands(self, angle2, factor):
        """Test curvature multiplier bands."""
        assert score_curvature(0, angle2) == pytest.approx(factor * evaluate_arc(0, angle2))

    def test_pair_score(self):
        """Test pair score calculation."""
        # (10 * 1 + 20 * 0.9) * 1
        assert score_ray_pair(ray(0, 10), ray(189, 20)) == pytest.approx(28 * (1 - 9 / 90))
        assert score_ray_pair(ray(0, 10), ray(180, 20)) == 30


class TestFindBestRayPair:
    """Test exhaustive pair selection."""

    def test_prefers_long_horizontal_line(self):
        """Test the best pair is long and horizontal."""
        rays = [ray(0, 50), ray(90, 200), ray(180, 50), ray(270, 200), ray(45, 60)]
        best = find_best_ray_pair(rays)
        assert (best[0].angle, best[1].angle) == (0, 180)

    def test_first_pair_wins_ties(self):
        """Test the first pair in scan order wins ties."""
        rays = [ray(9), ray(171), ray(189), ray(351)]
        scores = {
            (i, j): score_ray_pair(rays[i], rays[j])
            for i in range(4)
            for j in range(i + 1, 4)
            if score_ray_pair(rays[i], rays[j]) > 0
        }
        assert len(set(scores.values())) == 1
        assert len(scores) == 4

        assert find_best_ray_pair(rays) == (rays[0], rays[1])
        assert find_best_ray_pair(rays[::-1]) == (rays[3], rays[2])

    def test_zero_length_rays_still_pair(self):
        """Test zero length rays still form a pair."""
        rays = [ray(0, 0), ray(180, 0)]
        assert find_best_ray_pair(rays) == (rays[0], rays[1])

    @pytest.mark.parametrize("count", [0, 1])
    def test_requires_two_rays(self, count):
        """Test fewer than two rays is degenerate."""
        with pytest.raises(DegenerateRegionError):
            find_best_ray_pair([ray(0)] * count)


class TestBuildLabelPath:
    """Test label path orientation."""

    def test_path_runs_through_pole(self):
        """Test the label path passes through the pole."""
        path = build_label_path(ray(180, x=10, y=5), ray(0, x=30, y=5), (20, 5))
        assert path == [(10, 5), (20.0, 5.0), (30, 5)]

    def test_path_is_ordered_left_to_right(self):
        """Test the label path reads left to right."""
        path = build_label_path(ray(0, x=30, y=5), ray(180, x=10, y=7), (20, 6))
        assert path == [(10, 7), (20.0, 6.0), (30, 5)]
        assert path[0][0] < path[-1][0]
