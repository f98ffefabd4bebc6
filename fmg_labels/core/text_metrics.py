"""
Text measurement and label curve geometry.

Label fitting needs two measurements that a browser gets from the DOM:
the rendered length of a line of text and the bounding box of a laid-out
text block. They are isolated behind the TextMeasurer protocol so that
placement can run without a rendering surface. FixedWidthMeasurer is the
deterministic implementation used by the API and by tests.

Label paths are drawn as natural cubic splines through their points
(d3.curveNatural); the helpers below sample that curve to measure it.
"""

from typing import Protocol, Sequence, Tuple

import numpy as np

from scipy.interpolate import CubicSpline

from .errors import MeasurementUnavailableError

SAMPLES_PER_SEGMENT = 32
EXAMPLE_TEXT = "Example"


class TextMeasurer(Protocol):
    """Measures text in map units at 100% font size."""

    def text_length(self, text: str) -> float:
        ...

    def text_bbox(self, lines: Sequence[str], font_size_ratio: float) -> Tuple[float, float]:
        ...


class FixedWidthMeasurer:
    """Every glyph is letter_width wide and every line is line_height tall."""

    def __init__(self, letter_width: float = 6.0, line_height: float = 12.0):
        if letter_width <= 0 or line_height <= 0:
            raise MeasurementUnavailableError(
                "Glyph width and line height must be positive to measure text"
            )
        self.letter_width = letter_width
        self.line_height = line_height

    def text_length(self, text: str) -> float:
        return len(text) * self.letter_width

    def text_bbox(self, lines: Sequence[str], font_size_ratio: float) -> Tuple[float, float]:
        scale = font_size_ratio / 100
        longest = max((len(line) for line in lines), default=0)
        return (
            longest * self.letter_width * scale,
            len(lines) * self.line_height * scale,
        )


def estimate_letter_length(measurer: TextMeasurer) -> float:
    """Approximate length of one letter from a sample word."""
    letter_length = measurer.text_length(EXAMPLE_TEXT) / len(EXAMPLE_TEXT)
    if not letter_length > 0:
        raise MeasurementUnavailableError("Text measurement returned a non-positive length")
    return letter_length


def sample_curve(
    points: Sequence[Tuple[float, float]], samples_per_segment: int = SAMPLES_PER_SEGMENT
) -> np.ndarray:
    """
    Sample the natural cubic curve through points.

    Returns:
        (m, 2) array of points along the curve, first and last input
        points included
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    if len(pts) < 3:
        return pts

    t = np.arange(len(pts))
    spline = CubicSpline(t, pts, bc_type="natural", axis=0)
    samples = np.linspace(0, len(pts) - 1, (len(pts) - 1) * samples_per_segment + 1)
    return spline(samples)


def path_length(points: Sequence[Tuple[float, float]]) -> float:
    """Length of the label curve through points."""
    curve = sample_curve(points)
    if len(curve) < 2:
        return 0.0
    return float(np.linalg.norm(np.diff(curve, axis=0), axis=1).sum())


def point_at_half_length(points: Sequence[Tuple[float, float]]) -> Tuple[float, float]:
    """Point halfway along the label curve, where centered text is anchored."""
    curve = sample_curve(points)
    if len(curve) == 1:
        return float(curve[0, 0]), float(curve[0, 1])

    segments = np.linalg.norm(np.diff(curve, axis=0), axis=1)
    cumulative = np.concatenate([[0.0], np.cumsum(segments)])
    half = cumulative[-1] / 2

    x = np.interp(half, cumulative, curve[:, 0])
    y = np.interp(half, cumulative, curve[:, 1])
    return float(x), float(y)
