"""
Fitting state names onto label paths.

All lengths here are expressed in letters: the path length is the curve
length divided by the estimated width of one glyph, so it can be compared
directly with the number of characters in a name.
"""

from typing import List, Literal, Sequence, Tuple

from ..utils.numbers import minmax, rn

Point = Tuple[float, float]

LabelMode = Literal["auto", "short", "full"]


def split_in_two(text: str) -> List[str]:
    """
    Split text into two balanced lines at a space.

    The break that minimizes the longer line wins; equally good breaks
    resolve to the earlier one. Text without spaces stays on one line.
    """
    text = text.strip()
    best_lines = [text]
    best_longest = None

    for position, char in enumerate(text):
        if char != " ":
            continue
        first, second = text[:position].strip(), text[position + 1:].strip()
        if not first or not second:
            continue
        longest = max(len(first), len(second))
        if best_longest is None or longest < best_longest:
            best_longest = longest
            best_lines = [first, second]

    return best_lines


def _ratio(path_length: float, text_length: int, scale: float, low: float, high: float) -> int:
    if text_length == 0:
        return high
    return minmax(rn(path_length / text_length * scale), low, high)


def get_lines_and_ratio(
    mode: LabelMode, name: str, full_name: str, path_length: float
) -> Tuple[List[str], int]:
    """
    Choose label lines and font size ratio (in %) for a path length.

    Args:
        mode: "short" forces the short name, anything else picks by length
        name: Short state name
        full_name: Full state name
        path_length: Path length in letters

    Returns:
        Tuple of (lines, font size ratio)
    """
    if mode == "short":
        return [name], _ratio(path_length, len(name), 60, 50, 150)

    if path_length > len(full_name) * 2:
        return [full_name], _ratio(path_length, len(full_name), 70, 70, 170)

    lines = split_in_two(full_name)
    longest_line_length = max(len(line) for line in lines)
    return lines, _ratio(path_length, longest_line_length, 60, 70, 150)


def prolongate_path(
    points: Sequence[Point], path_length: float, longest_line_length: int
) -> List[Point]:
    """
    Stretch a path that is too short for its longest line.

    Both ends move away from the chord midpoint so the chord grows by
    longest_line_length / path_length. Inner points are kept.
    """
    points = [tuple(p) for p in points]
    if not path_length or path_length >= longest_line_length:
        return points

    (x1, y1), (x2, y2) = points[0], points[-1]
    dx, dy = (x2 - x1) / 2, (y2 - y1) / 2

    mod = longest_line_length / path_length
    points[0] = (x1 + dx - dx * mod, y1 + dy - dy * mod)
    points[-1] = (x2 - dx + dx * mod, y2 - dy + dy * mod)
    return points


def get_fallback_line_and_ratio(
    name: str, full_name: str, path_length: float
) -> Tuple[str, int]:
    """Single line layout used when a multi-line label sticks out of its state."""
    text = full_name if path_length > len(full_name) * 1.8 else name
    return text, _ratio(path_length, len(text), 50, 50, 130)
