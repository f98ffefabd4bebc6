"""
SVG rendering of label data.

Each label variant has its own renderer; render_label() dispatches on the
variant and fails loudly on an unknown one. Curved labels put their path
into <defs> and reference it from a <textPath>.
"""

from typing import List, NamedTuple, Optional, Sequence, Tuple
from xml.sax.saxutils import escape, quoteattr

from .labels import BurgLabel, CustomLabel, Label, StateLabel
from .text_metrics import sample_curve


class LabelSvg(NamedTuple):
    """SVG fragments of one label."""

    text: str
    path: Optional[str] = None  # goes into <defs>


def path_data(points: Sequence[Tuple[float, float]]) -> str:
    """SVG path data of the natural curve through points."""
    curve = sample_curve(points)
    commands = [f"{'M' if i == 0 else 'L'}{x:.2f},{y:.2f}" for i, (x, y) in enumerate(curve)]
    return "".join(commands)


def _tspans(lines: List[str]) -> str:
    if len(lines) == 1:
        return f'<tspan x="0">{escape(lines[0])}</tspan>'

    top = (len(lines) - 1) / -2
    return "".join(
        f'<tspan x="0" dy="{1 if index else top:g}em">{escape(line)}</tspan>'
        for index, line in enumerate(lines)
    )


def _render_path_label(label) -> LabelSvg:
    path_id = f"textPath_{label.id}"
    path = f'<path id={quoteattr(path_id)} d="{path_data(label.points)}"/>'

    text_attrs = f'id={quoteattr(label.id)} text-rendering="optimizeSpeed"'
    if label.transform:
        text_attrs += f" transform={quoteattr(label.transform)}"

    text_path_attrs = f'href="#{path_id}" startOffset="{label.start_offset:g}%"'
    if label.font_size:
        text_path_attrs += f' font-size="{label.font_size:g}%"'
    if label.letter_spacing:
        text_path_attrs += f' letter-spacing="{label.letter_spacing:g}px"'

    text = f"<text {text_attrs}><textPath {text_path_attrs}>{_tspans(label.lines)}</textPath></text>"
    return LabelSvg(text=text, path=path)


def render_state_label(label: StateLabel) -> LabelSvg:
    return _render_path_label(label)


def render_custom_label(label: CustomLabel) -> LabelSvg:
    if len(label.points) < 2:
        raise ValueError(f"Custom label {label.id} needs at least 2 path points")
    return _render_path_label(label)


def render_burg_label(label: BurgLabel) -> LabelSvg:
    text = (
        f'<text id={quoteattr(label.id)} text-rendering="optimizeSpeed" '
        f'data-id="{label.burg_id}" x="{label.x:g}" y="{label.y:g}" '
        f'dx="{label.dx:g}em" dy="{label.dy:g}em">{escape(label.name)}</text>'
    )
    return LabelSvg(text=text)


def render_label(label: Label) -> LabelSvg:
    if isinstance(label, StateLabel):
        return render_state_label(label)
    if isinstance(label, BurgLabel):
        return render_burg_label(label)
    if isinstance(label, CustomLabel):
        return render_custom_label(label)
    raise TypeError(f"Unknown label type: {type(label).__name__}")


def render_svg(labels: Sequence[Label], width: float, height: float) -> str:
    """Standalone SVG document with all labels."""
    rendered = [render_label(label) for label in labels]
    paths = "".join(item.path for item in rendered if item.path)
    texts = "".join(item.text for item in rendered)
    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{width:g}" height="{height:g}">'
        f'<defs><g id="textPaths">{paths}</g></defs>'
        f'<g id="labels">{texts}</g>'
        "</svg>"
    )
