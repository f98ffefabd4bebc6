"""Shared synthetic maps for label placement tests."""

from typing import Callable, Dict, Iterable, Optional

import numpy as np
import pytest

from fmg_labels.core.map_context import Feature, MapContext, State
from fmg_labels.core.text_metrics import FixedWidthMeasurer

DISC_CENTER = (200.0, 200.0)
DISC_RADIUS = 99.0


def grid_points(width: float, height: float, spacing: float) -> np.ndarray:
    """Regular grid of cell centers."""
    xs = np.arange(spacing / 2, width, spacing)
    ys = np.arange(spacing / 2, height, spacing)
    xx, yy = np.meshgrid(xs, ys)
    return np.column_stack([xx.ravel(), yy.ravel()])


def make_context(
    width: float,
    height: float,
    spacing: float,
    assign_state: Callable[[float, float], int],
    states: Iterable[State] = (),
    is_lake: Optional[Callable[[float, float], bool]] = None,
) -> MapContext:
    """
    Build a map on a regular grid.

    Land cells form feature 1; cells where is_lake() holds form lake
    feature 2 and belong to no state. The lake shoreline is made of the
    land cells next to it.
    """
    points = grid_points(width, height, spacing)
    cell_state = np.array([assign_state(x, y) for x, y in points], dtype=np.int32)
    feature_ids = np.ones(len(points), dtype=np.int32)
    features = [None, Feature(id=1, type="island", cells=len(points), land=True)]

    if is_lake is not None:
        lake_mask = np.array([is_lake(x, y) for x, y in points])
        feature_ids[lake_mask] = 2
        cell_state[lake_mask] = 0

        lake_points = points[lake_mask]
        shoreline = [
            i
            for i in np.flatnonzero(~lake_mask)
            if np.min(np.hypot(*(lake_points - points[i]).T)) <= spacing * 1.5
        ]
        features[1].cells = int((~lake_mask).sum())
        features.append(
            Feature(id=2, type="lake", cells=int(lake_mask.sum()), shoreline=shoreline)
        )

    return MapContext(
        width=width,
        height=height,
        points=points,
        cell_state=cell_state,
        feature_ids=feature_ids,
        features=features,
        states={state.id: state for state in states},
    )


def in_disc(x: float, y: float, center=DISC_CENTER, radius=DISC_RADIUS) -> bool:
    return (x - center[0]) ** 2 + (y - center[1]) ** 2 <= radius**2


@pytest.fixture
def measurer():
    """Deterministic fixed-width text measurement."""
    return FixedWidthMeasurer(letter_width=6.0, line_height=12.0)


@pytest.fixture
def disc_map():
    """One round state of radius 99 in the middle of a 400x400 canvas."""
    state = State(id=1, name="Rus", full_name="Principality of Rus", pole=DISC_CENTER)
    return make_context(
        400, 400, 4, lambda x, y: 1 if in_disc(x, y) else 0, states=[state]
    )


@pytest.fixture
def two_states_map():
    """Two round states side by side."""
    states = [
        State(id=1, name="Rus", full_name="Principality of Rus", pole=(100.0, 100.0)),
        State(id=2, name="Avaria", full_name="Kingdom of Avaria", pole=(300.0, 100.0)),
    ]

    def assign(x: float, y: float) -> int:
        if in_disc(x, y, (100, 100), 80):
            return 1
        if in_disc(x, y, (300, 100), 80):
            return 2
        return 0

    return make_context(400, 200, 4, assign, states=states)


def label_snapshot(labels) -> Dict[str, str]:
    """Serialized labels keyed by id."""
    return {label.id: label.model_dump_json() for label in labels}
