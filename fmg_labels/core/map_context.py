"""
Map data consumed by label generation.

This module replaces FMG's global ``pack`` object with an explicit
MapContext that is passed into every stage of label placement:
- Packed cell centers and their state/feature assignments
- Feature table (oceans, lakes, islands) with lake shorelines
- Political states with their poles of inaccessibility
- Canvas bounds

MapContext also acts as the boundary oracle: it resolves a point to the
closest packed cell using a KDTree, the Python equivalent of FMG's
findClosestCell() quadtree lookup.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np
import structlog

from pydantic import BaseModel, ConfigDict, Field
from sklearn.neighbors import KDTree

logger = structlog.get_logger()


@dataclass
class Feature:
    """Represents a geographic feature (ocean, lake, island)."""

    id: int
    type: str  # "ocean", "lake", "island"
    cells: int  # total cells in feature
    land: bool = False
    border: bool = False  # touches map edge
    shoreline: List[int] = field(default_factory=list)  # for lakes

    @property
    def is_lake(self) -> bool:
        return self.type == "lake"


class State(BaseModel):
    """Data structure for a political state."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: int = Field(description="Unique state identifier")
    name: str = Field(description="Short state name")
    full_name: str = Field(default="", description="Full state name, e.g. 'Kingdom of Rus'")
    pole: Optional[Tuple[float, float]] = Field(
        default=None, description="Pole of inaccessibility used as label anchor"
    )
    cells: int = Field(default=0, description="Number of cells owned by the state")
    removed: bool = Field(default=False, description="Whether state has been removed")
    locked: bool = Field(default=False, description="Whether state labels are locked")

    @property
    def display_full_name(self) -> str:
        return self.full_name or self.name


@dataclass
class MapContext:
    """Packed map data required to place state labels."""

    width: float
    height: float
    points: np.ndarray  # cells.p[i] = [x, y]
    cell_state: np.ndarray  # cells.state[i] = owning state id
    feature_ids: np.ndarray  # cells.f[i] = feature id
    features: List[Optional[Feature]]  # index 0 is reserved
    states: Dict[int, State] = field(default_factory=dict)

    _tree: Optional[KDTree] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.points = np.asarray(self.points, dtype=np.float64).reshape(-1, 2)
        self.cell_state = np.asarray(self.cell_state, dtype=np.int32)
        self.feature_ids = np.asarray(self.feature_ids, dtype=np.int32)

        n_cells = len(self.points)
        if n_cells == 0:
            raise ValueError("Map context requires at least one cell")
        if len(self.cell_state) != n_cells or len(self.feature_ids) != n_cells:
            raise ValueError(
                f"Cell arrays must have {n_cells} entries, got "
                f"{len(self.cell_state)} states and {len(self.feature_ids)} features"
            )
        if self.feature_ids.max() >= len(self.features):
            raise ValueError("Cell references a feature missing from the feature table")
        for index, feature in enumerate(self.features):
            if feature is not None and feature.id != index:
                raise ValueError(f"Feature {feature.id} is stored at index {index}")

    @property
    def n_cells(self) -> int:
        return len(self.points)

    @property
    def tree(self) -> KDTree:
        """Spatial index over cell centers, built on first use."""
        if self._tree is None:
            logger.debug("Building cell KDTree", cells=self.n_cells)
            self._tree = KDTree(self.points)
        return self._tree

    def in_canvas(self, x: float, y: float) -> bool:
        return 0 <= x <= self.width and 0 <= y <= self.height

    def in_canvas_mask(self, points: np.ndarray) -> np.ndarray:
        """Vectorised in_canvas() for an (n, 2) array of points."""
        x, y = points[:, 0], points[:, 1]
        return (x >= 0) & (x <= self.width) & (y >= 0) & (y <= self.height)

    def cell_at(self, x: float, y: float) -> int:
        """Find the closest cell to a point (FMG's findClosestCell)."""
        return int(self.cells_at(np.array([[x, y]]))[0])

    def cells_at(self, points: np.ndarray) -> np.ndarray:
        """Find the closest cell for each row of an (n, 2) array of points."""
        points = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        if len(points) == 0:
            return np.zeros(0, dtype=np.int64)
        return self.tree.query(points, k=1, return_distance=False)[:, 0]

    def region_of(self, cell_id: int) -> int:
        return int(self.cell_state[cell_id])

    def feature_of(self, cell_id: int) -> Optional[Feature]:
        return self.features[self.feature_ids[cell_id]]

    def state_cells(self, state: State) -> int:
        """Cell count of a state, counted from the cell table when not stored."""
        if state.cells:
            return state.cells
        return int(np.count_nonzero(self.cell_state == state.id))
