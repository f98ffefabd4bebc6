"""
State label generation.

This module places curved labels for political states following the
original Fantasy Map Generator approach.

Process:
1. cast_state_rays() - Cast rays from the state pole in all directions
2. find_best_ray_pair() - Pick the two rays forming the best label path
3. refine_label() - Fit the name onto the path, stretching it if needed
4. check_label_fits_state() - Fall back to one line if a multi-line label
   sticks out of the state
5. regenerate() - Replace the labels of the processed states in the store
"""

import math

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

import structlog

from pydantic import BaseModel, Field, model_validator

from .containment import check_label_fits_state
from .errors import DegenerateRegionError, MeasurementUnavailableError
from .labels import Label, LabelStore, StateLabel, is_state_label, state_label_id
from .map_context import MapContext, State
from .ray_pairs import build_label_path, find_best_ray_pair
from .raycast import Ray, StateContainment, cast_rays, get_offset_width, precalculate_angles
from .text_fitting import (
    LabelMode,
    get_fallback_line_and_ratio,
    get_lines_and_ratio,
    prolongate_path,
)
from .text_metrics import (
    TextMeasurer,
    estimate_letter_length,
    path_length,
    point_at_half_length,
)

logger = structlog.get_logger()


class LabelOptions(BaseModel):
    """State label generation options matching FMG's parameters."""

    angle_step: float = Field(default=9, gt=0, description="Ray sampling step in degrees")
    length_start: float = Field(default=5, gt=0, description="First tested ray length")
    length_step: float = Field(default=5, gt=0, description="Ray length increment")
    length_max: float = Field(default=300, gt=0, description="Exclusive ray length limit")

    # Perpendicular probe offsets by state size
    small_state_cells: int = Field(default=40, description="States below are small")
    medium_state_cells: int = Field(default=200, description="States below are medium")
    small_offset: float = Field(default=0, ge=0, description="Probe offset for small states")
    medium_offset: float = Field(default=5, ge=0, description="Probe offset for medium states")
    large_offset: float = Field(default=10, ge=0, description="Probe offset for large states")

    lake_size_divisor: float = Field(
        default=20, gt=0, description="State cells / divisor = largest lake crossed by labels"
    )

    mode: LabelMode = Field(
        default="auto", description="Label text mode"
    )
    start_offset: float = Field(default=50, description="Text start offset in %")
    letter_spacing: float = Field(default=0, description="Letter spacing in px")

    @model_validator(mode="after")
    def check_lengths(self) -> "LabelOptions":
        if self.length_max <= self.length_start:
            raise ValueError("length_max must be greater than length_start")
        return self


@dataclass
class GenerationReport:
    """Outcome of a state label generation pass."""

    generated: List[int] = field(default_factory=list)
    degenerate: List[int] = field(default_factory=list)
    unmeasured: List[int] = field(default_factory=list)
    fallbacks: List[int] = field(default_factory=list)
    removed: int = 0


class StateLabelsGenerator:
    """Generates curved labels for the states of a map."""

    def __init__(
        self,
        context: MapContext,
        measurer: TextMeasurer,
        options: Optional[LabelOptions] = None,
    ) -> None:
        """
        Initialize the generator.

        Args:
            context: Map data with states, cells and features
            measurer: Text measurement used to fit names onto paths
            options: LabelOptions for configuration
        """
        self.context = context
        self.measurer = measurer
        self.options = options or LabelOptions()
        self.directions = precalculate_angles(self.options.angle_step)

    def target_states(self, state_ids: Optional[Iterable[int]] = None) -> List[State]:
        """States to label, ordered by id."""
        wanted = set(state_ids) if state_ids is not None else None
        states = []
        for state_id in sorted(self.context.states):
            state = self.context.states[state_id]
            if not state.id or state.removed or state.locked:
                continue
            if wanted is not None and state.id not in wanted:
                continue
            states.append(state)
        return states

    def has_live_state(self, state_id: int) -> bool:
        """Whether a state still exists on the map (locked states included)."""
        state = self.context.states.get(state_id)
        return bool(state_id) and state is not None and not state.removed

    def cast_state_rays(self, state: State) -> List[Ray]:
        """Cast rays from the state pole in every sampled direction."""
        cells = self.context.state_cells(state)
        opts = self.options
        offset = get_offset_width(
            cells,
            opts.small_state_cells,
            opts.medium_state_cells,
            opts.small_offset,
            opts.medium_offset,
            opts.large_offset,
        )
        containment = StateContainment(
            self.context, state.id, max_lake_size=cells / opts.lake_size_divisor
        )
        x0, y0 = state.pole
        return cast_rays(
            containment,
            x0,
            y0,
            self.directions,
            offset,
            length_start=opts.length_start,
            length_step=opts.length_step,
            length_max=opts.length_max,
        )

    def build_state_label(self, state: State) -> StateLabel:
        """
        Build the raw label of a state, before text fitting.

        Raises:
            DegenerateRegionError: If the state has no pole or fewer than two
                rays left the pole
        """
        if state.pole is None:
            raise DegenerateRegionError(f"State {state.id} has no pole")

        rays = self.cast_state_rays(state)
        usable = [ray for ray in rays if ray.length > 0]
        if len(usable) < 2:
            raise DegenerateRegionError(
                f"State {state.id} has {len(usable)} usable rays, at least 2 required"
            )

        ray1, ray2 = find_best_ray_pair(rays)
        path = build_label_path(ray1, ray2, state.pole)

        return StateLabel(
            id=state_label_id(state.id),
            name=state.name,
            state_id=state.id,
            points=path,
            start_offset=self.options.start_offset,
            letter_spacing=self.options.letter_spacing,
        )

    def generate_labels_data(
        self,
        state_ids: Optional[Iterable[int]] = None,
        report: Optional[GenerationReport] = None,
    ) -> List[StateLabel]:
        """
        Generate raw label data for states.

        Args:
            state_ids: Optional list of specific state ids to generate labels for
            report: Optional report collecting degenerate states

        Returns:
            Raw state labels ordered by state id
        """
        report = report if report is not None else GenerationReport()
        labels = []

        for state in self.target_states(state_ids):
            try:
                labels.append(self.build_state_label(state))
            except DegenerateRegionError as e:
                logger.warning("Skipping degenerate state label", state_id=state.id, reason=str(e))
                report.degenerate.append(state.id)

        return labels

    def refine_label(self, label: StateLabel, letter_length: float) -> Tuple[StateLabel, bool]:
        """
        Fit the state name onto the label path.

        Args:
            label: Raw state label
            letter_length: Estimated width of one glyph

        Returns:
            Tuple of (refined label, whether the single line fallback was used)
        """
        state = self.context.states[label.state_id]
        mode = self.options.mode
        name, full_name = state.name, state.display_full_name

        length = path_length(label.points) / letter_length
        lines, ratio = get_lines_and_ratio(mode, name, full_name, length)

        # prolongate path if it's too short
        longest_line_length = max(len(line) for line in lines)
        points = prolongate_path(label.points, length, longest_line_length)

        final_name = "|".join(lines)
        final_ratio = ratio
        used_fallback = False

        if mode != "full" and len(lines) > 1:
            (x1, y1), (x2, y2) = points[0], points[-1]
            angle_rad = math.atan2(y2 - y1, x2 - x1)
            width, height = self.measurer.text_bbox(lines, ratio)

            fits = check_label_fits_state(
                self.context,
                label.state_id,
                point_at_half_length(points),
                angle_rad,
                width / 2,
                height / 2,
            )
            if not fits:
                final_name, final_ratio = get_fallback_line_and_ratio(name, full_name, length)
                used_fallback = True

        refined = label.model_copy(
            update={"name": final_name, "font_size": final_ratio, "points": tuple(points)}
        )
        return refined, used_fallback

    def generate(
        self,
        state_ids: Optional[Iterable[int]] = None,
        report: Optional[GenerationReport] = None,
    ) -> List[StateLabel]:
        """Generate and refine labels; see regenerate() for the report fields."""
        report = report if report is not None else GenerationReport()
        raw_labels = self.generate_labels_data(state_ids, report)

        try:
            letter_length = estimate_letter_length(self.measurer)
        except MeasurementUnavailableError as e:
            logger.warning("Text measurement unavailable", error=str(e))
            report.unmeasured.extend(label.state_id for label in raw_labels)
            return []

        labels = []
        for label in raw_labels:
            try:
                refined, used_fallback = self.refine_label(label, letter_length)
            except MeasurementUnavailableError as e:
                logger.warning("Cannot measure state label", state_id=label.state_id, error=str(e))
                report.unmeasured.append(label.state_id)
                continue

            if used_fallback:
                report.fallbacks.append(label.state_id)
            report.generated.append(label.state_id)
            labels.append(refined)

        return labels

    def regenerate(
        self, store: LabelStore, state_ids: Optional[Iterable[int]] = None
    ) -> GenerationReport:
        """
        Regenerate state labels in a store.

        Labels of the processed states are removed and the new labels are
        inserted as a single batch; labels of other states are untouched.
        Labels of removed or deleted states within the pass are dropped.
        States whose text could not be measured keep their previous label
        and are listed in report.unmeasured so the caller can retry them.

        Args:
            store: Label store to update
            state_ids: Optional list of state ids, all states when omitted

        Returns:
            GenerationReport for the pass
        """
        state_ids = None if state_ids is None else list(state_ids)
        logger.info(
            "Generating state labels",
            requested="all" if state_ids is None else len(state_ids),
        )

        report = GenerationReport()
        labels = self.generate(state_ids, report)

        processed = {state.id for state in self.target_states(state_ids)}
        stale = processed - set(report.unmeasured)
        requested = None if state_ids is None else set(state_ids)

        def is_stale(label: Label) -> bool:
            if not is_state_label(label, requested):
                return False
            # labels of removed or deleted states are dropped as well
            return label.state_id in stale or not self.has_live_state(label.state_id)

        report.removed = store.replace(is_stale, labels)

        logger.info(
            "Generated state labels",
            generated=len(report.generated),
            degenerate=len(report.degenerate),
            unmeasured=len(report.unmeasured),
            fallbacks=len(report.fallbacks),
        )
        return report
