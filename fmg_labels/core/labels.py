"""
Label data and the label store.

Labels are a tagged union with one variant per kind (state, burg, custom).
The store owns the labels of a map keyed by label id; its mutation surface
is insert, remove and the batched replace used by regeneration, so a
regeneration never exposes a half-updated set of labels.
"""

from typing import Annotated, Callable, Dict, Iterable, Iterator, List, Literal, Optional, Tuple, Union

import structlog

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

logger = structlog.get_logger()

Point = Tuple[float, float]


class StateLabel(BaseModel):
    """Curved label of a political state."""

    model_config = ConfigDict(frozen=True)

    type: Literal["state"] = "state"
    id: str = Field(description="Label identifier, stateLabel{state_id}")
    name: str = Field(description="Label text, lines joined with '|'")
    state_id: int = Field(description="State the label belongs to")
    points: Tuple[Point, ...] = Field(description="Label path points, left to right")
    start_offset: float = Field(default=50, description="Text start offset in %")
    font_size: float = Field(default=100, description="Font size ratio in %")
    letter_spacing: float = Field(default=0, description="Letter spacing in px")
    transform: str = Field(default="", description="SVG transform")

    @property
    def lines(self) -> List[str]:
        return self.name.split("|")


class BurgLabel(BaseModel):
    """Point label of a burg."""

    model_config = ConfigDict(frozen=True)

    type: Literal["burg"] = "burg"
    id: str
    name: str
    group: str = "town"
    burg_id: int
    x: float
    y: float
    dx: float = 0
    dy: float = 0


class CustomLabel(BaseModel):
    """Free text label along a user-defined path."""

    model_config = ConfigDict(frozen=True)

    type: Literal["custom"] = "custom"
    id: str
    name: str
    group: str = "addedLabels"
    points: Tuple[Point, ...] = ()
    start_offset: float = 50
    font_size: float = 100
    letter_spacing: float = 0
    transform: str = ""

    @property
    def lines(self) -> List[str]:
        return self.name.split("|")


Label = Annotated[Union[StateLabel, BurgLabel, CustomLabel], Field(discriminator="type")]
LabelAdapter = TypeAdapter(Label)

LabelPredicate = Callable[[Label], bool]


def state_label_id(state_id: int) -> str:
    return f"stateLabel{state_id}"


def is_state_label(label: Label, state_ids: Optional[Iterable[int]] = None) -> bool:
    """Match state labels, optionally only those of the given states."""
    if not isinstance(label, StateLabel):
        return False
    return state_ids is None or label.state_id in set(state_ids)


class LabelStore:
    """In-memory labels of one map, keyed by label id in insertion order."""

    def __init__(self, labels: Iterable[Label] = ()):
        self._labels: Dict[str, Label] = {}
        for label in labels:
            self.insert(label)

    def __len__(self) -> int:
        return len(self._labels)

    def __iter__(self) -> Iterator[Label]:
        return iter(list(self._labels.values()))

    def __contains__(self, label_id: str) -> bool:
        return label_id in self._labels

    def all(self) -> List[Label]:
        return list(self._labels.values())

    def get(self, label_id: str) -> Optional[Label]:
        return self._labels.get(label_id)

    def get_by_type(self, label_type: str) -> List[Label]:
        return [label for label in self._labels.values() if label.type == label_type]

    def list_by_region(self, state_id: int) -> List[StateLabel]:
        return [
            label
            for label in self._labels.values()
            if isinstance(label, StateLabel) and label.state_id == state_id
        ]

    def get_state_label(self, state_id: int) -> Optional[StateLabel]:
        labels = self.list_by_region(state_id)
        return labels[0] if labels else None

    def next_id(self, prefix: str = "label") -> str:
        """Lowest unused id of the form {prefix}{n}, n >= 1."""
        index = 1
        while f"{prefix}{index}" in self._labels:
            index += 1
        return f"{prefix}{index}"

    def insert(self, label: Label) -> Label:
        if label.id in self._labels:
            raise ValueError(f"Label {label.id} already exists")
        self._labels[label.id] = label
        return label

    def remove(self, label_id: str) -> bool:
        return self._labels.pop(label_id, None) is not None

    def remove_where(self, predicate: LabelPredicate) -> int:
        removed = [label_id for label_id, label in self._labels.items() if predicate(label)]
        for label_id in removed:
            del self._labels[label_id]
        return len(removed)

    def remove_by_type(self, label_type: str) -> int:
        return self.remove_where(lambda label: label.type == label_type)

    def replace(self, predicate: LabelPredicate, labels: Iterable[Label]) -> int:
        """
        Remove labels matching predicate, then insert labels, as one batch.

        The batch is validated before anything changes: on a duplicate id
        the store is left untouched.

        Returns:
            Number of removed labels
        """
        labels = list(labels)
        kept = {label_id: label for label_id, label in self._labels.items() if not predicate(label)}

        new_ids = set()
        for label in labels:
            if label.id in kept or label.id in new_ids:
                raise ValueError(f"Label {label.id} already exists")
            new_ids.add(label.id)

        removed = len(self._labels) - len(kept)
        kept.update((label.id, label) for label in labels)
        self._labels = kept

        logger.debug("Replaced labels", removed=removed, inserted=len(labels))
        return removed

    def clear(self) -> None:
        self._labels = {}
