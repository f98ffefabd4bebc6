"""
Label store backed by the database.

SqlLabelStore offers the same operations as the in-memory LabelStore for
the labels of one map. Every call runs in its own session, so a
replace() batch is committed as a single transaction and rolled back as a
whole on failure.
"""

from typing import Iterable, List, Optional

import structlog

from sqlalchemy.orm import Session

from ..core.labels import Label, LabelAdapter, LabelPredicate, StateLabel
from .connection import Database
from .models import LabelRecord

logger = structlog.get_logger()


def _to_record(map_id: str, label: Label) -> LabelRecord:
    return LabelRecord(
        map_id=map_id,
        label_id=label.id,
        type=label.type,
        state_id=label.state_id if isinstance(label, StateLabel) else None,
        data=label.model_dump_json(),
    )


def _to_label(record: LabelRecord) -> Label:
    return LabelAdapter.validate_json(record.data)


class SqlLabelStore:
    """Labels of one map persisted in the labels table."""

    def __init__(self, database: Database, map_id: str):
        self.database = database
        self.map_id = map_id

    def _records(self, session: Session):
        return (
            session.query(LabelRecord)
            .filter(LabelRecord.map_id == self.map_id)
            .order_by(LabelRecord.pk)
        )

    def __len__(self) -> int:
        with self.database.get_session() as session:
            return self._records(session).count()

    def __contains__(self, label_id: str) -> bool:
        return self.get(label_id) is not None

    def all(self) -> List[Label]:
        with self.database.get_session() as session:
            return [_to_label(record) for record in self._records(session)]

    def get(self, label_id: str) -> Optional[Label]:
        with self.database.get_session() as session:
            record = self._records(session).filter(LabelRecord.label_id == label_id).first()
            return _to_label(record) if record else None

    def get_by_type(self, label_type: str) -> List[Label]:
        with self.database.get_session() as session:
            records = self._records(session).filter(LabelRecord.type == label_type)
            return [_to_label(record) for record in records]

    def list_by_region(self, state_id: int) -> List[StateLabel]:
        with self.database.get_session() as session:
            records = self._records(session).filter(
                LabelRecord.type == "state", LabelRecord.state_id == state_id
            )
            return [_to_label(record) for record in records]

    def get_state_label(self, state_id: int) -> Optional[StateLabel]:
        labels = self.list_by_region(state_id)
        return labels[0] if labels else None

    def insert(self, label: Label) -> Label:
        with self.database.get_session() as session:
            if self._records(session).filter(LabelRecord.label_id == label.id).first():
                raise ValueError(f"Label {label.id} already exists")
            session.add(_to_record(self.map_id, label))
        return label

    def remove(self, label_id: str) -> bool:
        with self.database.get_session() as session:
            deleted = (
                session.query(LabelRecord)
                .filter(LabelRecord.map_id == self.map_id, LabelRecord.label_id == label_id)
                .delete()
            )
        return deleted > 0

    def remove_where(self, predicate: LabelPredicate) -> int:
        return self.replace(predicate, [])

    def remove_by_type(self, label_type: str) -> int:
        with self.database.get_session() as session:
            return (
                session.query(LabelRecord)
                .filter(LabelRecord.map_id == self.map_id, LabelRecord.type == label_type)
                .delete()
            )

    def replace(self, predicate: LabelPredicate, labels: Iterable[Label]) -> int:
        """
        Remove labels matching predicate and insert labels in one transaction.

        Returns:
            Number of removed labels
        """
        labels = list(labels)
        with self.database.get_session() as session:
            removed = 0
            kept_ids = set()
            for record in self._records(session):
                if predicate(_to_label(record)):
                    session.delete(record)
                    removed += 1
                else:
                    kept_ids.add(record.label_id)

            new_ids = set()
            for label in labels:
                if label.id in kept_ids or label.id in new_ids:
                    raise ValueError(f"Label {label.id} already exists")
                new_ids.add(label.id)

            # deletes must reach the database before re-inserting the same ids
            session.flush()
            session.add_all(_to_record(self.map_id, label) for label in labels)

        logger.debug("Replaced stored labels", map_id=self.map_id, removed=removed, inserted=len(labels))
        return removed

    def clear(self) -> None:
        with self.database.get_session() as session:
            session.query(LabelRecord).filter(LabelRecord.map_id == self.map_id).delete()
