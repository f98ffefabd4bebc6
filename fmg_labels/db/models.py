"""Database models for label storage."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class LabelRecord(Base):
    """Label of a map, stored as its JSON document."""

    __tablename__ = "labels"
    __table_args__ = (UniqueConstraint("map_id", "label_id", name="uq_labels_map_label"),)

    pk = Column(Integer, primary_key=True, autoincrement=True)  # insertion order
    map_id = Column(String(64), nullable=False, index=True)
    label_id = Column(String(255), nullable=False)
    type = Column(String(16), nullable=False)  # state, burg, custom
    state_id = Column(Integer, nullable=True, index=True)  # state labels only

    data = Column(Text, nullable=False)  # label JSON
    created_at = Column(DateTime, default=datetime.utcnow)
