"""
Database persistence for labels.

This package provides:
- SQLAlchemy model for stored labels
- Database connection management
- SqlLabelStore, a label store backed by the database
"""

from .connection import Database, db
from .models import Base, LabelRecord
from .store import SqlLabelStore

__all__ = [
    # Connection management
    'Database', 'db',

    # Models
    'Base', 'LabelRecord',

    # Store
    'SqlLabelStore',
]
