"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Connection is the aggregate root; messages are scoped by connection_id

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from app.models.connection import Connection  # noqa: F401
from app.models.message import Message  # noqa: F401
