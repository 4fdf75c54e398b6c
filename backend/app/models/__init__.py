"""ORM Models — SQLAlchemy declarative models for persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - ClientTool is the only aggregate; rows are keyed by tool name

Design Decisions:
    - One file per entity for locality (ADR: ExMA max 3-4 files to understand a feature)
    - All models imported here so Base.metadata is complete before create_all / autogenerate
"""

from app.models.client_tool import ClientTool  # noqa: F401
