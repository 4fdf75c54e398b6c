"""ClientTool ORM — one row per saved client-side tool, keyed by name.

Invariants:
    - name is the primary key (tool names are unique within the collection)
    - document holds the stored form (canonical schema + executionSpecs) as-is
    - document["name"] always equals the name column

Design Decisions:
    - JSON column for the document: it is only ever read and written whole (ADR: simplicity)
    - description denormalized out of the document for listing without decoding JSON
"""

from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ClientTool(Base):
    """A saved function tool definition."""
    __tablename__ = "client_tools"

    name: Mapped[str] = mapped_column(String(255), primary_key=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    document: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow,
    )
