"""Snapshot model: immutable point-in-time copies of the document set."""

import enum
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from docdesk.database import Base


class SnapshotKind(str, enum.Enum):
    SCHEDULED = "scheduled"
    MANUAL = "manual"


class Snapshot(Base):
    __tablename__ = "snapshots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    size: Mapped[str] = mapped_column(String(20), nullable=False)  # e.g. "12.40 KB"
    # Serialized {"templates": [...], "proposals": [...]}; never rewritten.
    data: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )
