"""
SQLAlchemy ORM models for SyllabusWatch.

A single key-value table backs the snapshot store: the change detector
keeps its ``{course_id: snapshot}`` map as one JSON value.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Base Class
# =============================================================================


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    type_annotation_map = {
        dict[str, Any]: JSON,
    }


# =============================================================================
# Key-Value Entry
# =============================================================================


class KeyValueEntry(Base):
    """One JSON value stored under a unique key."""

    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(String(200), primary_key=True)
    value: Mapped[Any] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=_utc_now,
        nullable=False,
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime,
        default=None,
        onupdate=_utc_now,
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<KeyValueEntry(key='{self.key}')>"
