"""
RecipeBox Backend — Record SQLAlchemy Model
=============================================

What:  ORM model for the `records` table used by the SQL storage variant.
Why:   Records are schemaless, so one table holds both collections: the
       collection name and `name` are real columns (filtered, sorted,
       indexed), every other field lives in the JSON `data` column.
Who:   Used by SqlStorage and by Alembic.

Table Design:
    - id: 32-char hex UUID, generated in Python so create() knows it upfront
    - collection: "recipes" or "categories"; every query filters on it
    - name: copied out of the payload for search and ordering
    - data: all remaining fields, merged on update
    - created_at: stable list order (offset pagination needs one)
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import JSON, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from recipebox.database import Base


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RecordRow(Base):
    """One recipe or category."""

    __tablename__ = "records"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    collection: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    data: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    __table_args__ = (
        Index("idx_records_collection_created_at", "collection", "created_at"),
        Index("idx_records_collection_name", "collection", "name"),
    )

    def to_record(self) -> Dict[str, Any]:
        """Public shape: data fields, `name`, and the row id as `id`."""
        record = dict(self.data or {})
        if self.name is not None:
            record["name"] = self.name
        record["id"] = self.id
        return record

    def __repr__(self) -> str:
        return f"<RecordRow(id={self.id}, collection={self.collection}, name={self.name!r})>"
