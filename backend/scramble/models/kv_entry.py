"""KeyValueEntry ORM: one serialized blob per key (the puzzle cache snapshot lives here).

Invariants:
    - key is the primary key; writes are upserts
    - value is opaque text; callers own its format

Design Decisions:
    - Text column over JSON: the store must hand back exactly what was written, including
      blobs a newer/older engine version cannot parse (corruption is detected by the reader)
"""

from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from scramble.db.base import Base


class KeyValueEntry(Base):
    """Persisted blob keyed by name."""
    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(String(200), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
