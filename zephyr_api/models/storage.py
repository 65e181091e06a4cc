"""
Key-value model backing the local persistent storage.

Each row holds one serialized document under a well-known key,
e.g. the complete request history as a JSON array.
"""

from datetime import datetime, timezone

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoredValue(Base):
    """
    SQLAlchemy model for a single key-value record.

    Attributes:
        key: Well-known storage key
        value: Serialized document, replaced wholesale on every write
        updated_at: Timestamp of the last write
    """
    __tablename__ = "kv_store"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text)
    updated_at: Mapped[datetime] = mapped_column(default=_utcnow, onupdate=_utcnow)
