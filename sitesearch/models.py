"""
================================================================================
SiteSearch - Database Models
================================================================================
SQLAlchemy ORM models.

TABLES:
  - kv_store: String-keyed durable store backing the persistent search cache
    (search results, search history, search preferences). Values are the
    JSON envelopes written by PersistentCache; rows are addressed by prefix.
================================================================================
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Longest key the kv_store column holds; longer keys are hashed by DatabaseBackend
KEY_MAX_LENGTH = 255


class KeyValueEntry(Base):
    """One durable key/value pair."""
    __tablename__ = 'kv_store'

    key = Column(String(KEY_MAX_LENGTH), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __repr__(self):
        return f"<KeyValueEntry(key='{self.key}')>"
