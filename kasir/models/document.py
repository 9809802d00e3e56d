"""
Document model: one row per logical JSON document.
"""
from sqlalchemy import JSON, Column, DateTime, Integer, String, func

from kasir.db.base import Base


class Document(Base):
    """
    A key-addressed JSON document (items, logs, sales-2024-05, ...).

    ``revision`` is bumped on every write and is what compare-and-swap
    updates check against. ``schema_version`` tags the shape of ``body``.
    """
    __tablename__ = "documents"

    key = Column(String(200), primary_key=True)
    schema_version = Column(Integer, nullable=False, default=1)
    revision = Column(Integer, nullable=False, default=1)
    body = Column(JSON, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
