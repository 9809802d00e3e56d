"""
SQLAlchemy models for Kasir.
"""
from kasir.models.document import Document


__all__ = [
    "Document",
]
