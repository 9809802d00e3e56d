"""
FastAPI dependencies: document store handle, the API-key access gate and
date parameter parsing.
"""
from datetime import date
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from kasir.core.business_day import parse_day, parse_month
from kasir.core.errors import AuthError, ValidationError
from kasir.core.security import resolve_api_key
from kasir.db.session import get_db
from kasir.services.document_store import API_KEYS, DocumentStore


def get_store(db: Session = Depends(get_db)) -> DocumentStore:
    """A fresh unit-of-work handle per request."""
    return DocumentStore(db)


def get_current_user(
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
    store: DocumentStore = Depends(get_store),
) -> str:
    """
    Resolve the caller from the ``X-API-Key`` header.

    Missing key -> 401, unknown key -> 403, before any handler runs.
    """
    if not x_api_key:
        raise AuthError("API Key required", status_code=401)

    user = resolve_api_key(x_api_key, store.read(API_KEYS, []))
    if user is None:
        raise AuthError("Invalid API Key", status_code=403)
    return user


def parse_day_param(value: str) -> date:
    """YYYY-MM-DD path/query value, or a 400."""
    try:
        return parse_day(value)
    except ValueError:
        raise ValidationError(f"Invalid date '{value}', expected YYYY-MM-DD", {"date": value})


def parse_month_param(value: str) -> date:
    """YYYY-MM path/query value, or a 400."""
    try:
        return parse_month(value)
    except ValueError:
        raise ValidationError(f"Invalid month '{value}', expected YYYY-MM", {"month": value})
