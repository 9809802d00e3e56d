"""
Action log router.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from kasir.core.deps import get_current_user, get_store
from kasir.schemas.store import LogEntry
from kasir.services.action_log import ActionLog
from kasir.services.document_store import DocumentStore

router = APIRouter(prefix="/logs", tags=["logs"])


@router.get("", response_model=List[LogEntry])
def list_logs(
    user: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1, le=1000),
    store: DocumentStore = Depends(get_store),
    current_user: str = Depends(get_current_user),
):
    """Audit entries in the order they were appended (newest last)."""
    return ActionLog(store).entries(user=user, limit=limit)
