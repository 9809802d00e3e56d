"""
Append-only audit log of mutating actions.
"""
import logging
from typing import List, Optional

from kasir.core.business_day import store_now
from kasir.core.config import Settings, get_settings
from kasir.core.errors import PosError
from kasir.schemas.store import LogEntry
from kasir.services.document_store import LOGS, DocumentStore

logger = logging.getLogger(__name__)


class ActionLog:
    """
    Audit trail stored in the ``logs`` document.

    Appends run in their own unit of work after the action they describe has
    committed. A failed append is reported to the application log and never
    reaches the caller or undoes the action.
    """

    def __init__(self, store: DocumentStore, settings: Optional[Settings] = None):
        self.store = store
        self.settings = settings or get_settings()

    def append(self, user: str, action: str) -> None:
        entry = LogEntry(
            timestamp=store_now(self.settings.TIMEZONE),
            user=user,
            action=action,
        ).to_document()

        def _append(store: DocumentStore) -> None:
            logs = store.read(LOGS, [])
            logs.append(entry)
            store.write(LOGS, logs)

        try:
            self.store.run(_append, retries=self.settings.COMMIT_RETRIES, label="log append")
        except PosError as e:
            logger.warning(f"Dropped audit log entry '{action}' by {user}: {e.message}")

    def entries(self, user: Optional[str] = None, limit: Optional[int] = None) -> List[LogEntry]:
        """Entries in append order, optionally filtered by user and capped to the newest ``limit``."""
        entries = [LogEntry.model_validate(raw) for raw in self.store.read(LOGS, [])]
        if user:
            entries = [e for e in entries if e.user == user]
        if limit is not None:
            entries = entries[-limit:] if limit > 0 else []
        return entries
