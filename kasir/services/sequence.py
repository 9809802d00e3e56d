"""
Day-scoped purchase id generator.

Purchase ids are ``DDMMYY`` followed by the day's sequence number padded to
three digits: the first sale on 20 May 2024 is ``200524001``. The counter
lives in its own ``sequences/<date>`` document and is incremented inside the
caller's unit of work, so the compare-and-swap on commit is what keeps two
concurrent sales from drawing the same number.
"""
import logging
from datetime import date
from typing import Any

from kasir.core.business_day import day_key, purchase_id_prefix
from kasir.services.document_store import DocumentStore

logger = logging.getLogger(__name__)


def sequence_key(day: date) -> str:
    return f"sequences/{day_key(day)}"


def format_purchase_id(day: date, sequence: int) -> str:
    return f"{purchase_id_prefix(day)}{sequence:03d}"


def _issued_count(key: str, raw: Any) -> int:
    """
    Number of ids already issued. A missing counter means none; an unreadable
    one is also treated as none so sales keep flowing (the id may then repeat
    one issued earlier that day).
    """
    if raw is None:
        return 0
    count = raw.get("count") if isinstance(raw, dict) else None
    if isinstance(count, int) and not isinstance(count, bool) and count >= 0:
        return count
    logger.warning(f"Sequence counter '{key}' is unreadable ({raw!r}); restarting at 1")
    return 0


def issued_count(store: DocumentStore, day: date) -> int:
    key = sequence_key(day)
    return _issued_count(key, store.read(key))


def next_purchase_id(store: DocumentStore, day: date) -> str:
    """Issue the next purchase id for ``day``. Must run inside a unit of work."""
    key = sequence_key(day)
    sequence = issued_count(store, day) + 1
    store.write(key, {"date": day_key(day), "count": sequence})
    return format_purchase_id(day, sequence)
