"""
Key-addressed JSON document store with optimistic concurrency.

Every logical document (``items``, ``logs``, ``sales-2024-05``, ...) is one
row of the ``documents`` table. A store instance wraps one database session
and acts as a unit of work:

- ``read`` remembers the revision of every document it returns.
- ``write`` is a compare-and-swap against that revision and raises
  ``WriteConflict`` if another unit committed the document in between.
- ``commit`` makes every write of the unit durable at once.

``run`` drives a unit of work end to end, retrying it from scratch on
conflict, so read-modify-write cycles never lose an update.
"""
import copy
import logging
from typing import Any, Callable, Dict, List, Optional, TypeVar

from sqlalchemy import insert, select, update, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from kasir.core.errors import PosError, StorageError
from kasir.models.document import Document
from kasir.services.document_upgrades import CURRENT_SCHEMA_VERSION, upgrade_document

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Well-known document keys
ITEMS = "items"
LOGS = "logs"
STORE_PROFILE = "store"
API_KEYS = "api-keys"

# Revision recorded for a key that did not exist when it was read
ABSENT = 0


class WriteConflict(Exception):
    """Another unit of work changed a document after this one read it."""

    def __init__(self, key: str):
        super().__init__(f"Document '{key}' was modified concurrently")
        self.key = key


class DocumentStore:
    """Unit of work over the documents table."""

    def __init__(self, db: Session):
        self.db = db
        self._seen: Dict[str, int] = {}
        self._written: Dict[str, Any] = {}

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def read(self, key: str, default: Any = None) -> Any:
        """
        Return the document stored under ``key``, upgraded to the current
        schema, or a copy of ``default`` if it does not exist.
        """
        if key in self._written:
            return copy.deepcopy(self._written[key])

        row = self.db.execute(
            select(Document.body, Document.revision, Document.schema_version)
            .where(Document.key == key)
        ).first()

        if row is None:
            self._seen.setdefault(key, ABSENT)
            return copy.deepcopy(default)

        self._seen.setdefault(key, row.revision)
        try:
            return upgrade_document(key, row.schema_version, row.body)
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Document '{key}' could not be upgraded: {e}")
            raise StorageError(f"Document '{key}' is unreadable", {"key": key}) from e

    def exists(self, key: str) -> bool:
        if key in self._written:
            return True
        return self.db.execute(
            select(Document.key).where(Document.key == key)
        ).first() is not None

    def list_keys(self, prefix: str) -> List[str]:
        """Keys starting with ``prefix``, in ascending order."""
        rows = self.db.execute(
            select(Document.key)
            .where(Document.key.startswith(prefix, autoescape=True))
            .order_by(Document.key)
        ).scalars().all()
        return list(rows)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def write(self, key: str, value: Any) -> None:
        """
        Stage ``value`` under ``key`` inside the current transaction.

        If the key was read in this unit, the write only succeeds when the
        stored revision is still the one that was read. A key written without
        being read first is checked against its revision as of now.
        """
        expected = self._seen.get(key)
        if expected is None:
            current = self.db.execute(
                select(Document.revision).where(Document.key == key)
            ).scalar_one_or_none()
            expected = current if current is not None else ABSENT

        if expected == ABSENT:
            try:
                self.db.execute(
                    insert(Document).values(
                        key=key,
                        body=value,
                        revision=1,
                        schema_version=CURRENT_SCHEMA_VERSION,
                    )
                )
            except IntegrityError:
                raise WriteConflict(key)
        else:
            result = self.db.execute(
                update(Document)
                .where(Document.key == key, Document.revision == expected)
                .values(
                    body=value,
                    revision=expected + 1,
                    schema_version=CURRENT_SCHEMA_VERSION,
                    updated_at=func.now(),
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise WriteConflict(key)

        self._seen[key] = expected + 1
        self._written[key] = copy.deepcopy(value)

    # ------------------------------------------------------------------
    # Unit of work
    # ------------------------------------------------------------------

    def commit(self) -> None:
        try:
            self.db.commit()
        finally:
            self._reset()

    def rollback(self) -> None:
        try:
            self.db.rollback()
        finally:
            self._reset()

    def _reset(self) -> None:
        self._seen.clear()
        self._written.clear()

    def run(self, work: Callable[["DocumentStore"], T], retries: int = 1, label: str = "unit") -> T:
        """
        Execute ``work(self)`` and commit it as one unit.

        On ``WriteConflict`` the unit is rolled back and ``work`` runs again
        against fresh reads, up to ``retries`` attempts. Core errors roll back
        and propagate unchanged; database errors roll back and surface as
        ``StorageError``.
        """
        self._reset()
        last_conflict: Optional[WriteConflict] = None

        for attempt in range(1, retries + 1):
            try:
                result = work(self)
                self.commit()
                return result
            except WriteConflict as e:
                self.rollback()
                last_conflict = e
                logger.warning(f"{label}: write conflict on '{e.key}' (attempt {attempt}/{retries})")
            except PosError:
                self.rollback()
                raise
            except SQLAlchemyError as e:
                self.rollback()
                logger.error(f"{label}: document store failure: {e}", exc_info=True)
                raise StorageError(f"Document store failure during {label}") from e
            except Exception:
                self.rollback()
                raise

        raise StorageError(
            f"Could not complete {label}: documents kept changing concurrently",
            {"key": last_conflict.key if last_conflict else None, "attempts": retries},
        )
