"""
Import of a data directory written by the earlier JSON-file service.

That service kept one ``<key>.json`` file per document (``items.json``,
``sales-2024-05.json``, ``reports/daily/2024-05-20.json``, ...). Each file is
upgraded from schema version 1 and written to the document store. Purchase
sequences are seeded from the imported daily reports so new sales on those
days continue the numbering instead of reusing ids. A counter is only ever
raised, and existing reports are kept even with ``replace``.
"""
import json
import logging
from pathlib import Path
from typing import Dict, List

from kasir.core.business_day import day_key, parse_day
from kasir.core.config import get_settings
from kasir.services.document_store import API_KEYS, ITEMS, LOGS, STORE_PROFILE, DocumentStore
from kasir.services.document_upgrades import document_kind, upgrade_document
from kasir.services.sequence import issued_count, sequence_key

logger = logging.getLogger(__name__)

LEGACY_SCHEMA_VERSION = 1
IMPORTABLE_KINDS = {ITEMS, LOGS, STORE_PROFILE, API_KEYS, "sales", "daily_report", "monthly_report"}
# Never replaced once stored; rebuild them from the sales bucket instead
REPORT_KINDS = {"daily_report", "monthly_report"}


class ImportResult:
    """Result of a legacy import."""
    def __init__(self):
        self.imported: List[str] = []
        self.skipped: List[str] = []
        self.errors: List[Dict] = []

    def to_dict(self) -> Dict:
        return {
            "imported": len(self.imported),
            "skipped": len(self.skipped),
            "errors": self.errors,
        }


def legacy_key(data_dir: Path, path: Path) -> str:
    """``<data_dir>/reports/daily/2024-05-20.json`` -> ``reports/daily/2024-05-20``."""
    return path.relative_to(data_dir).with_suffix("").as_posix()


def import_legacy_directory(store: DocumentStore, data_dir: Path, replace: bool = False) -> ImportResult:
    """
    Load every recognised document under ``data_dir``.

    Args:
        store: Target document store
        data_dir: Root of the legacy ``data`` directory
        replace: Overwrite documents that already exist (default: skip them)
    """
    result = ImportResult()
    retries = get_settings().COMMIT_RETRIES

    for path in sorted(data_dir.rglob("*.json")):
        key = legacy_key(data_dir, path)
        kind = document_kind(key)
        if kind not in IMPORTABLE_KINDS:
            logger.info(f"Skipping unrecognised file {path}")
            result.skipped.append(key)
            continue

        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            body = upgrade_document(key, LEGACY_SCHEMA_VERSION, raw)
            day = parse_day(key.rsplit("/", 1)[-1]) if kind == "daily_report" else None
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Could not import {path}: {e}")
            result.errors.append({"key": key, "error": str(e)})
            continue

        def _work(store: DocumentStore) -> bool:
            if day is not None and body["transactionCount"] > issued_count(store, day):
                store.write(sequence_key(day), {"date": day_key(day), "count": body["transactionCount"]})
            if store.exists(key) and (not replace or kind in REPORT_KINDS):
                return False
            store.write(key, body)
            return True

        if store.run(_work, retries=retries, label=f"import {key}"):
            result.imported.append(key)
        else:
            logger.info(f"Document '{key}' already exists; skipped")
            result.skipped.append(key)

    logger.info(
        f"Legacy import from {data_dir}: {len(result.imported)} imported, "
        f"{len(result.skipped)} skipped, {len(result.errors)} failed"
    )
    return result
