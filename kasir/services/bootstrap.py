"""
Database creation and first-run seeding.
"""
import logging
from typing import Optional

from sqlalchemy.engine import Engine

from kasir.core.config import Settings, get_settings
from kasir.core.security import generate_api_key, hash_api_key
from kasir.db.base import Base
from kasir.schemas.store import ApiKeyEntry
from kasir.models import Document  # noqa: F401  (registers the table)
from kasir.services.document_store import API_KEYS, ITEMS, LOGS, STORE_PROFILE, DocumentStore

logger = logging.getLogger(__name__)

INITIAL_DOCUMENTS = {
    ITEMS: [],
    LOGS: [],
    STORE_PROFILE: {},
    API_KEYS: [],
}


def init_db(engine: Engine) -> None:
    """Create missing tables. Alembic migrations describe the same schema."""
    Base.metadata.create_all(bind=engine)


def seed_defaults(store: DocumentStore, settings: Optional[Settings] = None) -> None:
    """Create the base documents and the configured default key if absent."""
    settings = settings or get_settings()

    def _work(store: DocumentStore) -> int:
        for key, default in INITIAL_DOCUMENTS.items():
            if not store.exists(key):
                store.write(key, default)

        keys = store.read(API_KEYS, [])
        if not keys and settings.DEFAULT_API_KEY:
            entry = ApiKeyEntry(key_hash=hash_api_key(settings.DEFAULT_API_KEY), user=settings.DEFAULT_API_USER)
            keys.append(entry.to_document())
            store.write(API_KEYS, keys)
            logger.info(f"Seeded default API key for {settings.DEFAULT_API_USER}")
        return len(keys)

    key_count = store.run(_work, retries=settings.COMMIT_RETRIES, label="seed")
    if key_count == 0:
        logger.warning("No API keys configured; every request will be rejected. Create one with `kasir-admin add-key`.")


def add_api_key(store: DocumentStore, user: str, api_key: Optional[str] = None) -> str:
    """Register a key for ``user`` and return the raw key (only shown once)."""
    api_key = api_key or generate_api_key()

    def _work(store: DocumentStore) -> None:
        keys = store.read(API_KEYS, [])
        keys.append(ApiKeyEntry(key_hash=hash_api_key(api_key), user=user).to_document())
        store.write(API_KEYS, keys)

    store.run(_work, retries=get_settings().COMMIT_RETRIES, label="add key")
    return api_key
