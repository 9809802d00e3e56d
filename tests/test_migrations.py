"""
Tests that the Alembic migrations build a working schema.
"""
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect
from sqlalchemy.orm import Session

from kasir.db.session import build_engine
from kasir.services.document_store import DocumentStore

MIGRATIONS_DIR = Path(__file__).resolve().parent.parent / "migrations"


class TestMigrations:
    """Tests for alembic upgrade/downgrade."""

    def test_upgrade_head_creates_documents_table(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'migrated.db'}"
        config = Config()
        config.set_main_option("script_location", str(MIGRATIONS_DIR))
        config.set_main_option("sqlalchemy.url", url)

        command.upgrade(config, "head")

        engine = build_engine(url)
        columns = {c["name"] for c in inspect(engine).get_columns("documents")}
        assert columns == {"key", "schema_version", "revision", "body", "created_at", "updated_at"}

        with Session(engine) as db:
            store = DocumentStore(db)
            store.run(lambda s: s.write("items", [{"id": "PEN001"}]))
            assert DocumentStore(db).read("items") == [{"id": "PEN001"}]

        command.downgrade(config, "base")
        assert "documents" not in inspect(engine).get_table_names()
        engine.dispose()
