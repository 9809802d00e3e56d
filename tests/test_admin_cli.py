"""
Tests for the kasir-admin command.
"""
import json

from kasir.core.security import resolve_api_key
from kasir.db.session import SessionLocal
from kasir.scripts.admin import main
from kasir.services.document_store import API_KEYS, DocumentStore


def _stored_keys():
    db = SessionLocal()
    try:
        return DocumentStore(db).read(API_KEYS, [])
    finally:
        db.close()


class TestAdminCli:
    """Tests against the configured (temporary) database."""

    def test_init_db(self, capsys):
        assert main(["init-db"]) == 0

        assert "Database ready" in capsys.readouterr().out
        assert resolve_api_key("k1-test-key-for-the-suite", _stored_keys()) == "tester"

    def test_add_key_with_given_value(self, capsys):
        assert main(["add-key", "alice", "--key", "alice-cli-key"]) == 0

        assert "alice-cli-key" in capsys.readouterr().out
        assert resolve_api_key("alice-cli-key", _stored_keys()) == "alice"

    def test_add_generated_key(self, capsys):
        assert main(["add-key", "bob"]) == 0

        key = capsys.readouterr().out.strip().rsplit(" ", 1)[-1]
        assert resolve_api_key(key, _stored_keys()) == "bob"

    def test_import_legacy_missing_dir(self, tmp_path, capsys):
        assert main(["import-legacy", str(tmp_path / "missing")]) == 1

    def test_import_legacy(self, tmp_path, capsys):
        data = tmp_path / "data"
        (data / "reports" / "daily").mkdir(parents=True)
        (data / "reports" / "daily" / "1999-01-02.json").write_text(json.dumps({"transactions": []}))

        assert main(["import-legacy", str(data)]) == 0

        summary = json.loads(capsys.readouterr().out)
        assert summary["errors"] == []
        assert summary["imported"] + summary["skipped"] == 1
