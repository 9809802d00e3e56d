"""
Administrative commands: create the database, add API keys, import legacy data.

Usage:
    kasir-admin init-db
    kasir-admin add-key <user> [--key KEY]
    kasir-admin import-legacy <data_dir> [--replace]
"""
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from kasir.core.config import get_settings
from kasir.db.session import SessionLocal, engine
from kasir.services.bootstrap import add_api_key, init_db, seed_defaults
from kasir.services.document_store import DocumentStore
from kasir.services.legacy_import import import_legacy_directory


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kasir-admin", description="Kasir administration")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("init-db", help="Create tables and seed the base documents")

    add_key = commands.add_parser("add-key", help="Register an API key for a user")
    add_key.add_argument("user")
    add_key.add_argument("--key", help="Use this key instead of generating one")

    legacy = commands.add_parser("import-legacy", help="Import a JSON data directory")
    legacy.add_argument("data_dir", type=Path)
    legacy.add_argument("--replace", action="store_true", help="Overwrite existing documents other than reports")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(levelname)s %(message)s")

    init_db(engine)
    db = SessionLocal()
    try:
        store = DocumentStore(db)
        seed_defaults(store, settings)

        if args.command == "init-db":
            print(f"Database ready at {settings.DATABASE_URL}")
        elif args.command == "add-key":
            key = add_api_key(store, args.user, args.key)
            print(f"API key for {args.user}: {key}")
        elif args.command == "import-legacy":
            if not args.data_dir.is_dir():
                print(f"{args.data_dir} is not a directory", file=sys.stderr)
                return 1
            result = import_legacy_directory(store, args.data_dir, replace=args.replace)
            print(json.dumps(result.to_dict(), indent=2))
            if result.errors:
                return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
