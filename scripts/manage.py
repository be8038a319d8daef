"""Database and bulk-import helpers.

    python scripts/manage.py init-db
    python scripts/manage.py seed-db
    python scripts/manage.py import-students --school-id 1 students.csv
    python scripts/manage.py import-excuses --school-id 1 excuses.csv
"""

from __future__ import annotations

import argparse
import importlib
import json
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.eduko.eduko.container import build_container
from src.eduko.eduko.database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables

DATABASE_DIR = REPO_ROOT / "database"


def _describe(db_config: dict) -> str:
    return f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"


def cmd_init_db(settings, args) -> int:
    db_config = dict(settings.DB_CONFIG)
    apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
    print(f"OK: Applied schema.sql -> {_describe(db_config)} (tables={len(list_tables(db_config))})")
    return 0


def cmd_seed_db(settings, args) -> int:
    db_config = dict(settings.DB_CONFIG)
    apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
    ensure_demo_users(db_config)
    print(f"OK: Seeded database -> {_describe(db_config)}")
    return 0


def _run_import(settings, args, attr: str) -> int:
    container = build_container(db_config=settings.DB_CONFIG, upload_dir=settings.UPLOAD_DIR)
    service = getattr(container, attr)
    with open(args.csv_file, "rb") as fh:
        report = service.import_csv(school_id=args.school_id, source=fh)
    print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    return 0 if not report.errors else 1


def cmd_import_students(settings, args) -> int:
    return _run_import(settings, args, "student_import_service")


def cmd_import_excuses(settings, args) -> int:
    return _run_import(settings, args, "excuse_service")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="manage")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="apply database/schema.sql").set_defaults(func=cmd_init_db)
    sub.add_parser("seed-db", help="apply database/seed.sql and demo accounts").set_defaults(func=cmd_seed_db)

    for name, func, help_text in (
        ("import-students", cmd_import_students, "bulk-create students from a ';' separated file"),
        ("import-excuses", cmd_import_excuses, "bulk-create excuses from a ';' separated file"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("--school-id", type=int, required=True)
        p.add_argument("csv_file")
        p.set_defaults(func=func)

    return parser


def main(argv=None) -> int:
    load_dotenv(override=False)
    args = build_parser().parse_args(argv)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(logging, str(getattr(settings, "LOG_LEVEL", "INFO")).upper(), logging.INFO))
    return args.func(settings, args)


if __name__ == "__main__":
    sys.exit(main())
