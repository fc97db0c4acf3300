from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.timekeeper.timekeeper.database.bootstrap import apply_schema, list_tables, list_unique_keys, schema_problems


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create or upgrade the timekeeper tables.")
    parser.add_argument("--check-only", action="store_true", help="only verify tables and the per-day unique key")
    args = parser.parse_args(argv)

    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)
    target = f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"

    if not args.check_only:
        apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")

    tables = list_tables(db_config)
    keys = list_unique_keys(db_config, "attendance_records") if "attendance_records" in tables else []
    problems = schema_problems(tables, keys)
    if problems:
        for problem in problems:
            print(f"FAIL: {target}: {problem}", file=sys.stderr)
        return 1

    print(f"OK: {target} (tables={', '.join(tables)}; one attendance record per user and day)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
