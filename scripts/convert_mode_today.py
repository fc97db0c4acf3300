"""Convert every attendance record of a day from one mode to another.

Typical use: the office was closed and everyone who clocked in as OFFICE
should be counted as WFH (lunch deduction is given back on closed records).

    python scripts/convert_mode_today.py --admin admin --from OFFICE --to WFH
"""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.timekeeper.timekeeper.common.datetime_utils import now_local
from src.timekeeper.timekeeper.common.logging_utils import configure_logging
from src.timekeeper.timekeeper.container import build_container


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--admin", required=True, help="username of the admin recorded as editor")
    parser.add_argument("--date", default=None, help="YYYY-MM-DD, defaults to today")
    parser.add_argument("--from", dest="from_mode", default="OFFICE")
    parser.add_argument("--to", dest="to_mode", default="WFH")
    args = parser.parse_args(argv)

    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    container = build_container(settings)

    admin = container.users_repo.get_by_username(args.admin)
    if admin is None:
        print(f"ERROR: no user named {args.admin!r}")
        return 1

    work_date = args.date or now_local().date()
    try:
        result = container.admin_service.convert_day(work_date, args.from_mode, args.to_mode, admin.user_id)
    finally:
        container.dispatcher.shutdown()

    print(f"Converted {result.success_count} record(s) {args.from_mode} -> {args.to_mode} on {work_date}")
    for err in result.errors:
        print(f"  failed: attendance {err.attendance_id} (user {err.user_id}): {err.error}")
    return 0 if not result.errors else 2


if __name__ == "__main__":
    sys.exit(main())
