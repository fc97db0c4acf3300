from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Sequence, Tuple

from werkzeug.security import generate_password_hash

from .connection import DBConfig, DatabaseConnection

logger = logging.getLogger(__name__)

# (full_name, username, password, role)
DEMO_USERS: Sequence[Tuple[str, str, str, str]] = (
    ("Admin Demo", "admin", "admin123", "admin"),
    ("Manager Demo", "manager", "manager123", "manager"),
    ("Employee Demo", "employee", "employee123", "employee"),
)


def _strip_create_db_and_use(sql: str) -> str:
    # The target database comes from DB_CONFIG, not from the script.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a script on ';' outside quoted strings."""
    buf: list[str] = []
    quote = ""
    escape = False

    for ch in sql:
        buf.append(ch)
        if escape:
            escape = False
        elif ch == "\\":
            escape = True
        elif quote:
            if ch == quote:
                quote = ""
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = "".join(buf[:-1]).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config)).connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{db_config.get('database', 'timekeeper')}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))

    conn = DatabaseConnection(DBConfig.from_mapping(db_config)).connect()
    try:
        cur = conn.cursor()
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("Applied schema %s", schema_path)


def ensure_demo_users(db_config: dict) -> None:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config)).connect()
    try:
        cur = conn.cursor()
        for full_name, username, password, role in DEMO_USERS:
            cur.execute(
                """
                INSERT INTO users (full_name, username, password_hash, role, is_active)
                VALUES (%s, %s, %s, %s, 1)
                ON DUPLICATE KEY UPDATE full_name=VALUES(full_name), password_hash=VALUES(password_hash),
                    role=VALUES(role), is_active=1
                """,
                (full_name, username, generate_password_hash(password), role),
            )
        conn.commit()
    finally:
        conn.close()
    logger.info("Demo users ready (%s)", ", ".join(u[1] for u in DEMO_USERS))


def list_tables(db_config: dict) -> list[str]:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config)).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()


REQUIRED_TABLES = ("users", "attendance_records", "activity_logs")
ATTENDANCE_DAY_KEY = "uq_attendance_user_day"


def schema_problems(tables: Iterable[str], attendance_keys: Iterable[str]) -> list[str]:
    """What keeps the engine from running on this schema; empty when ready."""
    present = set(tables)
    problems = [f"missing table {name}" for name in REQUIRED_TABLES if name not in present]
    if "attendance_records" in present and ATTENDANCE_DAY_KEY not in set(attendance_keys):
        problems.append(f"attendance_records lacks unique key {ATTENDANCE_DAY_KEY} (user_id, work_date)")
    return problems


def list_unique_keys(db_config: dict, table: str) -> list[str]:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config)).connect()
    try:
        cur = conn.cursor(dictionary=True)
        cur.execute(f"SHOW INDEX FROM `{table}` WHERE Non_unique = 0")
        return sorted({row["Key_name"] for row in cur.fetchall()})
    finally:
        conn.close()
