from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence

from ..core.enums import AttendanceMode, AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import MUTABLE_FIELDS, AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = (
    "attendance_id, user_id, work_date, login_time, logout_time, mode, status, "
    "early_sign_in_minutes, late_sign_in_minutes, early_logout_minutes, late_logout_minutes, "
    "total_hours, lunch_start, lunch_end, last_activity_time, wfh_activity_pings, edited_by, edited_at"
)

_WRITE_ORDER = (
    "login_time",
    "logout_time",
    "mode",
    "status",
    "early_sign_in_minutes",
    "late_sign_in_minutes",
    "early_logout_minutes",
    "late_logout_minutes",
    "total_hours",
    "lunch_start",
    "lunch_end",
    "last_activity_time",
    "wfh_activity_pings",
    "edited_by",
    "edited_at",
)


def _db_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _opt_int(value: Any) -> Optional[int]:
    return int(value) if value is not None else None


def _row_to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        mode=AttendanceMode(r["mode"]),
        status=AttendanceStatus(r["status"]),
        login_time=r.get("login_time"),
        logout_time=r.get("logout_time"),
        early_sign_in_minutes=_opt_int(r.get("early_sign_in_minutes")),
        late_sign_in_minutes=_opt_int(r.get("late_sign_in_minutes")),
        early_logout_minutes=_opt_int(r.get("early_logout_minutes")),
        late_logout_minutes=_opt_int(r.get("late_logout_minutes")),
        total_hours=float(r["total_hours"]) if r.get("total_hours") is not None else None,
        lunch_start=r.get("lunch_start"),
        lunch_end=r.get("lunch_end"),
        last_activity_time=r.get("last_activity_time"),
        wfh_activity_pings=int(r.get("wfh_activity_pings") or 0),
        edited_by=_opt_int(r.get("edited_by")),
        edited_at=r.get("edited_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE user_id=%s AND work_date=%s",
                (int(user_id), work_date),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def upsert_for_user_and_date(self, record: AttendanceRecord) -> AttendanceRecord:
        columns = ", ".join(("user_id", "work_date") + _WRITE_ORDER)
        placeholders = ", ".join(["%s"] * (len(_WRITE_ORDER) + 2))
        updates = ", ".join(f"{c}=VALUES({c})" for c in _WRITE_ORDER)
        params = [int(record.user_id), record.work_date] + [_db_value(getattr(record, c)) for c in _WRITE_ORDER]

        with db_cursor(self._conn_factory) as (_, cur):
            # Relies on UNIQUE KEY uq_attendance_user_day (user_id, work_date).
            cur.execute(
                f"""
                INSERT INTO attendance_records({columns})
                VALUES({placeholders})
                ON DUPLICATE KEY UPDATE {updates}
                """,
                tuple(params),
            )
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE user_id=%s AND work_date=%s",
                (int(record.user_id), record.work_date),
            )
            return _row_to_record(fetchone(cur))

    def update_by_id(self, attendance_id: int, changes: Mapping[str, Any]) -> Optional[AttendanceRecord]:
        unknown = set(changes) - MUTABLE_FIELDS
        if unknown:
            raise KeyError(f"Not updatable: {sorted(unknown)}")

        with db_cursor(self._conn_factory) as (_, cur):
            if changes:
                names = [c for c in _WRITE_ORDER if c in changes]
                assignments = ", ".join(f"{c}=%s" for c in names)
                cur.execute(
                    f"UPDATE attendance_records SET {assignments} WHERE attendance_id=%s",
                    tuple(_db_value(changes[c]) for c in names) + (int(attendance_id),),
                )
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def list_for_date(self, work_date: date, *, mode: Optional[AttendanceMode] = None) -> Sequence[AttendanceRecord]:
        sql = f"SELECT {_COLUMNS} FROM attendance_records WHERE work_date=%s"
        params: list[object] = [work_date]
        if mode is not None:
            sql += " AND mode=%s"
            params.append(mode.value)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " ORDER BY user_id ASC", tuple(params))
            return [_row_to_record(r) for r in fetchall(cur)]

    def list_open_wfh(self, work_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE work_date=%s AND mode=%s AND login_time IS NOT NULL AND logout_time IS NULL
                ORDER BY user_id ASC
                """,
                (work_date, AttendanceMode.WFH.value),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def list_for_range(
        self,
        *,
        start_date: date,
        end_date: date,
        user_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["work_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]
        if user_id is not None:
            clauses.append("user_id=%s")
            params.append(int(user_id))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE {where} ORDER BY work_date DESC, user_id ASC",
                tuple(params),
            )
            return [_row_to_record(r) for r in fetchall(cur)]
