from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Optional, Protocol, Sequence

from ..core.enums import AttendanceMode
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Store of one attendance record per (user_id, work_date).

    Implementations must keep (user_id, work_date) unique and make
    ``upsert_for_user_and_date`` an atomic insert-or-update on that key.
    """

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def upsert_for_user_and_date(self, record: AttendanceRecord) -> AttendanceRecord:
        """Insert or overwrite the day's record; ``record.attendance_id`` is ignored."""

        raise NotImplementedError

    def update_by_id(self, attendance_id: int, changes: Mapping[str, Any]) -> Optional[AttendanceRecord]:
        """Apply ``changes`` and return the persisted record, or None if the id is unknown."""

        raise NotImplementedError

    def list_for_date(self, work_date: date, *, mode: Optional[AttendanceMode] = None) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_open_wfh(self, work_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_range(
        self,
        *,
        start_date: date,
        end_date: date,
        user_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
