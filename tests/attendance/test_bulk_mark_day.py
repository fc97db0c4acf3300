from __future__ import annotations

from datetime import date, datetime

import pytest

from src.timekeeper.timekeeper.core.enums import AttendanceMode, AttendanceStatus
from src.timekeeper.timekeeper.core.exceptions import AuthorizationError, ValidationError

ADMIN_ID, MANAGER_ID, EMPLOYEE_ID, OTHER_EMPLOYEE_ID, INACTIVE_ID = 1, 2, 10, 11, 12
DAY = date(2025, 3, 3)
NOW = datetime(2025, 3, 5, 9, 0)


def test_bulk_office_day_for_every_active_employee(admin_service, attendance):
    result = admin_service.bulk_mark_day(DAY, "OFFICE", ADMIN_ID, now=NOW)

    assert result.success_count == 2
    assert result.error_count == 0
    assert attendance.get_for_user_and_date(INACTIVE_ID, DAY) is None

    record = attendance.get_for_user_and_date(EMPLOYEE_ID, DAY)
    assert record.login_time == datetime(2025, 3, 3, 10, 0)
    assert record.logout_time == datetime(2025, 3, 3, 19, 0)
    assert record.status == AttendanceStatus.PRESENT
    assert record.total_hours == pytest.approx(8.5)
    assert record.early_sign_in_minutes == 0
    assert record.late_logout_minutes == 0
    assert record.edited_by == ADMIN_ID
    assert record.edited_at == NOW


def test_bulk_wfh_day_has_no_office_fields(admin_service, attendance):
    admin_service.bulk_mark_day("2025-03-03", "WFH", ADMIN_ID, now=NOW)

    record = attendance.get_for_user_and_date(OTHER_EMPLOYEE_ID, DAY)
    assert record.mode == AttendanceMode.WFH
    assert record.status == AttendanceStatus.PRESENT
    assert record.total_hours is None
    assert record.early_sign_in_minutes is None
    assert record.late_logout_minutes is None
    assert record.wfh_activity_pings == 0


def test_bulk_mark_overwrites_existing_record(service, admin_service, attendance):
    late = service.clock_in(EMPLOYEE_ID, "OFFICE", now=datetime(2025, 3, 3, 10, 40))

    admin_service.bulk_mark_day(DAY, "LEAVE", ADMIN_ID, now=NOW)

    record = attendance.get_for_user_and_date(EMPLOYEE_ID, DAY)
    assert record.attendance_id == late.attendance_id
    assert record.mode == AttendanceMode.LEAVE
    assert record.status == AttendanceStatus.PRESENT
    assert record.late_sign_in_minutes is None
    assert len([r for r in attendance.all() if r.user_id == EMPLOYEE_ID]) == 1


def test_one_failing_employee_does_not_stop_the_batch(admin_service, attendance):
    attendance.fail_upsert_for = {OTHER_EMPLOYEE_ID}

    result = admin_service.bulk_mark_day(DAY, "OFFICE", ADMIN_ID, now=NOW)

    assert result.success_count == 1
    assert [e.user_id for e in result.errors] == [OTHER_EMPLOYEE_ID]
    assert "database unavailable" in result.errors[0].error
    assert attendance.get_for_user_and_date(EMPLOYEE_ID, DAY) is not None
    assert result.to_dict()["error_count"] == 1


def test_bulk_mark_preconditions(admin_service, attendance):
    with pytest.raises(AuthorizationError):
        admin_service.bulk_mark_day(DAY, "OFFICE", MANAGER_ID, now=NOW)
    with pytest.raises(ValidationError):
        admin_service.bulk_mark_day("03/03/2025", "OFFICE", ADMIN_ID, now=NOW)
    with pytest.raises(ValidationError):
        admin_service.bulk_mark_day(DAY, None, ADMIN_ID, now=NOW)

    assert attendance.all() == []
