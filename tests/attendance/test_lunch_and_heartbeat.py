from __future__ import annotations

from datetime import date, datetime

import pytest

from src.timekeeper.timekeeper.core.enums import AttendanceStatus
from src.timekeeper.timekeeper.core.exceptions import InvalidStateError, NotFoundError

EMPLOYEE_ID, OTHER_EMPLOYEE_ID = 10, 11
DAY = date(2025, 3, 3)


def t(hour: int, minute: int = 0) -> datetime:
    return datetime(2025, 3, 3, hour, minute)


def test_lunch_start_and_end_are_recorded(service):
    service.clock_in(EMPLOYEE_ID, "OFFICE", now=t(10, 0))

    started = service.start_lunch(EMPLOYEE_ID, now=t(13, 5))
    ended = service.end_lunch(EMPLOYEE_ID, now=t(13, 40))

    assert started.lunch_start == t(13, 5)
    assert ended.lunch_start == t(13, 5)
    assert ended.lunch_end == t(13, 40)
    assert ended.status == AttendanceStatus.PRESENT


def test_lunch_requires_open_session(service):
    with pytest.raises(InvalidStateError):
        service.start_lunch(EMPLOYEE_ID, now=t(13, 0))

    service.clock_in(EMPLOYEE_ID, "OFFICE", now=t(10, 0))
    service.clock_out(EMPLOYEE_ID, now=t(12, 0))

    with pytest.raises(InvalidStateError):
        service.start_lunch(EMPLOYEE_ID, now=t(13, 0))


def test_lunch_cannot_start_twice(service):
    service.clock_in(EMPLOYEE_ID, "OFFICE", now=t(10, 0))
    service.start_lunch(EMPLOYEE_ID, now=t(13, 0))

    with pytest.raises(InvalidStateError, match="already started"):
        service.start_lunch(EMPLOYEE_ID, now=t(13, 10))


def test_lunch_end_needs_a_start_and_happens_once(service):
    service.clock_in(EMPLOYEE_ID, "OFFICE", now=t(10, 0))

    with pytest.raises(InvalidStateError, match="not started"):
        service.end_lunch(EMPLOYEE_ID, now=t(13, 30))

    service.start_lunch(EMPLOYEE_ID, now=t(13, 0))
    service.end_lunch(EMPLOYEE_ID, now=t(13, 30))

    with pytest.raises(InvalidStateError, match="already ended"):
        service.end_lunch(EMPLOYEE_ID, now=t(13, 45))


def test_heartbeat_updates_activity_without_touching_status(service):
    service.clock_in(EMPLOYEE_ID, "WFH", now=t(9, 0))

    record = service.wfh_heartbeat(EMPLOYEE_ID, now=t(10, 0))
    record = service.wfh_heartbeat(EMPLOYEE_ID, now=t(11, 0))

    assert record.wfh_activity_pings == 3
    assert record.last_activity_time == t(11, 0)
    assert record.status == AttendanceStatus.PRESENT
    assert record.login_time == t(9, 0)


def test_heartbeat_without_record_is_not_found(service):
    with pytest.raises(NotFoundError):
        service.wfh_heartbeat(EMPLOYEE_ID, now=t(10, 0))


def test_heartbeat_rejected_for_office_or_closed_session(service):
    service.clock_in(EMPLOYEE_ID, "OFFICE", now=t(10, 0))
    with pytest.raises(InvalidStateError):
        service.wfh_heartbeat(EMPLOYEE_ID, now=t(11, 0))

    service.clock_in(OTHER_EMPLOYEE_ID, "WFH", now=t(9, 0))
    service.clock_out(OTHER_EMPLOYEE_ID, now=t(18, 0))
    with pytest.raises(InvalidStateError):
        service.wfh_heartbeat(OTHER_EMPLOYEE_ID, now=t(18, 30))


def test_today_record(service):
    assert service.get_today_record(EMPLOYEE_ID, now=t(9, 0)) is None

    created = service.clock_in(EMPLOYEE_ID, "OFFICE", now=t(10, 0))

    assert service.get_today_record(EMPLOYEE_ID, now=t(12, 0)) == created
    assert service.get_today_record(EMPLOYEE_ID, now=datetime(2025, 3, 4, 9, 0)) is None
