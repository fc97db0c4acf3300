from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from .activity.mysql_activity_repository import MySQLActivityLogRepository
from .activity.repository import ActivityLogRepository
from .activity.service import ActivityLogger
from .attendance.admin_service import AttendanceAdminService
from .attendance.factory import AttendanceStrategyFactory
from .attendance.locks import KeyedLocks, MySQLDayLocks
from .attendance.monitoring import AttendanceMonitor
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core import constants
from .database.connection import DBConfig, DatabaseConnection
from .notifications.dispatcher import NotificationDispatcher
from .notifications.notifiers import LoggingNotifier, Notifier, WebhookNotifier
from .policy.time_policy import TimePolicy
from .reports.service import AttendanceReportService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    policy: TimePolicy

    users_repo: UserRepository
    attendance_repo: AttendanceRepository
    activity_repo: ActivityLogRepository

    dispatcher: NotificationDispatcher
    auth_service: AuthService
    attendance_service: AttendanceService
    admin_service: AttendanceAdminService
    monitor: AttendanceMonitor
    report_service: AttendanceReportService


def build_notifier(settings: Any) -> Notifier:
    url = str(getattr(settings, "NOTIFY_WEBHOOK_URL", "") or "").strip()
    if url:
        logger.info("Notifications go to webhook %s", url)
        return WebhookNotifier(url)
    return LoggingNotifier()


def build_container(
    settings: Any,
    *,
    users_repo: Optional[UserRepository] = None,
    attendance_repo: Optional[AttendanceRepository] = None,
    activity_repo: Optional[ActivityLogRepository] = None,
    notifier: Optional[Notifier] = None,
) -> Container:
    """Wire repositories and services from a settings module.

    Repositories passed in replace their MySQL implementations; a database
    connection factory is only created when one of them is missing.
    """
    conn = None
    mysql_attendance = attendance_repo is None
    if users_repo is None or attendance_repo is None or activity_repo is None:
        conn = DatabaseConnection.get_instance(DBConfig.from_mapping(getattr(settings, "DB_CONFIG")))
        users_repo = users_repo or MySQLUserRepository(conn)
        attendance_repo = attendance_repo or MySQLAttendanceRepository(conn)
        activity_repo = activity_repo or MySQLActivityLogRepository(conn)

    policy = TimePolicy.from_settings(settings)
    if mysql_attendance:
        locks: KeyedLocks = MySQLDayLocks(
            conn,
            timeout_seconds=int(
                getattr(settings, "DAY_LOCK_TIMEOUT_SECONDS", constants.DEFAULT_DAY_LOCK_TIMEOUT_SECONDS)
            ),
        )
    else:
        locks = KeyedLocks()
    activity = ActivityLogger(activity_repo)
    dispatcher = NotificationDispatcher(
        notifier or build_notifier(settings),
        max_workers=int(getattr(settings, "NOTIFY_MAX_WORKERS", constants.DEFAULT_NOTIFY_MAX_WORKERS)),
    )

    attendance_service = AttendanceService(
        attendance_repo,
        users_repo,
        policy=policy,
        strategy_factory=AttendanceStrategyFactory(policy),
        dispatcher=dispatcher,
        activity=activity,
        locks=locks,
        recipients=getattr(settings, "NOTIFY_RECIPIENTS", ()),
    )
    admin_service = AttendanceAdminService(attendance_repo, users_repo, policy=policy, activity=activity, locks=locks)
    monitor = AttendanceMonitor(attendance_repo, users_repo, policy=policy, dispatcher=dispatcher)
    report_service = AttendanceReportService(attendance_repo, users_repo, policy=policy)

    return Container(
        conn=conn,
        policy=policy,
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        activity_repo=activity_repo,
        dispatcher=dispatcher,
        auth_service=AuthService(users_repo),
        attendance_service=attendance_service,
        admin_service=admin_service,
        monitor=monitor,
        report_service=report_service,
    )
