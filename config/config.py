"""Settings shared by every environment module.

Each value can be overridden from the environment (or a ``.env`` file loaded
by ``create_app``).
"""

import os


def _env_list(name: str, default: str = "") -> list:
    return [v.strip() for v in os.environ.get(name, default).split(",") if v.strip()]


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "change-me"

    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_NAME = os.environ.get("DB_NAME", "timekeeper")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    CRON_SECRET = os.environ.get("CRON_SECRET", "")

    NOTIFY_WEBHOOK_URL = os.environ.get("NOTIFY_WEBHOOK_URL", "")
    NOTIFY_RECIPIENTS = _env_list("NOTIFY_RECIPIENTS")
    NOTIFY_MAX_WORKERS = int(os.environ.get("NOTIFY_MAX_WORKERS", "2"))
    DAY_LOCK_TIMEOUT_SECONDS = int(os.environ.get("DAY_LOCK_TIMEOUT_SECONDS", "10"))

    # Office day
    ATTENDANCE_OFFICE_START = os.environ.get("ATTENDANCE_OFFICE_START", "10:00")
    ATTENDANCE_OFFICE_END = os.environ.get("ATTENDANCE_OFFICE_END", "19:00")
    ATTENDANCE_LUNCH_START = os.environ.get("ATTENDANCE_LUNCH_START", "13:00")
    ATTENDANCE_LUNCH_END = os.environ.get("ATTENDANCE_LUNCH_END", "13:30")
    ATTENDANCE_LUNCH_DURATION_MINUTES = int(os.environ.get("ATTENDANCE_LUNCH_DURATION_MINUTES", "30"))
    ATTENDANCE_LATE_THRESHOLD_MINUTES = int(os.environ.get("ATTENDANCE_LATE_THRESHOLD_MINUTES", "5"))
    ATTENDANCE_HALF_DAY_AFTER = os.environ.get("ATTENDANCE_HALF_DAY_AFTER", "12:05")
    ATTENDANCE_ABSENT_AFTER = os.environ.get("ATTENDANCE_ABSENT_AFTER", "14:00")

    # Work from home
    ATTENDANCE_WFH_MIN_HOURS_FOR_PRESENT = float(os.environ.get("ATTENDANCE_WFH_MIN_HOURS_FOR_PRESENT", "8.5"))
    ATTENDANCE_WFH_HEARTBEAT_INTERVAL_MINUTES = int(os.environ.get("ATTENDANCE_WFH_HEARTBEAT_INTERVAL_MINUTES", "60"))
    ATTENDANCE_WFH_INACTIVITY_THRESHOLD_MINUTES = int(
        os.environ.get("ATTENDANCE_WFH_INACTIVITY_THRESHOLD_MINUTES", "120")
    )

    ATTENDANCE_PUBLIC_HOLIDAYS = _env_list(
        "ATTENDANCE_PUBLIC_HOLIDAYS",
        "2025-01-14,2025-01-26,2025-03-14,2025-03-30,2025-03-31,2025-06-07,"
        "2025-08-09,2025-08-15,2025-10-02,2025-10-21,2025-12-25",
    )


def export_settings(namespace: dict, **overrides) -> None:
    """Copy ``Config`` attributes into a settings module namespace."""
    for name in dir(Config):
        if name.isupper():
            namespace[name] = getattr(Config, name)
    namespace["DB_CONFIG"] = {
        "host": Config.DB_HOST,
        "port": Config.DB_PORT,
        "user": Config.DB_USER,
        "password": Config.DB_PASSWORD,
        "database": Config.DB_NAME,
    }
    namespace.update(overrides)
