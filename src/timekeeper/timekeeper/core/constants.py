"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
Deployment values live in the settings modules under ``config/``.
"""

DEFAULT_OFFICE_START = "10:00"
DEFAULT_OFFICE_END = "19:00"
DEFAULT_LUNCH_START = "13:00"
DEFAULT_LUNCH_END = "13:30"
DEFAULT_LUNCH_DURATION_MINUTES = 30
DEFAULT_LATE_THRESHOLD_MINUTES = 5
DEFAULT_HALF_DAY_AFTER = "12:05"
DEFAULT_ABSENT_AFTER = "14:00"

DEFAULT_WFH_MIN_HOURS_FOR_PRESENT = 8.5
DEFAULT_WFH_HEARTBEAT_INTERVAL_MINUTES = 60
DEFAULT_WFH_INACTIVITY_THRESHOLD_MINUTES = 120

DEFAULT_NOTIFY_MAX_WORKERS = 2
MAX_LISTING_DAYS_WITH_ABSENTS = 90
DEFAULT_DAY_LOCK_TIMEOUT_SECONDS = 10
