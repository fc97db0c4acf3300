from config.config import export_settings

export_settings(
    globals(),
    SECRET_KEY="test-secret",
    DEBUG=False,
    TESTING=True,
    AUTO_INIT_DB=False,
    AUTO_SEED_DB=False,
    CRON_SECRET="test-cron-secret",
    NOTIFY_WEBHOOK_URL="",
    ATTENDANCE_PUBLIC_HOLIDAYS=[],
)
