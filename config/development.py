import os

from config.config import export_settings

export_settings(
    globals(),
    DEBUG=True,
    LOG_LEVEL=os.getenv("LOG_LEVEL", "DEBUG"),
    # If enabled, the app applies database/schema.sql on startup (CREATE IF NOT EXISTS)
    AUTO_INIT_DB=bool(int(os.getenv("AUTO_INIT_DB", "1"))),
    # Optional: also seed demo users on startup
    AUTO_SEED_DB=bool(int(os.getenv("AUTO_SEED_DB", "0"))),
)
