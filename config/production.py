import os

from config.config import export_settings

export_settings(
    globals(),
    SECRET_KEY=os.getenv("SECRET_KEY", "please-set-SECRET_KEY"),
    DEBUG=False,
    AUTO_INIT_DB=bool(int(os.getenv("AUTO_INIT_DB", "0"))),
    AUTO_SEED_DB=bool(int(os.getenv("AUTO_SEED_DB", "0"))),
)
