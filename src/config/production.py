import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "class_attendance"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

TIMEZONE = os.getenv("TIMEZONE", "Asia/Manila")
PRE_WINDOW_GRACE_MINUTES = int(os.getenv("PRE_WINDOW_GRACE_MINUTES", "15"))
POST_WINDOW_GRACE_MINUTES = int(os.getenv("POST_WINDOW_GRACE_MINUTES", "30"))
LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "15"))
SCAN_CLOCK_TOLERANCE_MINUTES = int(os.getenv("SCAN_CLOCK_TOLERANCE_MINUTES", "10"))
