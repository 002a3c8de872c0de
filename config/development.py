import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "train_classroom"),
}

# IANA zone for the wall clock; empty means naive server-local time.
TIMEZONE = os.getenv("TIMEZONE", "")

WORK_HOURS_PER_DAY = int(os.getenv("WORK_HOURS_PER_DAY", "8"))

# Default token accepted by QR scanners that carry no token of their own
QR_TOKEN = os.getenv("QR_TOKEN", "TRAIN_CLASSROOM_CHECKIN")

STATUS_SWEEP_BATCH_SIZE = int(os.getenv("STATUS_SWEEP_BATCH_SIZE", "100"))

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_JSON = bool(int(os.getenv("LOG_JSON", "0")))

# If enabled, schema.sql is applied on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
