import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "train_classroom"),
}

TIMEZONE = os.getenv("TIMEZONE", "")

WORK_HOURS_PER_DAY = int(os.getenv("WORK_HOURS_PER_DAY", "8"))

QR_TOKEN = os.getenv("QR_TOKEN", "TRAIN_CLASSROOM_CHECKIN")

STATUS_SWEEP_BATCH_SIZE = int(os.getenv("STATUS_SWEEP_BATCH_SIZE", "100"))

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON = bool(int(os.getenv("LOG_JSON", "1")))

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
