"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

WORK_HOURS_PER_DAY = 8
DEFAULT_SWEEP_BATCH_SIZE = 100
DEFAULT_QR_TOKEN = "TRAIN_CLASSROOM_CHECKIN"
MAKEUP_REMARK_PREFIX = "Make-up attendance: "
RATE_PRECISION = 2
