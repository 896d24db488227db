"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

STUDENT_ID_LENGTH = 5

# Canonical times used when filling in missing swipes.
BACKFILL_CHECK_IN_TIME = time(7, 10, 0)
BACKFILL_CHECK_OUT_TIME = time(7, 47, 0)

DEFAULT_TREND_DAYS = 7
DEFAULT_TIMEZONE = "Asia/Seoul"

DEFAULT_REMOTE_TIMEOUT_SECONDS = 10.0
DEFAULT_CONNECTIVITY_TIMEOUT_SECONDS = 3.0
DEFAULT_CONNECTIVITY_POLL_SECONDS = 60.0

# Keys of the local state document.
ATTENDANCE_KEY = "attendanceData"
STUDENT_LIST_KEY = "studentList"
STUDENT_LIST_UPDATED_KEY = "studentListUpdated"
ENDPOINT_KEY = "WEBAPP_URL"

# Value sent as `source` with remote submits and as `trigger_source` with automation calls.
SUBMIT_SOURCE = "web_interface"
DEFAULT_AUTOMATION_ACTION = "processMissing"
REMOTE_HOST_MARKER = "script.google.com"

DEFAULT_EXPORT_PREFIX = "morning_attendance"
SYSTEM_VERSION = "9.0"
