import os

# Google Apps Script web app receiving the swipes
REMOTE_ENDPOINT = os.getenv("WEBAPP_URL", "")

DATA_FILE = os.getenv("DATA_FILE", "data/attendance_state.json")
TIMEZONE = os.getenv("TIMEZONE", "Asia/Seoul")

REMOTE_TIMEOUT_SECONDS = float(os.getenv("REMOTE_TIMEOUT_SECONDS", "10"))
CONNECTIVITY_TIMEOUT_SECONDS = float(os.getenv("CONNECTIVITY_TIMEOUT_SECONDS", "3"))
CONNECTIVITY_POLL_SECONDS = float(os.getenv("CONNECTIVITY_POLL_SECONDS", "60"))

EXPORT_PREFIX = os.getenv("EXPORT_PREFIX", "morning_attendance")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
