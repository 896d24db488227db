import os

# Tests never talk to a real spreadsheet
REMOTE_ENDPOINT = ""

DATA_FILE = os.getenv("DATA_FILE", "data/test_state.json")
TIMEZONE = "Asia/Seoul"

REMOTE_TIMEOUT_SECONDS = 1.0
CONNECTIVITY_TIMEOUT_SECONDS = 0.5
CONNECTIVITY_POLL_SECONDS = 60.0

EXPORT_PREFIX = "morning_attendance"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"
