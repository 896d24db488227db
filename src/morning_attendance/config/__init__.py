import os


def get_settings_module() -> str:
    # Settings module is chosen from APP_ENV, defaulting to development
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "morning_attendance.config.production"

    if env in {"test", "testing"}:
        return "morning_attendance.config.testing"

    return "morning_attendance.config.development"
