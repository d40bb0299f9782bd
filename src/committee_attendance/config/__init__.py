import os


def get_settings_module() -> str:
    """Pick the settings module from APP_ENV (default: development)."""
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "committee_attendance.config.production"

    if env in {"test", "testing"}:
        return "committee_attendance.config.testing"

    return "committee_attendance.config.development"
