import os


def get_settings_module() -> str:
    # APP_ENV picks the settings module; development is the default
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "attendance_hub.settings.production"

    if env in {"test", "testing"}:
        return "attendance_hub.settings.testing"

    return "attendance_hub.settings.development"
