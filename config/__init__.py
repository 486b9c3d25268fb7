import os

PRODUCTION_ENVS = {"prod", "production"}
TESTING_ENVS = {"test", "testing"}


def get_settings_module() -> str:
    # APP_ENV selects the settings module; anything unknown falls back to development
    env = os.getenv("APP_ENV", "development").strip().lower()

    if env in PRODUCTION_ENVS:
        return "config.production"
    if env in TESTING_ENVS:
        return "config.testing"
    return "config.development"
