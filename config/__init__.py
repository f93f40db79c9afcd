import os
from typing import Optional

_ALIASES = {
    "prod": "production",
    "production": "production",
    "test": "testing",
    "testing": "testing",
    "dev": "development",
    "development": "development",
}


def get_settings_module(env: Optional[str] = None) -> str:
    # APP_ENV selects the settings module; unknown values fall back to development.
    name = (env or os.getenv("APP_ENV") or "development").strip().lower()
    return f"config.{_ALIASES.get(name, 'development')}"
