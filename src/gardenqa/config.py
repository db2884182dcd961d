import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:

    garden_db_url: str
    garden_db_timeout: float
    default_category: str
    log_level: str


def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name, default)
    if value is None:
        return None
    value = value.strip()
    return value if value else None


def load_settings() -> Settings:
    garden_db_url = _get_env("GARDEN_DB_URL", "./garden-db.json") or "./garden-db.json"

    timeout_raw = _get_env("GARDEN_DB_TIMEOUT", "30") or "30"
    try:
        garden_db_timeout = float(timeout_raw)
    except ValueError:
        raise RuntimeError(
            f"GARDEN_DB_TIMEOUT must be a number of seconds, got {timeout_raw!r}."
        ) from None

    default_category = _get_env("GARDEN_DEFAULT_CATEGORY", "all") or "all"
    log_level = _get_env("LOG_LEVEL", "INFO") or "INFO"

    return Settings(
        garden_db_url=garden_db_url,
        garden_db_timeout=garden_db_timeout,
        default_category=default_category,
        log_level=log_level,
    )
