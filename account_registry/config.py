from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
import os


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str, default: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in os.getenv(name, default).split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    """Runtime configuration values exposed to FastAPI components."""

    app_name: str = os.getenv("APP_NAME", "account-registry")
    version: str = "0.1.0"
    mongo_uri: str = os.getenv("MONGO_URI", "")
    mongo_db_name: str = os.getenv("MONGO_DB_NAME", "accounts")
    mongo_debug: bool = _env_flag("MONGO_DEBUG")
    mongo_reconnect_interval_ms: int = int(os.getenv("MONGO_RECONNECT_INTERVAL_MS", "500"))
    mongo_server_selection_timeout_ms: int = int(
        os.getenv("MONGO_SERVER_SELECTION_TIMEOUT_MS", "1000")
    )
    http_host: str = os.getenv("HTTP_HOST", "0.0.0.0")
    http_port: int = int(os.getenv("HTTP_PORT", "8000"))
    app_root: str = os.getenv("APP_ROOT", "")
    locales: tuple[str, ...] = field(default_factory=lambda: _env_list("LOCALES", "en,de"))
    default_locale: str = os.getenv("DEFAULT_LOCALE", "en")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    cors_allow_origins: tuple[str, ...] = field(
        default_factory=lambda: _env_list("CORS_ALLOW_ORIGINS", "*")
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached Settings instance for the running process."""
    return Settings()
