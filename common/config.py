from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


DEFAULT_PORT = 8080


class ConfigurationError(RuntimeError):
    """Falta una variable de entorno obligatoria o tiene un valor inválido."""


def _default_env_file() -> str:
    # .env en el directorio de trabajo, igual que docker compose.
    return str(Path.cwd() / ".env")


@dataclass(frozen=True)
class Settings:
    database_url: str
    api_token: str

    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    log_level: str = "INFO"

    db_pool_size: int = 10
    db_max_overflow: int = 0
    db_pool_timeout: float = 5.0
    db_auto_migrate: bool = False


def _require(name: str) -> str:
    value = os.getenv(name, "")
    if not value.strip():
        raise ConfigurationError(f"{name} environment variable is required")
    return value


def _parse_port(raw: str | None) -> int:
    # Un PORT no parseable cae al default en vez de tumbar el proceso.
    try:
        port = int(raw) if raw else DEFAULT_PORT
    except ValueError:
        return DEFAULT_PORT
    if not 0 < port < 65536:
        return DEFAULT_PORT
    return port


def _parse_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


def _parse_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


def _parse_flag(raw: str | None) -> bool:
    if not raw:
        return False
    return raw.strip().lower() in ("1", "true", "yes", "on")


def get_settings() -> Settings:
    # Load env file (if present) but still allow overriding via real environment variables.
    env_file = os.getenv("TELEMETRY_ENV_FILE", _default_env_file())
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    database_url = _require("DATABASE_URL")
    api_token = _require("API_TOKEN").strip()

    return Settings(
        database_url=database_url,
        api_token=api_token,
        host=os.getenv("HOST", "0.0.0.0"),
        port=_parse_port(os.getenv("PORT")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        db_pool_size=_parse_int("DB_POOL_SIZE", 10),
        db_max_overflow=_parse_int("DB_MAX_OVERFLOW", 0),
        db_pool_timeout=_parse_float("DB_POOL_TIMEOUT", 5.0),
        db_auto_migrate=_parse_flag(os.getenv("DB_AUTO_MIGRATE")),
    )
