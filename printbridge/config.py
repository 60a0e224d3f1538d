from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from printbridge.services.file_validator import DEFAULT_ALLOWED_EXTENSIONS


def _parse_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on", "y"}


def _parse_int(value: str | None, default: int) -> int:
    if value is None:
        return default
    return int(value.strip())


def _parse_list(value: str | None, default: tuple[str, ...]) -> tuple[str, ...]:
    if value is None:
        return default
    items = tuple(part.strip().lower() for part in value.split(",") if part.strip())
    return items or default


def _read_dotenv(path: Path) -> dict[str, str]:
    if not path.exists():
        return {}
    result: dict[str, str] = {}
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        result[key.strip()] = value.strip().strip("'").strip('"')
    return result


def _read_first(
    env: dict[str, str],
    *keys: str,
    required: bool = False,
    default: str | None = None,
) -> str | None:
    for key in keys:
        if key in os.environ:
            return os.environ[key]
        if key in env:
            return env[key]
    if required and default is None:
        joined = ", ".join(keys)
        raise ValueError(f"Required setting is missing. Expected one of: {joined}")
    return default


@dataclass(slots=True)
class Settings:
    database_path: str = "printbridge.db"
    storage_backend: str = "sqlite"
    materials_file: str = "data/materials.json"
    web_host: str = "0.0.0.0"
    web_port: int = 8080
    allowed_file_extensions: tuple[str, ...] = DEFAULT_ALLOWED_EXTENSIONS
    max_file_size_mb: int = 100
    telegram_bot_token: str | None = None
    telegram_chat_id: int | None = None
    stale_request_hours: int = 24
    reminder_scan_minutes: int = 30
    scheduler_enabled: bool = True
    log_level: str = "INFO"


def load_settings(env_file: str = ".env") -> Settings:
    env = _read_dotenv(Path(env_file))

    storage_backend = (_read_first(env, "PRINTBRIDGE_STORAGE", default="sqlite") or "sqlite").strip().lower()
    if storage_backend not in {"sqlite", "memory"}:
        raise ValueError("PRINTBRIDGE_STORAGE must be one of: sqlite, memory")

    bot_token = _read_first(env, "TELEGRAM_BOT_TOKEN", default=None)
    chat_id_raw = _read_first(env, "TELEGRAM_CHAT_ID", required=bool(bot_token), default=None)

    extensions = _parse_list(
        _read_first(env, "ALLOWED_FILE_EXTENSIONS", default=None),
        DEFAULT_ALLOWED_EXTENSIONS,
    )

    return Settings(
        database_path=_read_first(env, "PRINTBRIDGE_DB_PATH", default="printbridge.db") or "printbridge.db",
        storage_backend=storage_backend,
        materials_file=_read_first(env, "MATERIALS_FILE", default="data/materials.json") or "data/materials.json",
        web_host=_read_first(env, "WEB_HOST", default="0.0.0.0") or "0.0.0.0",
        web_port=_parse_int(_read_first(env, "PORT", "WEB_PORT", default="8080"), 8080),
        allowed_file_extensions=tuple(ext if ext.startswith(".") else f".{ext}" for ext in extensions),
        max_file_size_mb=_parse_int(_read_first(env, "MAX_FILE_SIZE_MB", default="100"), 100),
        telegram_bot_token=bot_token or None,
        telegram_chat_id=int(chat_id_raw) if chat_id_raw else None,
        stale_request_hours=_parse_int(_read_first(env, "STALE_REQUEST_HOURS", default="24"), 24),
        reminder_scan_minutes=_parse_int(_read_first(env, "REMINDER_SCAN_MINUTES", default="30"), 30),
        scheduler_enabled=_parse_bool(_read_first(env, "SCHEDULER_ENABLED", default="true"), True),
        log_level=(_read_first(env, "LOG_LEVEL", default="INFO") or "INFO").upper(),
    )
