# src/settings.py
"""
Runtime configuration for the console-log relay.

Environment:
- SUPABASE_URL:       base URL of the REST backend (required for any backend call)
- SUPABASE_ANON_KEY:  API key forwarded as `apikey` + `Authorization: Bearer`
- LOG_TABLE:          REST resource holding log rows (default "console_logs")
- BACKEND_TIMEOUT:    seconds per outbound request (default 15)
- BATCH_WORKERS:      max in-flight inserts for one batch (default 16)
- MAX_META_BYTES:     cap on the serialised `meta` object (default 16384, 0 = off)

Public API:
- Settings                 (immutable)
- load_settings() -> Settings
- get_settings()  -> Settings   (cached; FastAPI dependency)
"""

from __future__ import annotations

import logging
import os as _os
from functools import lru_cache

from pydantic import BaseModel, ConfigDict

_logger = logging.getLogger(__name__)


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    supabase_url:   str   = ""
    supabase_key:   str   = ""
    table:          str   = "console_logs"
    http_timeout:   float = 15.0
    batch_workers:  int   = 16
    max_meta_bytes: int   = 16384


# ───────────────────────── env helpers ─────────────────────────

def _env_str(name: str, default: str = "") -> str:
    return (_os.getenv(name) or default).strip()


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    raw = _env_str(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        _logger.warning("%s=%r is not an integer – using %s", name, raw, default)
        return default
    if value < minimum:
        _logger.warning("%s=%s below %s – using %s", name, value, minimum, default)
        return default
    return value


def _env_float(name: str, default: float) -> float:
    raw = _env_str(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        _logger.warning("%s=%r is not a number – using %s", name, raw, default)
        return default
    return value if value > 0 else default


# ───────────────────────── public builders ─────────────────────────

def load_settings() -> Settings:
    return Settings(
        supabase_url=_env_str("SUPABASE_URL").rstrip("/"),
        supabase_key=_env_str("SUPABASE_ANON_KEY"),
        table=_env_str("LOG_TABLE", "console_logs"),
        http_timeout=_env_float("BACKEND_TIMEOUT", 15.0),
        batch_workers=_env_int("BATCH_WORKERS", 16, minimum=1),
        max_meta_bytes=_env_int("MAX_META_BYTES", 16384),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    settings = load_settings()
    if not settings.supabase_url:
        _logger.warning("SUPABASE_URL is not set – backend calls will fail")
    return settings
