"""
config.py
─────────
Runtime settings, read once from the environment (and backend/.env).

Environment variables:
    OPENAI_API_KEY        → OpenAI key used for chat completions
    OPENAI_BASE_URL       → (optional) alternative API base URL
    OPENAI_TIMEOUT        → (optional) seconds per completion call, default 30
    RATE_LIMIT            → (optional) requests per window per client, default 10
    RATE_LIMIT_WINDOW_MS  → (optional) window length in ms, default 60000
    LOG_LEVEL             → (optional) root log level, default INFO
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from rate_limit import RATE_LIMIT, RATE_LIMIT_WINDOW_MS

load_dotenv()


@dataclass(frozen=True)
class Settings:
    openai_api_key: str
    openai_base_url: Optional[str]
    openai_timeout: float
    rate_limit: int
    rate_limit_window_ms: int
    log_level: str


def _number(name: str, default, cast):
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _log_level() -> str:
    level = os.getenv("LOG_LEVEL", "").strip().upper() or "INFO"
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"LOG_LEVEL must be a logging level name, got {level!r}")
    return level


def load_settings() -> Settings:
    return Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY", "").strip(),
        openai_base_url=os.getenv("OPENAI_BASE_URL", "").strip() or None,
        openai_timeout=_number("OPENAI_TIMEOUT", 30.0, float),
        rate_limit=_number("RATE_LIMIT", RATE_LIMIT, int),
        rate_limit_window_ms=_number("RATE_LIMIT_WINDOW_MS", RATE_LIMIT_WINDOW_MS, int),
        log_level=_log_level(),
    )
