"""Runtime settings read from ``TTT_*`` environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, TypeVar

Number = TypeVar("Number", int, float)


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 8000
    ai_delay: float = 0.25
    session_ttl_seconds: int = 60 * 30  # 30 minutes
    log_level: str = "INFO"
    log_file: Optional[str] = None


def _number(
    env: Mapping[str, str], name: str, default: Number, cast: Callable[[str], Number]
) -> Number:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {raw!r}")
    return value


def _log_level(env: Mapping[str, str], default: str) -> str:
    level = (env.get("TTT_LOG_LEVEL") or default).strip().upper()
    if level not in logging.getLevelNamesMapping():
        raise ValueError(f"TTT_LOG_LEVEL must be a logging level name, got {level!r}")
    return level


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build settings from ``env`` (defaults to ``os.environ``)."""

    if env is None:
        env = os.environ
    defaults = Settings()
    return Settings(
        host=(env.get("TTT_HOST") or defaults.host).strip(),
        port=_number(env, "TTT_PORT", defaults.port, int),
        ai_delay=_number(env, "TTT_AI_DELAY", defaults.ai_delay, float),
        session_ttl_seconds=_number(
            env, "TTT_SESSION_TTL", defaults.session_ttl_seconds, int
        ),
        log_level=_log_level(env, defaults.log_level),
        log_file=(env.get("TTT_LOG_FILE") or "").strip() or None,
    )
