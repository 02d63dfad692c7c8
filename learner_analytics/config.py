"""
Dashboard settings, read from the environment (and a local .env when present).
"""

import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_BACKEND_URL = "http://localhost:8001"
DEFAULT_TIMEFRAME = "monthly"
DEFAULT_TIMEOUT = 30
DEFAULT_TOKEN_FILE = Path.home() / ".learner_analytics" / "token"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


@dataclass
class Settings:
    """Runtime configuration for the analytics dashboard"""
    backend_url: str = DEFAULT_BACKEND_URL
    token: Optional[str] = None
    token_file: Path = DEFAULT_TOKEN_FILE
    default_timeframe: str = DEFAULT_TIMEFRAME
    timeout: int = DEFAULT_TIMEOUT
    max_retries: int = 0
    use_mock: bool = False
    log_level: str = "INFO"


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Invalid integer for {name}={raw!r}, using {default}")
        return default
    if value < 0:
        logger.warning(f"Negative value for {name}={raw!r}, using {default}")
        return default
    return value


def _get_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    logger.warning(f"Invalid boolean for {name}={raw!r}, using {default}")
    return default


def load_settings(dotenv: bool = True) -> Settings:
    if dotenv:
        load_dotenv()

    token_file = os.getenv("ANALYTICS_TOKEN_FILE")
    return Settings(
        backend_url=(os.getenv("ANALYTICS_BACKEND_URL") or DEFAULT_BACKEND_URL).rstrip("/"),
        token=os.getenv("ANALYTICS_TOKEN") or None,
        token_file=Path(token_file).expanduser() if token_file else DEFAULT_TOKEN_FILE,
        default_timeframe=os.getenv("ANALYTICS_DEFAULT_TIMEFRAME") or DEFAULT_TIMEFRAME,
        timeout=_get_int("ANALYTICS_TIMEOUT", DEFAULT_TIMEOUT),
        max_retries=_get_int("ANALYTICS_MAX_RETRIES", 0),
        use_mock=_get_bool("ANALYTICS_USE_MOCK", False),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
