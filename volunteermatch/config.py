"""
Runtime settings.

Values come from the process environment (optionally seeded from a .env
file via load_env). Everything has a default so the engine runs offline
with the bundled datasets and deterministic rationale only.
"""

import os
from pathlib import Path
from typing import Optional

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_DATA_DIR = PACKAGE_DIR / "data"

RISK_FILE = "risk_by_country.json"
ROLES_FILE = "roles.json"
COUNTRY_FILE = "countries.json"
NEWS_FILE = "news.json"

DEFAULT_RATIONALE_API_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_RATIONALE_MODEL = "gpt-4o-mini"
DEFAULT_RATIONALE_TIMEOUT = 8.0


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _log_level_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    level = raw.strip().upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"{name} must be one of {', '.join(LOG_LEVELS)}, got {raw!r}")
    return level


class Settings:
    """Resolved configuration for one process."""

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        log_level: str = "INFO",
        log_dir: Optional[Path] = None,
        rationale_api_key: Optional[str] = None,
        rationale_api_url: str = DEFAULT_RATIONALE_API_URL,
        rationale_model: str = DEFAULT_RATIONALE_MODEL,
        rationale_timeout: float = DEFAULT_RATIONALE_TIMEOUT,
    ):
        self.data_dir = Path(data_dir) if data_dir else DEFAULT_DATA_DIR
        self.log_level = log_level
        self.log_dir = Path(log_dir) if log_dir else None
        self.rationale_api_key = rationale_api_key
        self.rationale_api_url = rationale_api_url
        self.rationale_model = rationale_model
        self.rationale_timeout = rationale_timeout

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from VOLUNTEERMATCH_* and RATIONALE_* variables."""
        return cls(
            data_dir=os.getenv("VOLUNTEERMATCH_DATA_DIR") or None,
            log_level=_log_level_env("VOLUNTEERMATCH_LOG_LEVEL", "INFO"),
            log_dir=os.getenv("VOLUNTEERMATCH_LOG_DIR") or None,
            rationale_api_key=os.getenv("RATIONALE_API_KEY") or None,
            rationale_api_url=os.getenv("RATIONALE_API_URL") or DEFAULT_RATIONALE_API_URL,
            rationale_model=os.getenv("RATIONALE_MODEL") or DEFAULT_RATIONALE_MODEL,
            rationale_timeout=_float_env("RATIONALE_TIMEOUT", DEFAULT_RATIONALE_TIMEOUT),
        )

    def path_for(self, filename: str) -> Path:
        return self.data_dir / filename

    def __repr__(self):
        key_state = "set" if self.rationale_api_key else "unset"
        return f"Settings(data_dir={self.data_dir}, log_level={self.log_level}, api_key={key_state})"
