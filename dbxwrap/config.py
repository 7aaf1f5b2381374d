from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigError

DEFAULT_API_URL = "https://api.dropboxapi.com/2"
DEFAULT_CONTENT_URL = "https://content.dropboxapi.com/2"


@dataclass
class DbxwrapConfig:
    credentials_path: Path
    api_url: str = DEFAULT_API_URL
    content_url: str = DEFAULT_CONTENT_URL
    timeout: Optional[float] = None
    max_pages: Optional[int] = None
    log_path: Optional[Path] = None
    verbose: bool = False


def _optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


def _optional_int(name: str) -> Optional[int]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")
    if value < 1:
        raise ConfigError(f"{name} must be at least 1, got {raw!r}")
    return value


def load_config(
    project_root: Optional[Path] = None,
    env_file: Optional[Path] = None,
) -> DbxwrapConfig:
    """
    Load configuration from .env and the process environment.

    Called once at startup; the resulting paths are not re-read per call.
    """

    if env_file is None:
        if project_root is None:
            project_root = Path.cwd()
        env_file = project_root / ".env"

    # 1) Load .env, without overriding variables already exported
    if env_file.exists():
        load_dotenv(env_file, override=False)

    default_credentials = Path.home() / ".dbxwrap" / "credentials.json"
    credentials_raw = os.getenv("DBXWRAP_CREDENTIALS_PATH", "").strip()
    credentials_path = (
        Path(credentials_raw).expanduser() if credentials_raw else default_credentials
    )

    api_url = (os.getenv("DBXWRAP_API_URL", "").strip() or DEFAULT_API_URL).rstrip("/")
    content_url = (
        os.getenv("DBXWRAP_CONTENT_URL", "").strip() or DEFAULT_CONTENT_URL
    ).rstrip("/")

    log_raw = os.getenv("DBXWRAP_LOG_PATH", "").strip()
    log_path = Path(log_raw).expanduser() if log_raw else Path.home() / ".dbxwrap.log"

    return DbxwrapConfig(
        credentials_path=credentials_path,
        api_url=api_url,
        content_url=content_url,
        timeout=_optional_float("DBXWRAP_TIMEOUT"),
        max_pages=_optional_int("DBXWRAP_MAX_PAGES"),
        log_path=log_path,
        verbose=os.getenv("DBXWRAP_VERBOSE", "0").strip() == "1",
    )
