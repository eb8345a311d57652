from __future__ import annotations

import logging
import os
from pathlib import Path


APP_NAME = "OrderNest"
APP_VERSION = "v1.0"

_DEFAULT_LOG_LEVEL = "WARNING"
_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def storage_root() -> Path:
    override = os.getenv("ORDERNEST_HOME", "").strip()
    if override:
        return Path(override).expanduser()
    base = Path(os.getenv("LOCALAPPDATA", Path.home()))
    return base / APP_NAME


def log_level() -> str:
    return os.getenv("ORDERNEST_LOG_LEVEL", _DEFAULT_LOG_LEVEL).strip().upper() or _DEFAULT_LOG_LEVEL


def configure_logging(level: str | None = None) -> None:
    name = (level or log_level()).upper()
    logging.basicConfig(level=getattr(logging, name, logging.WARNING), format=_LOG_FORMAT)
