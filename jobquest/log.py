"""Logging setup shared by the client library and the Streamlit UI."""
from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from pathlib import Path

_DEFAULT_LOG_DIR = Path(__file__).resolve().parent.parent / "logs"
_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"
_DATE_FMT = "%Y-%m-%d %H:%M:%S"
_NOISY = ("urllib3", "watchdog", "streamlit.runtime")
_configured = False


def get_logger(name: str) -> logging.Logger:
    """Named logger; the first call installs the root handlers."""
    global _configured
    if not _configured:
        _configure()
        _configured = True
    return logging.getLogger(name)


def _level_from_env() -> int:
    name = os.environ.get("LOG_LEVEL", "INFO").strip().upper()
    return getattr(logging, name, logging.INFO)


def _log_dir() -> Path:
    override = os.environ.get("JOBQUEST_LOG_DIR", "").strip()
    return Path(override) if override else _DEFAULT_LOG_DIR


def _configure() -> None:
    level = _level_from_env()
    formatter = logging.Formatter(_FORMAT, datefmt=_DATE_FMT)

    root = logging.getLogger()
    root.setLevel(level)
    for noisy in _NOISY:
        logging.getLogger(noisy).setLevel(max(level, logging.WARNING))

    # Streamlit (and pytest) install their own handlers first
    if root.handlers:
        return

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(formatter)
    root.addHandler(console)

    if os.environ.get("JOBQUEST_LOG_FILE", "1").strip() in ("0", "false", "no"):
        return
    try:
        log_dir = _log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(
            log_dir / f"jobquest_{datetime.now().strftime('%Y-%m-%d')}.log",
            encoding="utf-8",
        )
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(formatter)
        root.addHandler(fh)
    except OSError:
        pass
