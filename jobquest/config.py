"""Load env and UI settings for the JobQuest client."""
from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from jobquest.log import get_logger

log = get_logger(__name__)

load_dotenv()

ROOT: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = ROOT / "config"
SETTINGS_PATH: Path = CONFIG_DIR / "settings.yaml"
DATA_DIR: Path = ROOT / "data"
EXPORTS_DIR: Path = ROOT / "exports"

DEFAULT_API_URL = "http://localhost:5000"
DEFAULT_SITE_ORIGIN = "http://localhost:8501"
TOKEN_KEY = "jobquest_token"

DEFAULT_SETTINGS: dict[str, Any] = {
    "page_size": {
        "all_jobs": 12,
        "search": 10,
        "carousel": 6,
        "category": 12,
        "admin": 20,
        "contacts": 10,
    },
    "banner_seconds": 5.0,
    "guest_follow_up_seconds": 0.8,
    "max_image_mb": 5,
    "local_clipboard": False,
    "social_providers": [],
}


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def api_base_url() -> str:
    """Backend origin without a trailing ``/api``; resource paths add it."""
    raw = get_env("JOBQUEST_API_URL", DEFAULT_API_URL) or DEFAULT_API_URL
    base = raw.rstrip("/")
    if base.endswith("/api"):
        base = base[: -len("/api")]
    return base


def site_origin() -> str:
    return (get_env("JOBQUEST_SITE_ORIGIN", DEFAULT_SITE_ORIGIN) or DEFAULT_SITE_ORIGIN).rstrip("/")


def http_timeout() -> float:
    raw = get_env("JOBQUEST_HTTP_TIMEOUT", "15")
    try:
        return float(raw)
    except ValueError:
        log.warning("Invalid JOBQUEST_HTTP_TIMEOUT=%r, using 15s", raw)
        return 15.0


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        else:
            out[key] = value
    return out


def load_settings(path: Path | None = None) -> dict[str, Any]:
    """Defaults overlaid with config/settings.yaml when present."""
    path = path or SETTINGS_PATH
    if not path.exists():
        return copy.deepcopy(DEFAULT_SETTINGS)
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        log.warning("Ignoring %s: expected a mapping, got %s", path.name, type(data).__name__)
        return copy.deepcopy(DEFAULT_SETTINGS)
    return _merge(DEFAULT_SETTINGS, data)


def ensure_dirs() -> None:
    for d in (CONFIG_DIR, DATA_DIR, EXPORTS_DIR):
        d.mkdir(parents=True, exist_ok=True)
