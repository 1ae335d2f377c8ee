"""
Load .env from project root; expose SKILLMAP_OUTPUT_DIR, SKILLMAP_STORE_URL, SKILLMAP_FEEDBACK_URL, etc.
Call load_env() before using in main or other modules.
"""
from __future__ import annotations

import os
from pathlib import Path

DEFAULT_STORE_URL = "http://localhost:8787/api"
DEFAULT_AUTOSAVE_SECONDS = 3.0
DEFAULT_HTTP_TIMEOUT = 10.0


def _project_root() -> Path:
    """Project root (directory containing skillmap/ or output/)."""
    p = Path(__file__).resolve()
    # skillmap/config/config.py -> two levels up
    for _ in range(3):
        p = p.parent
        if (p / "output").is_dir() or (p / "skillmap").is_dir():
            return p
    return Path.cwd()


def load_env() -> None:
    """Load env vars from project root .env if present."""
    root = _project_root()
    env_file = root / ".env"
    if not env_file.is_file():
        return
    for line in env_file.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        k, _, v = line.partition("=")
        k, v = k.strip(), v.strip().strip("'\"")
        if k and v:
            os.environ.setdefault(k, v)


def _positive_float(raw: str | None, default: float) -> float:
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def get_output_dir() -> Path:
    """Export root; default <project_root>/output."""
    load_env()
    out = os.environ.get("SKILLMAP_OUTPUT_DIR")
    if out:
        return Path(out)
    return _project_root() / "output"


def get_store_url() -> str:
    """Base URL of the map persistence service (no trailing slash)."""
    load_env()
    return (os.environ.get("SKILLMAP_STORE_URL") or DEFAULT_STORE_URL).rstrip("/")


def get_feedback_url() -> str:
    """Feedback relay endpoint; defaults to <store_url>/feedback."""
    load_env()
    url = os.environ.get("SKILLMAP_FEEDBACK_URL")
    if url:
        return url
    return get_store_url() + "/feedback"


def get_autosave_interval() -> float:
    """Seconds between autosave ticks (SKILLMAP_AUTOSAVE_SECONDS). Default: 3."""
    load_env()
    return _positive_float(os.environ.get("SKILLMAP_AUTOSAVE_SECONDS"), DEFAULT_AUTOSAVE_SECONDS)


def get_http_timeout() -> float:
    """Timeout in seconds for store/feedback requests (SKILLMAP_HTTP_TIMEOUT). Default: 10."""
    load_env()
    return _positive_float(os.environ.get("SKILLMAP_HTTP_TIMEOUT"), DEFAULT_HTTP_TIMEOUT)
