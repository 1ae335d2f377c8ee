"""Config: load .env, expose SKILLMAP_OUTPUT_DIR, SKILLMAP_STORE_URL, SKILLMAP_FEEDBACK_URL, etc."""
from .config import (
    load_env,
    get_output_dir,
    get_store_url,
    get_feedback_url,
    get_autosave_interval,
    get_http_timeout,
)

__all__ = [
    "load_env",
    "get_output_dir",
    "get_store_url",
    "get_feedback_url",
    "get_autosave_interval",
    "get_http_timeout",
]
