from __future__ import annotations

import os

_TRUTHY = {"1", "true", "yes", "on"}


def debug_enabled() -> bool:
    """Default for the engine's debug flag when the caller doesn't pass one."""

    return os.environ.get("SAM_DEBUG", "").strip().lower() in _TRUTHY


def get_history_stream_name() -> str | None:
    # Stream name for history entries; unset keeps history in the log only.
    name = os.environ.get("SAM_HISTORY_STREAM", "").strip()
    return name or None


def get_redis_url() -> str:
    return os.environ.get("REDIS_URL", "redis://localhost:6379/0")
