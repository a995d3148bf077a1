# service/logging_utils.py
"""
Structured JSONL logs for job_hunter runs.

Two streams, one file per stream per day:
    <LOG_DIR>/<ACTIVITY_LOG_PREFIX>-YYYY-MM-DD.jsonl
    <LOG_DIR>/<ERROR_LOG_PREFIX>-YYYY-MM-DD.jsonl

Directory and prefixes are read from the environment on every write, so a
test (or a long-lived process) can redirect them at any time. Records are
redacted before they touch disk and never mutated in place.
"""

from __future__ import annotations

import datetime as _dt
import json
import os
import socket
from collections.abc import Collection
from dataclasses import dataclass
from typing import Any

REDACTED = "***REDACTED***"

# Key substrings whose values never reach disk (case-insensitive)
SECRET_KEY_PARTS = frozenset({
    "password",
    "token",
    "apikey",
    "api_key",
    "secret",
    "authorization",
    "cookie",
})

# Exact key names that contain a secret-looking part but are safe to log
PUBLIC_KEYS = frozenset({"change_token", "change_tokens", "previous_token", "max_tokens"})

_META = {"host": socket.gethostname(), "pid": os.getpid()}


@dataclass(frozen=True)
class _Stream:
    prefix_env: str
    default_prefix: str

    def path(self, day: _dt.date | None = None) -> str:
        day = day or _dt.date.today()
        prefix = os.getenv(self.prefix_env, self.default_prefix)
        return os.path.join(os.getenv("LOG_DIR", "./logs"), f"{prefix}-{day.isoformat()}.jsonl")


ACTIVITY = _Stream("ACTIVITY_LOG_PREFIX", "activity")
ERRORS = _Stream("ERROR_LOG_PREFIX", "error")


# ---- Public API --------------------------------------------------------------


def write_activity_log(record: dict[str, Any]) -> None:
    """Append one activity record. I/O and serialization errors propagate."""
    _append(ACTIVITY.path(), record)


def write_error_log(record: dict[str, Any]) -> None:
    """Append one error record; same format as the activity stream."""
    _append(ERRORS.path(), record)


def get_activity_log_path() -> str:
    return ACTIVITY.path()


def redact(record: dict[str, Any], keys: Collection[str] | None = None) -> dict[str, Any]:
    """Deep copy of `record` with secret-looking keys and bearer values scrubbed."""
    return _scrub(record, keys or SECRET_KEY_PARTS)


# ---- Internal helpers --------------------------------------------------------


def _is_secret_key(name: str, parts: Collection[str]) -> bool:
    lowered = name.lower()
    return lowered not in PUBLIC_KEYS and any(part in lowered for part in parts)


def _scrub(value: Any, parts: Collection[str]) -> Any:
    if isinstance(value, dict):
        return {
            k: REDACTED if isinstance(k, str) and _is_secret_key(k, parts) else _scrub(v, parts)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_scrub(v, parts) for v in value]
    if isinstance(value, str) and value.lower().startswith("bearer "):
        return f"{value.split(' ', 1)[0]} {REDACTED}"
    return value


def _append(path: str, record: dict[str, Any]) -> None:
    payload = {**_scrub(record, SECRET_KEY_PARTS), "_meta": dict(_META)}
    # default=str: exceptions, paths and dataclasses still produce a line
    line = json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str) + "\n"

    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    fd = os.open(path, os.O_CREAT | os.O_APPEND | os.O_WRONLY, 0o644)
    try:
        os.write(fd, line.encode("utf-8"))
    finally:
        os.close(fd)
