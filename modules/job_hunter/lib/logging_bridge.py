from __future__ import annotations

import logging
from typing import Any

from service import logging_utils as _logging_backend

_activity_log = logging.getLogger("job_hunter.activity")
_error_log = logging.getLogger("job_hunter.error")


def activity(record: dict[str, Any]) -> None:
    """
    Write a structured activity record to the JSONL activity log and echo a
    short form to stdlib logging. Falls back to stdlib only if the file
    write fails.
    """
    payload = _logging_backend.redact(record)
    _activity_log.debug("%s", payload)
    try:
        _logging_backend.write_activity_log(payload)
    except Exception:
        _activity_log.info("%s", payload)


def error(record: dict[str, Any]) -> None:
    """
    Write a structured error record to the JSONL error log, and always to
    stdlib logging at WARNING so failures are visible on the console.
    """
    payload = _logging_backend.redact(record)
    _error_log.warning("%s", payload)
    try:
        _logging_backend.write_error_log(payload)
    except Exception:
        _error_log.exception("error log write failed")
