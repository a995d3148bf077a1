"""
Seen-URL tracker: every posting URL the pipeline has processed.

Persisted as a JSON array of strings. Loaded once at run start, committed
once at run end by the engine. Unreadable or malformed files degrade to an
empty set (start fresh) instead of failing the run.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterable

from .models import Posting
from .utils import atomic_write_json

log = logging.getLogger(__name__)


class Tracker:
    def __init__(self, path: str, seen: Iterable[str] | None = None) -> None:
        self.path = path
        self._seen: set[str] = set(seen or ())

    # ---- lifecycle ----
    @classmethod
    def load(cls, path: str) -> Tracker:
        return cls(path, _read_url_set(path))

    def commit(self, urls: Iterable[str]) -> None:
        """Merge `urls` into the seen-set and persist it."""
        before = len(self._seen)
        self._seen.update(u for u in urls if u)
        _write_url_set(self.path, self._seen)
        log.info("Saved %d processed URLs to %s (+%d)", len(self._seen), self.path, len(self._seen) - before)

    # ---- queries ----
    @property
    def seen(self) -> frozenset[str]:
        return frozenset(self._seen)

    def __len__(self) -> int:
        return len(self._seen)

    def is_new(self, url: str) -> bool:
        return url not in self._seen

    def filter_new(self, postings: Iterable[Posting]) -> list[Posting]:
        """Drop postings whose URL was processed in an earlier run; keeps order."""
        postings = list(postings)
        result = [p for p in postings if self.is_new(p.url)]
        log.info(
            "Tracker: %d -> %d new postings (%d already seen)",
            len(postings),
            len(result),
            len(postings) - len(result),
        )
        return result


def reset(path: str) -> None:
    """Forget every processed URL (the only way the set ever shrinks)."""
    _write_url_set(path, set())
    log.info("Reset tracker at %s", path)


# ---- Internal utilities -----------------------------------------------------


def _read_url_set(path: str) -> set[str]:
    if not os.path.exists(path):
        log.info("%s not found - starting fresh", path)
        return set()
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        log.error("Failed to read %s - starting fresh: %s", path, e)
        return set()
    if not isinstance(data, list):
        log.warning("%s did not contain a list of URLs - starting fresh", path)
        return set()
    urls = {u for u in data if isinstance(u, str) and u}
    log.info("Loaded %d previously processed URLs from %s", len(urls), path)
    return urls


def _write_url_set(path: str, urls: set[str]) -> None:
    atomic_write_json(path, sorted(urls))
