# modules/job_hunter/lib/scrapers/registry.py
"""
kind -> scraper class lookup.

Scraper modules register themselves on import (see scrapers/__init__.py).
Kinds are matched case-insensitively. `resolve` is what the engine uses:
a config naming an unknown kind gets the fallback scraper, which logs and
returns nothing, instead of failing the whole run.
"""

from __future__ import annotations

from .base import BaseScraper

_SCRAPERS: dict[str, type[BaseScraper]] = {}
_fallback: type[BaseScraper] | None = None


def _normalize(kind: str | None) -> str:
    return (kind or "").strip().lower()


def register(cls: type[BaseScraper]) -> type[BaseScraper]:
    """Class decorator. Re-registering the same class is a no-op; a clash raises."""
    kind = _normalize(getattr(cls, "kind", None))
    if not kind:
        raise ValueError(f"{cls.__name__} has no 'kind'; cannot register it.")
    existing = _SCRAPERS.setdefault(kind, cls)
    if existing is not cls:
        raise ValueError(f"Kind {kind!r} is taken by {existing.__name__}; refusing {cls.__name__}.")
    return cls


def register_fallback(cls: type[BaseScraper]) -> type[BaseScraper]:
    """Class decorator: the scraper `resolve` hands out for unregistered kinds."""
    global _fallback
    _fallback = cls
    return cls


def get(kind: str) -> type[BaseScraper]:
    """Strict lookup; KeyError for unknown kinds."""
    try:
        return _SCRAPERS[_normalize(kind)]
    except KeyError:
        raise KeyError(f"No scraper registered for kind {kind!r}.") from None


def resolve(kind: str) -> type[BaseScraper]:
    """Lenient lookup; unknown kinds map to the fallback when one is registered."""
    cls = _SCRAPERS.get(_normalize(kind))
    if cls is not None:
        return cls
    if _fallback is None:
        return get(kind)
    return _fallback


def all_kinds() -> dict[str, type[BaseScraper]]:
    """Snapshot of the registered kinds."""
    return dict(_SCRAPERS)
