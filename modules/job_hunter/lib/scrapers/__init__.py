# modules/job_hunter/lib/scrapers/__init__.py
from __future__ import annotations

# Importing the modules registers their scrapers.
from . import css, discourse, hn, reddit, reddit_hiring, stub
from .base import BaseScraper, ScraperError
from .registry import all_kinds, get, resolve

__all__ = [
    "BaseScraper",
    "ScraperError",
    "all_kinds",
    "css",
    "discourse",
    "get",
    "hn",
    "reddit",
    "reddit_hiring",
    "resolve",
    "stub",
]
