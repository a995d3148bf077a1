# modules/job_hunter/lib/__init__.py
from __future__ import annotations

# Re-export commonly-used types for convenience
from .config import ConfigError, Settings, SourceConfig
from .engine import run_once
from .models import Assessment, Posting, RunReport, ScrapeOptions, ScrapeResult

# Register the built-in scrapers.
from . import scrapers as _scrapers  # noqa: E402,F401  isort:skip

__all__ = [
    "Assessment",
    "ConfigError",
    "Posting",
    "RunReport",
    "ScrapeOptions",
    "ScrapeResult",
    "Settings",
    "SourceConfig",
    "run_once",
]
