from __future__ import annotations

from typing import Any

from .lib.config import Settings
from .lib.engine import run_once as _run_engine
from .lib.logging_bridge import activity as log_activity
from .lib.models import RunReport


def run(**kwargs: Any) -> RunReport:
    """
    Entry point for the 'job_hunter' module.

    Accepts kwargs (from the CLI), including:
      config_path: str = "config.json"  (or $JOB_HUNTER_CONFIG)
      tracker_path: str = "applied.json"
      site_state_path: str = "site-state.json"
      output_dir: str = "output"
      resume_path: str = "resume.md"
      goals_path: str = "goals.md"
      dry_run: bool = False

    Raises ConfigError before any scraping if the configuration is unusable.
    Returns the RunReport for the caller to print.
    """
    # Build validated settings from env + kwargs
    settings = Settings.from_env_and_kwargs(kwargs)

    log_activity({
        "component": "job_hunter.main",
        "op": "start",
        "config_path": settings.config_path,
        "kinds": sorted({s.kind for s in settings.sources}),
        "flags": {
            "dry_run": settings.dry_run,
            "location_filter": settings.location_filter,
            "headless": settings.headless,
        },
    })

    return _run_engine(settings)
