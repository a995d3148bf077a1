from __future__ import annotations

import dataclasses
import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .models import ScrapeOptions
from .utils import truthy

DEFAULT_CONFIG_PATH = "config.json"
DEFAULT_MODEL = "gpt-4o-mini"


# -----------------------------
# Exceptions
# -----------------------------
class ConfigError(ValueError):
    """Raised when provided kwargs/env/config file cannot form a valid Settings."""


# -----------------------------
# Models
# -----------------------------
@dataclass(frozen=True)
class SourceConfig:
    """
    One configured source.
    - id: stable key used in persisted state (e.g. "hn", "elixir-forum")
    - kind: scraper family (e.g. "hn", "discourse", "reddit_hiring", "css")
    - params: kind-specific fields (listing_selector, content_selector,
              base_url, link_attr, hiring_pattern, ...)
    - last_modified: injected from the site-state store at run start;
                     never read from the config file.
    """

    id: str
    kind: str
    url: str
    name: str = ""
    params: dict[str, Any] = field(default_factory=dict)
    last_modified: str | None = None

    @property
    def label(self) -> str:
        return self.name or self.id

    def with_change_token(self, token: str | None) -> SourceConfig:
        return dataclasses.replace(self, last_modified=token)


@dataclass
class Settings:
    """
    Canonical configuration for a 'job_hunter' run.

    Source list and filtering knobs come from a JSON config file; state,
    output and profile paths come from kwargs (CLI) with sensible defaults.
    """

    config_path: str = DEFAULT_CONFIG_PATH
    sources: list[SourceConfig] = field(default_factory=list)

    # Filtering
    include_keywords: list[str] = field(default_factory=list)
    location_filter: bool = False

    # Scraping
    request_delay_ms: int = 2000
    max_postings_per_site: int = 50
    headless: bool = True

    # Analysis
    openai_model: str = DEFAULT_MODEL
    resume_path: str = "resume.md"
    goals_path: str = "goals.md"

    # Persisted state + output
    tracker_path: str = "applied.json"
    site_state_path: str = "site-state.json"
    output_dir: str = "output"

    dry_run: bool = False

    # ------------- convenience -------------
    def scrape_options(self) -> ScrapeOptions:
        return ScrapeOptions(
            request_delay_ms=self.request_delay_ms,
            max_postings_per_site=self.max_postings_per_site,
        )

    # ------------- constructors -------------
    @classmethod
    def from_env_and_kwargs(cls, kwargs: Mapping[str, Any] | None) -> Settings:
        """
        Build Settings from kwargs + the JSON config file, with validation.

        Expected kwargs (all optional):

            config_path: str      # else $JOB_HUNTER_CONFIG, else "config.json"
            tracker_path: str = "applied.json"
            site_state_path: str = "site-state.json"
            output_dir: str = "output"
            resume_path: str = "resume.md"
            goals_path: str = "goals.md"
            dry_run: bool = false

        Raises ConfigError for anything that should stop a run before scraping.
        """
        kw = dict(kwargs or {})

        config_path = str(kw.get("config_path") or os.getenv("JOB_HUNTER_CONFIG") or DEFAULT_CONFIG_PATH)
        data = _load_json_object(config_path)

        try:
            request_delay_ms = int(data.get("request_delay_ms", 2000))
            max_postings = int(data.get("max_postings_per_site", 50))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Numeric setting is not an integer in {config_path}: {e}") from e

        keywords = data.get("include_keywords") or []
        if not isinstance(keywords, list) or not all(isinstance(k, str) for k in keywords):
            raise ConfigError("'include_keywords' must be a list of strings.")

        settings = cls(
            config_path=config_path,
            sources=_parse_sources_list(data.get("sources")),
            include_keywords=[k for k in keywords if k.strip()],
            location_filter=truthy(data.get("location_filter")),
            request_delay_ms=request_delay_ms,
            max_postings_per_site=max_postings,
            headless=truthy(data.get("headless", True)),
            openai_model=str(data.get("openai_model") or DEFAULT_MODEL),
            resume_path=str(kw.get("resume_path") or "resume.md"),
            goals_path=str(kw.get("goals_path") or "goals.md"),
            tracker_path=str(kw.get("tracker_path") or "applied.json"),
            site_state_path=str(kw.get("site_state_path") or "site-state.json"),
            output_dir=str(kw.get("output_dir") or "output"),
            dry_run=truthy(kw.get("dry_run")),
        )
        _validate_settings(settings)
        return settings


# -----------------------------
# Helpers
# -----------------------------
def _load_json_object(path: str) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"job_hunter config file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"job_hunter config file is invalid JSON: {path}") from e
    except OSError as e:
        raise ConfigError(f"job_hunter config file unreadable: {path} ({e})") from e
    if not isinstance(data, dict):
        raise ConfigError(f"job_hunter config must be a JSON object: {path}")
    return data


def _parse_sources_list(value: Any) -> list[SourceConfig]:
    """
    Parse the "sources" list into SourceConfig objects.
    Accepts: [{"id": "...", "kind": "...", "url": "...", "name": "...", "params": {...}}, ...]
    """
    if not value:
        return []
    if not isinstance(value, list):
        raise ConfigError("Expected 'sources' to be a list of source objects.")
    out: list[SourceConfig] = []
    for i, item in enumerate(value):
        if not isinstance(item, dict):
            raise ConfigError(f"sources[{i}] must be an object.")
        sid = str(item.get("id") or "").strip()
        kind = str(item.get("kind") or "").strip()
        url = str(item.get("url") or "").strip()
        params = item.get("params") or {}
        if not sid or not kind or not url:
            raise ConfigError(f"sources[{i}] requires 'id', 'kind' and 'url'.")
        if not isinstance(params, dict):
            raise ConfigError(f"sources[{i}].params must be an object.")
        out.append(
            SourceConfig(
                id=sid,
                kind=kind,
                url=url,
                name=str(item.get("name") or sid),
                params=dict(params),
            )
        )
    return out


def _validate_settings(s: Settings) -> None:
    if not s.sources:
        raise ConfigError(f"No sources configured in {s.config_path}")

    seen: set[str] = set()
    for src in s.sources:
        if src.id in seen:
            raise ConfigError(f"Duplicate source id {src.id!r}.")
        seen.add(src.id)

    if s.max_postings_per_site <= 0:
        raise ConfigError("'max_postings_per_site' must be >= 1.")
    if s.request_delay_ms < 0:
        raise ConfigError("'request_delay_ms' cannot be negative.")
    if not s.tracker_path.strip() or not s.site_state_path.strip():
        raise ConfigError("State paths cannot be empty.")

    # Full runs call OpenAI for every new posting; fail before scraping.
    if not s.dry_run and not os.getenv("OPENAI_API_KEY"):
        raise ConfigError("OPENAI_API_KEY environment variable not set (required unless dry_run).")
