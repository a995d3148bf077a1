from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Posting:
    """
    A single candidate posting as returned by scrapers (pre-dedupe).
    Dedupe is performed against the tracker on `url` alone.
    """

    url: str  # absolute URL, or a synthetic id like "hn-comment-3"
    title: str
    body: str
    source: str  # adapter kind that produced it, e.g. "hn", "css"


@dataclass(frozen=True)
class ScrapeOptions:
    """Run-wide knobs handed to every scraper."""

    request_delay_ms: int = 2000
    max_postings_per_site: int = 50


@dataclass
class ScrapeResult:
    """
    Result bundle for a single configured source.
    - items: everything the scraper returned (NOT filtered for 'new').
    - errors: failures the engine caught for this source.
    - change_token: freshly probed Last-Modified value, if any.
    """

    source: str
    items: list[Posting] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    change_token: str | None = None
    duration_us: int = 0


@dataclass(frozen=True)
class Assessment:
    """Suitability verdict for one posting."""

    posting: Posting
    suitable: bool
    reasoning: str = ""


@dataclass
class RunReport:
    """Counts and selected postings for one pipeline run."""

    dry_run: bool
    scraped: int = 0
    filtered: int = 0
    new: int = 0
    analyzed: int = 0
    suitable: int = 0
    files: int = 0
    new_postings: list[Posting] = field(default_factory=list)
    suitable_postings: list[Posting] = field(default_factory=list)
    errors_by_source: dict[str, list[str]] = field(default_factory=dict)
    durations_us: dict[str, int] = field(default_factory=dict)
