"""
Engine for one job_hunter run: scrape every source, filter, dedupe against
the tracker, then (full mode) classify, draft and write.

Features:
  - Sequential scraping over one shared browser session
  - Per-source failure isolation (a broken source yields zero postings)
  - Change tokens probed and persisted every run, whatever the outcome
  - Tracker committed exactly once, after the last external call
  - Dependency injection for testability (stores, session, scrapers, analyst, writer)
  - Structured activity/error records via `logging_bridge`

The run is a straight line; nothing is retried. A crash before the commit
leaves the tracker untouched, so those postings are evaluated again on the
next run.
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable
from contextlib import AbstractContextManager
from typing import Any

from . import filters, logging_bridge
from .browser import BrowserSession, open_browser
from .config import Settings, SourceConfig
from .http_client import HttpClient
from .models import Assessment, Posting, RunReport, ScrapeOptions, ScrapeResult
from .scrapers.base import BaseScraper
from .site_state import SiteStateStore
from .tracker import Tracker

log = logging.getLogger(__name__)

SessionFactory = Callable[[bool], AbstractContextManager[BrowserSession]]
Probe = Callable[[str], str | None]


# =============================================================================
# DEFAULT COLLABORATORS (PRODUCTION)
# =============================================================================
def _default_get_scraper(kind: str) -> type[BaseScraper]:
    """Resolve scraper class from registry; unknown kinds get the no-op scraper."""
    from .scrapers import resolve

    return resolve(kind)


def _default_probe(client: HttpClient) -> Probe:
    def probe(url: str) -> str | None:
        return client.head_header(url, "Last-Modified")

    return probe


def _default_analyst(settings: Settings) -> Any:
    from .llm import OpenAIAnalyst

    return OpenAIAnalyst(settings.openai_model)


def _default_writer(settings: Settings) -> Any:
    from .render import MarkdownWriter

    return MarkdownWriter(settings.output_dir)


def load_text_file(path: str, description: str) -> str | None:
    """Read a profile file (resume/goals); missing or blank files only warn."""
    if not os.path.exists(path):
        log.warning("%s not found: %s", description, path)
        return None
    with open(path, encoding="utf-8") as f:
        text = f.read().strip()
    if not text:
        log.warning("%s is empty: %s", description, path)
        return None
    log.info("Loaded %s (%d lines)", description, len(text.splitlines()))
    return text


# =============================================================================
# MAIN ORCHESTRATOR
# =============================================================================
def run_once(
    settings: Settings,
    *,
    tracker: Tracker | None = None,
    state_store: SiteStateStore | None = None,
    session_factory: SessionFactory | None = None,
    get_scraper: Callable[[str], type[BaseScraper]] | None = None,
    probe: Probe | None = None,
    analyst: Any = None,
    writer: Any = None,
) -> RunReport:
    """
    Run one complete pipeline.

    Args:
        settings: validated configuration.
        tracker: seen-URL store (default: loaded from settings.tracker_path).
        state_store: change-token store (default: settings.site_state_path).
        session_factory: context manager factory yielding a browser session.
        get_scraper: kind -> scraper class override (for testing).
        probe: url -> Last-Modified value (or None).
        analyst: object with classify_location_batch / analyze_suitability /
                 draft_cover_letter.
        writer: object with write_posting / write_summary.

    Returns:
        RunReport with counts; in dry mode it stops after dedupe.
    """
    start_ns = time.perf_counter_ns()
    report = RunReport(dry_run=settings.dry_run)

    tracker = tracker if tracker is not None else Tracker.load(settings.tracker_path)
    state_store = state_store or SiteStateStore(settings.site_state_path)
    session_factory = session_factory or open_browser
    get_scraper_func = get_scraper or _default_get_scraper
    probe_client = None
    if probe is None:
        probe_client = HttpClient(timeout=5.0)
        probe = _default_probe(probe_client)

    # -------------------------------------------------------------------------
    # 1. LOAD CONFIG: merge persisted change tokens into the sources
    # -------------------------------------------------------------------------
    tokens = state_store.load()
    sources = [src.with_change_token(tokens.get(src.id)) for src in settings.sources]
    logging_bridge.activity({
        "component": "job_hunter.engine",
        "op": "start",
        "dry_run": settings.dry_run,
        "sources": [s.id for s in sources],
        "keywords": len(settings.include_keywords),
        "seen_urls": len(tracker),
    })

    # -------------------------------------------------------------------------
    # 2. SCRAPE (one browser session, released on every path)
    # -------------------------------------------------------------------------
    log.info("=== STEP 1: Scraping ===")
    try:
        with session_factory(settings.headless) as session:
            results = _scrape_all(session, sources, settings.scrape_options(), get_scraper_func, probe)
    finally:
        if probe_client is not None:
            probe_client.close()

    refreshed = {r.source: r.change_token for r in results if r.change_token}
    _save_site_state(state_store, refreshed)

    all_postings: list[Posting] = [p for r in results for p in r.items]
    report.scraped = len(all_postings)
    report.errors_by_source = {r.source: r.errors for r in results if r.errors}
    report.durations_us = {r.source: r.duration_us for r in results}
    log.info("Total postings scraped: %d", report.scraped)

    # -------------------------------------------------------------------------
    # 3. FILTER: keyword allowlist, then optional location triage
    # -------------------------------------------------------------------------
    log.info("=== STEP 2: Filtering ===")
    filtered = filters.apply_allowlist(settings.include_keywords, all_postings)
    if settings.location_filter:
        log.info("=== STEP 2b: Location filter ===")
        analyst = analyst or _default_analyst(settings)
        filtered = filters.filter_us_postings(filtered, analyst)
    report.filtered = len(filtered)

    # -------------------------------------------------------------------------
    # 4. DEDUPE against the tracker
    # -------------------------------------------------------------------------
    log.info("=== STEP 3: Deduplicating ===")
    new_postings = tracker.filter_new(filtered)
    report.new = len(new_postings)
    report.new_postings = new_postings

    # -------------------------------------------------------------------------
    # 5. DRY MODE: report and stop (tracker untouched)
    # -------------------------------------------------------------------------
    if settings.dry_run:
        log.info("=== DRY RUN - skipping analysis ===")
        _log_summary(report, start_ns)
        return report

    analyst = analyst or _default_analyst(settings)
    writer = writer or _default_writer(settings)
    resume = load_text_file(settings.resume_path, "Resume") or ""
    goals = load_text_file(settings.goals_path, "Goals") or ""
    if not resume or not goals:
        log.warning("Resume or goals missing - analysis will be poor quality")

    # -------------------------------------------------------------------------
    # 6. CLASSIFY: failures drop the posting from consideration
    # -------------------------------------------------------------------------
    log.info("=== STEP 4: Analyzing suitability ===")
    assessments = [a for a in (_assess(analyst, p, resume, goals) for p in new_postings) if a is not None]
    suitable = [a for a in assessments if a.suitable]
    report.analyzed = len(assessments)
    report.suitable = len(suitable)
    report.suitable_postings = [a.posting for a in suitable]
    log.info("Suitable postings: %d of %d analyzed", report.suitable, report.analyzed)

    # -------------------------------------------------------------------------
    # 7. DRAFT + WRITE: a failed draft still gets written, without a letter
    # -------------------------------------------------------------------------
    log.info("=== STEP 5: Writing cover letters ===")
    for assessment in suitable:
        letter = _draft(analyst, assessment, resume, goals)
        if _write_posting(writer, assessment, letter):
            report.files += 1
    _write_summary(writer, report)

    # -------------------------------------------------------------------------
    # 8. COMMIT: every post-dedupe URL, suitable or not
    # -------------------------------------------------------------------------
    try:
        tracker.commit(p.url for p in new_postings)
    except OSError as e:
        logging_bridge.error({
            "component": "job_hunter.engine",
            "op": "tracker_commit",
            "path": settings.tracker_path,
            "error": repr(e),
        })

    # -------------------------------------------------------------------------
    # 9. DONE
    # -------------------------------------------------------------------------
    log.info("=== DONE ===")
    _log_summary(report, start_ns)
    return report


# =============================================================================
# STAGE HELPERS
# =============================================================================
def _scrape_all(
    session: BrowserSession,
    sources: list[SourceConfig],
    options: ScrapeOptions,
    get_scraper: Callable[[str], type[BaseScraper]],
    probe: Probe,
) -> list[ScrapeResult]:
    results: list[ScrapeResult] = []
    for spec in sources:
        t0 = time.perf_counter_ns()
        result = ScrapeResult(source=spec.id)
        try:
            scraper = get_scraper(spec.kind)()
            result.items = list(scraper.scrape(session, spec, options))
        except Exception as e:
            result.errors.append(repr(e))
            logging_bridge.error({
                "component": "job_hunter.engine",
                "op": "scrape_source",
                "source": spec.id,
                "kind": spec.kind,
                "url": spec.url,
                "error": repr(e),
            })
        result.duration_us = int((time.perf_counter_ns() - t0) // 1000)

        result.change_token = _probe_token(probe, spec)
        if result.change_token:
            log.info("  Last-Modified for %s: %s", spec.label, result.change_token)

        logging_bridge.activity({
            "component": "job_hunter.engine",
            "op": "scraped_source",
            "source": spec.id,
            "kind": spec.kind,
            "found": len(result.items),
            "errors": len(result.errors),
            "previous_token": spec.last_modified,
            "change_token": result.change_token,
            "duration_us": result.duration_us,
        })
        results.append(result)
    return results


def _probe_token(probe: Probe, spec: SourceConfig) -> str | None:
    try:
        return probe(spec.url)
    except Exception as e:
        log.debug("HEAD request failed for %s: %s", spec.url, e)
        return None


def _save_site_state(state_store: SiteStateStore, refreshed: dict[str, str]) -> None:
    # Re-read so the merge starts from what is on disk now.
    try:
        state_store.save({**state_store.load(), **refreshed})
    except OSError as e:
        logging_bridge.error({
            "component": "job_hunter.engine",
            "op": "save_site_state",
            "path": state_store.path,
            "error": repr(e),
        })


def _assess(analyst: Any, posting: Posting, resume: str, goals: str) -> Assessment | None:
    reason = "no result"
    try:
        assessment = analyst.analyze_suitability(posting, resume, goals)
    except Exception as e:
        assessment = None
        reason = repr(e)
    if assessment is None:
        logging_bridge.error({
            "component": "job_hunter.engine",
            "op": "classify",
            "title": posting.title,
            "url": posting.url,
            "error": reason,
        })
    return assessment


def _draft(analyst: Any, assessment: Assessment, resume: str, goals: str) -> str | None:
    reason = "no result"
    try:
        letter = analyst.draft_cover_letter(assessment, resume, goals)
    except Exception as e:
        letter = None
        reason = repr(e)
    if letter is None:
        logging_bridge.error({
            "component": "job_hunter.engine",
            "op": "draft",
            "title": assessment.posting.title,
            "url": assessment.posting.url,
            "error": f"{reason}; writing posting without a cover letter",
        })
    return letter


def _write_posting(writer: Any, assessment: Assessment, letter: str | None) -> bool:
    try:
        writer.write_posting(assessment, letter)
        return True
    except Exception as e:
        logging_bridge.error({
            "component": "job_hunter.engine",
            "op": "write_posting",
            "title": assessment.posting.title,
            "url": assessment.posting.url,
            "error": repr(e),
        })
        return False


def _write_summary(writer: Any, report: RunReport) -> None:
    try:
        writer.write_summary(report.suitable_postings, report.new, report.scraped)
    except Exception as e:
        logging_bridge.error({
            "component": "job_hunter.engine",
            "op": "write_summary",
            "error": repr(e),
        })


def _log_summary(report: RunReport, start_ns: int) -> None:
    logging_bridge.activity({
        "component": "job_hunter.engine",
        "op": "summary",
        "dry_run": report.dry_run,
        "scraped": report.scraped,
        "filtered": report.filtered,
        "new": report.new,
        "analyzed": report.analyzed,
        "suitable": report.suitable,
        "files": report.files,
        "errors_by_source": report.errors_by_source,
        "durations_us": report.durations_us,
        "total_us": int((time.perf_counter_ns() - start_ns) // 1000),
    })
