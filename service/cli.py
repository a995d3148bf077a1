# service/cli.py
"""
job-hunter command line.

    job-hunter [--config PATH] run [--dry-run] [--kwargs k=v ...]
    job-hunter [--config PATH] validate-config
    job-hunter [--config PATH] list-sources
    job-hunter reset-tracker [--tracker-path PATH]

`run` exits 0 on a completed run (even if some sources failed), 1 when the
configuration is unusable or the pipeline crashed, 130 on Ctrl-C.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import time
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any

from modules.job_hunter import main as _job_hunter
from modules.job_hunter.lib import tracker as _tracker
from modules.job_hunter.lib.config import ConfigError, Settings
from modules.job_hunter.lib.models import RunReport
from service import logging_utils as L

LOG = logging.getLogger("service.cli")


def _setup_logging() -> None:
    if logging.getLogger().handlers:
        return
    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _now_iso() -> str:
    return datetime.now().astimezone().isoformat()


# ---- argument helpers -------------------------------------------------------


def _kv_item(raw: str) -> tuple[str, Any]:
    """argparse type for --kwargs: 'key=value', value parsed as JSON when it is JSON."""
    key, sep, value = raw.partition("=")
    key = key.strip()
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected key=value, got {raw!r}")
    value = value.strip()
    try:
        return key, json.loads(value)
    except ValueError:
        return key, value


def _settings_kwargs(args: argparse.Namespace) -> dict[str, Any]:
    kwargs = dict(getattr(args, "kwargs", None) or [])
    if args.config:
        kwargs["config_path"] = args.config
    return kwargs


def _load_settings(args: argparse.Namespace) -> Settings:
    # File checks only; the API key matters only when a run is about to start.
    return Settings.from_env_and_kwargs({**_settings_kwargs(args), "dry_run": True})


# ---- output -----------------------------------------------------------------


def _print_table(headers: Sequence[str], rows: Iterable[Sequence[str]]) -> None:
    rows = [list(r) for r in rows]
    widths = [max([len(h), *(len(r[i]) for r in rows)]) for i, h in enumerate(headers)]
    rule = "+" + "+".join("-" * (w + 2) for w in widths) + "+"

    def line(cells: Sequence[str]) -> str:
        return "| " + " | ".join(c.ljust(w) for c, w in zip(cells, widths)) + " |"

    print(rule)
    print(line(headers))
    print(rule)
    for r in rows:
        print(line(r))
    print(rule)


def _print_report(report: RunReport, output_dir: str) -> None:
    if report.dry_run:
        for p in report.new_postings:
            print(f"  [{p.source or 'unknown'}] {p.title}")
            print(f"    {p.url}")
        print(f"\n{report.new} postings would be analyzed.")
    else:
        print("\nResults:")
        for label, value in (
            ("Scraped", report.scraped),
            ("Filtered", report.filtered),
            ("New", report.new),
            ("Suitable", report.suitable),
            ("Files", report.files),
            ("Output dir", f"{output_dir}/"),
        ):
            print(f"  {label + ':':<11} {value}")
    for source, errors in sorted(report.errors_by_source.items()):
        print(f"  ! {source}: {len(errors)} error(s), first: {errors[0]}")


# ---- commands ---------------------------------------------------------------


def cmd_run(args: argparse.Namespace) -> int:
    started = time.monotonic()
    kwargs = _settings_kwargs(args)
    if args.dry_run:
        kwargs["dry_run"] = True
    LOG.debug("job_hunter run kwargs=%s", kwargs)

    try:
        report = _job_hunter.run(**kwargs)
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return 130
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        LOG.exception("job_hunter run crashed")
        print(f"ERROR: {e}", file=sys.stderr)
        L.write_error_log({
            "ts": _now_iso(),
            "where": "cli.run",
            "kwargs": kwargs,
            "error": repr(e),
            "elapsed_ms": int((time.monotonic() - started) * 1000),
        })
        return 1

    _print_report(report, str(kwargs.get("output_dir") or "output"))
    L.write_activity_log({
        "ts": _now_iso(),
        "event": "cli_run",
        "dry_run": report.dry_run,
        "new": report.new,
        "suitable": report.suitable,
        "source_errors": sorted(report.errors_by_source),
        "elapsed_ms": int((time.monotonic() - started) * 1000),
    })
    return 0


def cmd_validate_config(args: argparse.Namespace) -> int:
    try:
        settings = _load_settings(args)
    except ConfigError as e:
        print(f"ERROR: configuration invalid: {e}", file=sys.stderr)
        return 1
    print(f"OK: {settings.config_path} is valid ({len(settings.sources)} sources).")
    return 0


def cmd_list_sources(args: argparse.Namespace) -> int:
    try:
        settings = _load_settings(args)
    except ConfigError as e:
        print(f"ERROR: failed to list sources: {e}", file=sys.stderr)
        return 1
    _print_table(("SOURCE", "KIND", "URL"), ((s.id, s.kind, s.url) for s in settings.sources))
    return 0


def cmd_reset_tracker(args: argparse.Namespace) -> int:
    try:
        _tracker.reset(args.tracker_path)
    except OSError as e:
        print(f"ERROR: could not reset {args.tracker_path}: {e}", file=sys.stderr)
        return 1
    print(f"OK: tracker reset ({args.tracker_path}).")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="job-hunter",
        description="Scrape job postings, skip the ones already seen, and draft cover letters.",
    )
    parser.add_argument("--config", help="Config file (default: $JOB_HUNTER_CONFIG or ./config.json).")
    sub = parser.add_subparsers(dest="cmd", required=True)

    run = sub.add_parser("run", help="Run the pipeline once.")
    run.add_argument(
        "--dry-run",
        action="store_true",
        help="Scrape, filter and dedupe only; no OpenAI calls, no tracker update.",
    )
    run.add_argument(
        "--kwargs",
        type=_kv_item,
        nargs="*",
        metavar="k=v",
        help="Settings overrides (tracker_path, output_dir, resume_path, ...); JSON values allowed.",
    )
    run.set_defaults(func=cmd_run)

    sub.add_parser("validate-config", help="Check the config file and exit.").set_defaults(
        func=cmd_validate_config
    )
    sub.add_parser("list-sources", help="Print the configured sources.").set_defaults(func=cmd_list_sources)

    reset = sub.add_parser("reset-tracker", help="Forget every processed posting URL.")
    reset.add_argument("--tracker-path", default="applied.json", help="Tracker file (default: applied.json).")
    reset.set_defaults(func=cmd_reset_tracker)

    return parser


def main(argv: Iterable[str] | None = None) -> int:
    _setup_logging()
    args = _build_parser().parse_args(list(argv) if argv is not None else None)
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
