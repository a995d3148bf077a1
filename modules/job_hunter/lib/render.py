from __future__ import annotations

import logging
import os
import re
import time
from collections.abc import Sequence
from datetime import datetime

from .models import Assessment, Posting

log = logging.getLogger(__name__)

SUMMARY_FILENAME = "_summary.md"


def sanitize_filename(title: str, max_len: int = 80) -> str:
    """Lowercase, hyphenated, filesystem-safe stem derived from a title."""
    s = re.sub(r"[^a-z0-9\s-]", "", (title or "").lower()).strip()
    s = re.sub(r"\s+", "-", s)
    s = re.sub(r"-+", "-", s)
    s = s[:max_len]
    return s.rstrip("-") or "posting"


def _timestamp() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M")


def build_posting_markdown(assessment: Assessment, cover_letter: str | None) -> str:
    p = assessment.posting
    return (
        f"# {p.title}\n\n"
        f"**URL:** {p.url}  \n"
        f"**Source:** {p.source or 'unknown'}  \n"
        f"**Processed:** {_timestamp()}\n\n"
        "---\n\n"
        "## Suitability Analysis\n\n"
        f"{assessment.reasoning or '_No analysis available._'}\n\n"
        "---\n\n"
        "## Cover Letter Draft\n\n"
        f"{cover_letter or '_No cover letter generated._'}\n\n"
        "---\n\n"
        "## Original Posting\n\n"
        f"{p.body}\n"
    )


def build_summary_markdown(suitable: Sequence[Posting], new_count: int, scraped_count: int) -> str:
    parts = [
        f"# Job Hunt Summary - {_timestamp()}\n",
        f"**Total scraped:** {scraped_count}  ",
        f"**New after filters:** {new_count}  ",
        f"**Suitable matches:** {len(suitable)}\n",
    ]
    if suitable:
        parts.append("## Suitable Postings\n")
        parts.extend(f"{i}. [{p.title}]({p.url})" for i, p in enumerate(suitable, start=1))
    else:
        parts.append("No suitable postings found this run.")
    return "\n".join(parts) + "\n"


class MarkdownWriter:
    """Writes one markdown file per suitable posting plus a run summary."""

    def __init__(self, output_dir: str) -> None:
        self.output_dir = output_dir

    def write_posting(self, assessment: Assessment, cover_letter: str | None) -> str:
        os.makedirs(self.output_dir, exist_ok=True)
        stem = sanitize_filename(assessment.posting.title)
        path = os.path.join(self.output_dir, f"{stem}.md")
        if os.path.exists(path):
            path = os.path.join(self.output_dir, f"{stem}-{int(time.time() * 1000)}.md")
        with open(path, "w", encoding="utf-8") as f:
            f.write(build_posting_markdown(assessment, cover_letter))
        log.info("Wrote: %s", path)
        return path

    def write_summary(self, suitable: Sequence[Posting], new_count: int, scraped_count: int) -> str:
        os.makedirs(self.output_dir, exist_ok=True)
        path = os.path.join(self.output_dir, SUMMARY_FILENAME)
        with open(path, "w", encoding="utf-8") as f:
            f.write(build_summary_markdown(suitable, new_count, scraped_count))
        log.info("Wrote summary: %s", path)
        return path
