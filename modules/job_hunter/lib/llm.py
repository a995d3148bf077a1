# ruff: noqa: E501
"""
OpenAI-backed analyst: location triage, suitability verdicts and cover
letter drafts. Every method returns None on failure (already logged);
the engine decides what a failure means for the pipeline.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Sequence

from modules._shared.utils import LLMError, OpenAIChat

from .models import Assessment, Posting
from .utils import truncate_words

log = logging.getLogger(__name__)

_FENCE_OPEN_RE = re.compile(r"^```(?:json)?\s*")
_FENCE_CLOSE_RE = re.compile(r"\s*```$")
_SUITABLE_RE = re.compile(r"SUITABLE:\s*YES", re.I)


def strip_code_fences(s: str) -> str:
    """Remove the ```json ... ``` wrapper models like to add."""
    s = _FENCE_OPEN_RE.sub("", s.strip())
    return _FENCE_CLOSE_RE.sub("", s).strip()


def parse_flags(raw: str, expected: int) -> list[bool]:
    """
    Parse a JSON array of booleans of length `expected`.
    Anything else yields all-True so a bad reply never drops postings.
    """
    try:
        parsed = json.loads(strip_code_fences(raw))
    except ValueError:
        log.warning("Failed to parse location classification: %r", raw[:200])
        return [True] * expected
    if not isinstance(parsed, list) or len(parsed) != expected:
        got = len(parsed) if isinstance(parsed, list) else type(parsed).__name__
        log.warning("Location batch: wrong shape - expected %d flags, got %s", expected, got)
        return [True] * expected
    return [v is not False for v in parsed]


class OpenAIAnalyst:
    """Implements the classification and drafting collaborators."""

    def __init__(self, model: str, chat: OpenAIChat | None = None) -> None:
        self.model = model
        self._chat = chat or OpenAIChat(model=model)

    # ---- location ----
    def classify_location_batch(self, titles: Sequence[str]) -> list[bool] | None:
        """True = open to US-based workers. None when the API call failed."""
        numbered = "\n".join(f"{i}. {t}" for i, t in enumerate(titles, start=1))
        prompt = (
            "Classify each job posting by whether it is available to a worker in the United States. "
            "Respond with ONLY a JSON array of booleans.\n\n"
            "true  = available to US workers (US location, unrestricted remote, or any US option)\n"
            "false = clearly restricted to locations outside the US\n\n"
            f"Postings:\n{numbered}\n\n"
            f"Respond with ONLY a JSON array like [true, false, ...] of exactly {len(titles)} items."
        )
        try:
            raw = self._chat.chat(prompt)
        except LLMError as e:
            log.warning("Location classification failed: %s", e)
            return None
        return parse_flags(raw, len(titles))

    # ---- suitability ----
    def analyze_suitability(self, posting: Posting, resume: str, goals: str) -> Assessment | None:
        log.info("Analyzing suitability: %s", posting.title)
        prompt = (
            "You are a career advisor. Evaluate whether this job posting is a good match for the "
            "candidate based on their resume and goals.\n\n"
            f"## Job Posting\nTitle: {posting.title}\nURL: {posting.url}\n\n"
            f"{truncate_words(posting.body, 3000)}\n\n"
            f"## Candidate Resume\n{truncate_words(resume, 2000)}\n\n"
            f"## Candidate Goals\n{goals}\n\n"
            "## Instructions\nRespond in EXACTLY this format:\n"
            "SUITABLE: YES or NO\n"
            "REASONING: 2-3 sentences explaining why.\n"
            "KEY_MATCHES: comma-separated list of matching skills/requirements\n"
            "GAPS: comma-separated list of missing requirements (if any)"
        )
        try:
            raw = self._chat.chat(prompt)
        except LLMError as e:
            log.warning("  -> API call failed for %s (%s): %s", posting.title, posting.url, e)
            return None
        suitable = bool(_SUITABLE_RE.search(raw))
        log.info("  -> %s %s", "SUITABLE" if suitable else "NOT SUITABLE", posting.title)
        return Assessment(posting=posting, suitable=suitable, reasoning=raw)

    # ---- drafting ----
    def draft_cover_letter(self, assessment: Assessment, resume: str, goals: str) -> str | None:
        posting = assessment.posting
        log.info("Drafting cover letter for: %s", posting.title)
        prompt = (
            "You are a professional career writer. Draft a concise cover letter for this job posting: "
            "3-4 paragraphs, specific about the role, drawing on 2-3 concrete experiences from the resume, "
            "plain and human in tone, ending with a clear call to action. Use no em dashes.\n\n"
            f"## Job Posting\nTitle: {posting.title}\nURL: {posting.url}\n\n"
            f"{truncate_words(posting.body, 2000)}\n\n"
            f"## Prior Analysis\n{assessment.reasoning}\n\n"
            f"## Candidate Resume\n{truncate_words(resume, 2000)}\n\n"
            f"## Candidate Goals\n{goals}\n\n"
            "Write the letter body now, without placeholders like [Your Name]."
        )
        try:
            letter = self._chat.chat(prompt)
        except LLMError as e:
            log.warning("  -> Cover letter generation failed for %s: %s", posting.title, e)
            return None
        log.info("  -> Cover letter drafted (%d lines)", len(letter.splitlines()))
        return letter
