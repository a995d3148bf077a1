from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol

from .models import Posting

log = logging.getLogger(__name__)

LOCATION_BATCH_SIZE = 25


class LocationClassifier(Protocol):
    def classify_location_batch(self, titles: Sequence[str]) -> list[bool] | None: ...


def matches_allowlist(keywords: Sequence[str], posting: Posting) -> bool:
    """True if title + body contains at least one keyword (case-insensitive)."""
    haystack = f"{posting.title} {posting.body}".casefold()
    return any(k.casefold() in haystack for k in keywords)


def apply_allowlist(keywords: Sequence[str], postings: Sequence[Posting]) -> list[Posting]:
    """Keep postings matching at least one keyword; no keywords keeps everything."""
    if not keywords:
        log.info("No include_keywords configured - passing all %d postings through", len(postings))
        return list(postings)
    result = [p for p in postings if matches_allowlist(keywords, p)]
    log.info(
        "Allowlist filter: %d -> %d postings (keywords: %s)",
        len(postings),
        len(result),
        ", ".join(keywords),
    )
    return result


def filter_us_postings(
    postings: Sequence[Posting],
    classifier: LocationClassifier,
    batch_size: int = LOCATION_BATCH_SIZE,
) -> list[Posting]:
    """
    Drop postings whose title places them clearly outside the US.

    Fails open: a batch whose classification raised, returned None, or has
    the wrong length keeps all of its postings.
    """
    batches = [postings[i : i + batch_size] for i in range(0, len(postings), batch_size)]
    log.info("Location filter: classifying %d postings in %d batches", len(postings), len(batches))

    kept: list[Posting] = []
    for batch in batches:
        titles = [p.title for p in batch]
        try:
            flags = classifier.classify_location_batch(titles)
        except Exception as e:
            log.warning("Location batch failed, keeping %d postings: %s", len(batch), e)
            flags = None
        if not flags or len(flags) != len(batch):
            flags = [True] * len(batch)

        batch_kept = [p for p, keep in zip(batch, flags) if keep]
        dropped = len(batch) - len(batch_kept)
        if dropped:
            log.info("  Dropped %d non-US postings", dropped)
        kept.extend(batch_kept)
    return kept
