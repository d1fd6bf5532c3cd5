"""
Filter, de-duplicate, shuffle and cap the normalized candidates.

The shuffle here is the real source of randomness for what the picker
shows; the selection session draws from this already-shuffled list.
"""
import logging
import random
from typing import List, Optional, Sequence

from domain.models import Place

logger = logging.getLogger(__name__)


def filter_open(places: Sequence[Place]) -> List[Place]:
    """Drop places known to be closed; unknown hours are kept."""
    return [p for p in places if p.is_open is not False]


def dedupe_by_name(places: Sequence[Place]) -> List[Place]:
    """Keep the first place for each exact name, preserving order."""
    seen: set[str] = set()
    unique: List[Place] = []
    for place in places:
        if place.name in seen:
            continue
        seen.add(place.name)
        unique.append(place)
    return unique


def process_candidates(
    places: Sequence[Place],
    only_open: bool,
    cap: int,
    rng: Optional[random.Random] = None,
) -> List[Place]:
    """
    Run the filter pipeline: open-only filter, dedupe, shuffle, cap.

    An empty result is a valid outcome, not an error.
    """
    rng = rng or random.Random()
    result = filter_open(places) if only_open else list(places)
    after_open = len(result)
    result = dedupe_by_name(result)
    after_dedupe = len(result)
    rng.shuffle(result)
    result = result[:max(cap, 0)]
    logger.debug(
        "process_candidates: in=%d after_open=%d after_dedupe=%d out=%d (only_open=%s cap=%d)",
        len(places),
        after_open,
        after_dedupe,
        len(result),
        only_open,
        cap,
    )
    return result
