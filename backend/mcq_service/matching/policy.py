from __future__ import annotations

from .results import MatchResult

# Minimum confidence to serve from the curated item bank instead of generating.
MATCH_THRESHOLD = 0.6


def should_use_item_bank(match: MatchResult) -> bool:
    return match.topic is not None and match.confidence >= MATCH_THRESHOLD
