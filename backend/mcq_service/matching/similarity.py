"""String similarity used by the fuzzy and keyword stages of the matcher."""

from __future__ import annotations

import re
from typing import FrozenSet, List, Sequence

from rapidfuzz.distance import Levenshtein

STOPWORDS: FrozenSet[str] = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "about", "into", "through", "during",
    "before", "after", "above", "below", "between", "under", "again",
    "further", "then", "once", "here", "there", "when", "where", "why",
    "how", "all", "each", "few", "more", "most", "other", "some", "such",
    "no", "nor", "not", "only", "own", "same", "so", "than", "too", "very",
    "can", "will", "just", "should", "now", "what", "is", "are", "was",
    "were", "be", "been", "being", "have", "has", "had", "having", "do",
    "does", "did", "doing", "would", "could", "might", "must", "shall",
    # request filler
    "learn", "understand", "know", "study", "practice", "quiz", "test", "me",
})

_NON_WORD = re.compile(r"[^\w\s]")


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance with unit cost for substitution, insertion and deletion."""
    return Levenshtein.distance(a, b)


def similarity(a: str, b: str) -> float:
    """Case-insensitive edit-distance similarity in [0, 1]; two empty strings score 1."""
    a, b = a.lower(), b.lower()
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein_distance(a, b) / longest


def extract_keywords(text: str) -> List[str]:
    """Significant tokens of ``text`` in order, duplicates kept."""
    tokens = _NON_WORD.sub(" ", (text or "").lower()).split()
    return [t for t in tokens if len(t) > 2 and t not in STOPWORDS]


def keyword_score(topic: str, keywords: Sequence[str]) -> float:
    """Share of keywords found in (or containing) some hyphen-separated part of ``topic``."""
    if not keywords:
        return 0.0
    parts = [p for p in topic.lower().split("-") if p]
    matched = 0
    for keyword in keywords:
        if any(keyword in part or part in keyword for part in parts):
            matched += 1
    return matched / len(keywords)
