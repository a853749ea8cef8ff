"""Objective -> topic resolution.

A strict-priority cascade over the caller's topic list:

    guard -> exact -> alias -> fuzzy (>= 0.7) -> keyword (>= 0.5) -> fuzzy fallback (>= 0.4) -> none

Each stage either returns a result or passes. Fuzzy scores are computed once
per call and shared by the fuzzy and fallback stages. Ties keep the caller's
topic order.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict

from .aliases import DEFAULT_OBJECTIVE_PREFIXES, DEFAULT_TOPIC_PREFIXES, AliasTable
from .normalize import normalize
from .results import (
    NO_MATCH,
    AliasMatch,
    Alternative,
    ExactMatch,
    FuzzyMatch,
    KeywordMatch,
    MatchResult,
)
from .similarity import extract_keywords, keyword_score, similarity

logger = logging.getLogger(__name__)

Ranking = List[Tuple[str, float]]


class MatcherConfig(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    aliases: AliasTable
    topic_prefixes: Tuple[str, ...] = DEFAULT_TOPIC_PREFIXES
    objective_prefixes: Tuple[str, ...] = DEFAULT_OBJECTIVE_PREFIXES
    fuzzy_threshold: float = 0.7
    alternative_floor: float = 0.5
    keyword_threshold: float = 0.5
    keyword_discount: float = 0.8
    fallback_threshold: float = 0.4
    fallback_discount: float = 0.7
    max_alternatives: int = 3

    @classmethod
    def default(cls) -> "MatcherConfig":
        return cls(aliases=AliasTable.default())


def _prefix_pattern(words: Sequence[str], tail: str) -> Optional[re.Pattern[str]]:
    words = [w for w in words if w]
    if not words:
        return None
    return re.compile(r"^(" + "|".join(re.escape(w) for w in words) + r")" + tail, re.IGNORECASE)


def _rank(scored: Ranking) -> Ranking:
    # sorted() is stable with reverse=True, equal scores keep input order
    return sorted(scored, key=lambda pair: pair[1], reverse=True)


class _Call:
    """Inputs of one match call plus the fuzzy ranking, computed on first use."""

    def __init__(self, objective: str, topics: Sequence[str]) -> None:
        self.objective = objective
        self.normalized = normalize(objective)
        self.topics = _unique_topics(topics)
        self.fuzzy_ranking: Optional[Ranking] = None


def _unique_topics(topics: Sequence[str]) -> List[str]:
    seen: Dict[str, str] = {}
    for topic in topics or ():
        if not isinstance(topic, str) or not topic:
            continue
        seen.setdefault(topic.lower(), topic)
    return list(seen.values())


class TopicMatcher:
    def __init__(self, config: Optional[MatcherConfig] = None) -> None:
        self.config = config or MatcherConfig.default()
        self._topic_prefix = _prefix_pattern(self.config.topic_prefixes, "-")
        self._objective_prefix = _prefix_pattern(self.config.objective_prefixes, r"\s*")
        self.stages: Tuple[Tuple[str, Callable[[_Call], Optional[MatchResult]]], ...] = (
            ("guard", self.guard_stage),
            ("exact", self.exact_stage),
            ("alias", self.alias_stage),
            ("fuzzy", self.fuzzy_stage),
            ("keyword", self.keyword_stage),
            ("fallback", self.fallback_stage),
        )

    def match(self, objective: str, available_topics: Sequence[str]) -> MatchResult:
        call = _Call(objective or "", available_topics)
        for name, stage in self.stages:
            result = stage(call)
            if result is not None:
                logger.debug(
                    "objective %r -> %s (%s, %.3f) at stage %s",
                    objective, result.topic, result.match_type, result.confidence, name,
                )
                return result
        return NO_MATCH

    # ---- stages -------------------------------------------------------

    def guard_stage(self, call: _Call) -> Optional[MatchResult]:
        if not call.objective.strip():
            return NO_MATCH
        return None

    def exact_stage(self, call: _Call) -> Optional[MatchResult]:
        if not call.normalized:
            return None
        hyphenated = re.sub(r"\s+", "-", call.normalized)
        for candidate in (call.normalized, hyphenated):
            for topic in call.topics:
                if topic.lower() == candidate:
                    return ExactMatch(topic=topic)
        return None

    def alias_stage(self, call: _Call) -> Optional[MatchResult]:
        canonical = self.config.aliases.lookup(call.objective)
        if not canonical:
            return None
        wanted = canonical.lower()
        for topic in call.topics:
            if topic.lower() == wanted:
                return AliasMatch(topic=topic)
        return None

    def fuzzy_stage(self, call: _Call) -> Optional[MatchResult]:
        ranking = self.fuzzy_ranking(call)
        if not ranking or ranking[0][1] < self.config.fuzzy_threshold:
            return None
        top, score = ranking[0]
        alternatives = [
            Alternative(topic=t, confidence=s)
            for t, s in ranking[1:1 + self.config.max_alternatives]
            if s >= self.config.alternative_floor
        ]
        return FuzzyMatch(topic=top, confidence=score, alternatives=tuple(alternatives))

    def keyword_stage(self, call: _Call) -> Optional[MatchResult]:
        keywords = extract_keywords(call.objective)
        if not keywords:
            return None
        scored = [(topic, keyword_score(topic, keywords)) for topic in call.topics]
        ranking = _rank([pair for pair in scored if pair[1] > 0])
        if not ranking or ranking[0][1] < self.config.keyword_threshold:
            return None
        discount = self.config.keyword_discount
        top, score = ranking[0]
        alternatives = [
            Alternative(topic=t, confidence=s * discount)
            for t, s in ranking[1:1 + self.config.max_alternatives]
        ]
        return KeywordMatch(topic=top, confidence=score * discount, alternatives=tuple(alternatives))

    def fallback_stage(self, call: _Call) -> Optional[MatchResult]:
        ranking = self.fuzzy_ranking(call)
        if not ranking or ranking[0][1] < self.config.fallback_threshold:
            return None
        discount = self.config.fallback_discount
        top, score = ranking[0]
        alternatives = [
            Alternative(topic=t, confidence=s * discount)
            for t, s in ranking[1:1 + self.config.max_alternatives]
            if s > 0
        ]
        return FuzzyMatch(topic=top, confidence=score * discount, alternatives=tuple(alternatives))

    # ---- scoring ------------------------------------------------------

    def strip_topic_prefix(self, topic: str) -> str:
        if self._topic_prefix is None:
            return topic
        return self._topic_prefix.sub("", topic, count=1)

    def strip_objective_prefix(self, objective: str) -> str:
        if self._objective_prefix is None:
            return objective
        return self._objective_prefix.sub("", objective, count=1)

    def fuzzy_score(self, normalized_objective: str, topic: str) -> float:
        """Best of: full topic, prefix-stripped topic, and both sides stripped."""
        bare_topic = self.strip_topic_prefix(topic)
        return max(
            similarity(normalized_objective, topic),
            similarity(normalized_objective, bare_topic),
            similarity(self.strip_objective_prefix(normalized_objective), bare_topic),
        )

    def fuzzy_ranking(self, call: _Call) -> Ranking:
        if not call.normalized:
            return []
        if call.fuzzy_ranking is None:
            call.fuzzy_ranking = _rank(
                [(topic, self.fuzzy_score(call.normalized, topic)) for topic in call.topics]
            )
        return call.fuzzy_ranking


_default_matcher: Optional[TopicMatcher] = None


def match_topic(
    objective: str,
    available_topics: Sequence[str],
    matcher: Optional[TopicMatcher] = None,
) -> MatchResult:
    """Resolve ``objective`` against ``available_topics`` with the given (or default) matcher."""
    global _default_matcher
    if matcher is None:
        if _default_matcher is None:
            _default_matcher = TopicMatcher()
        matcher = _default_matcher
    return matcher.match(objective, available_topics)
