from __future__ import annotations

from typing import Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class Alternative(BaseModel):
    model_config = ConfigDict(frozen=True)

    topic: str
    confidence: float = Field(ge=0.0, le=1.0)


class ExactMatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    match_type: Literal["exact"] = "exact"
    topic: str
    confidence: float = 1.0


class AliasMatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    match_type: Literal["alias"] = "alias"
    topic: str
    confidence: float = 0.95


class FuzzyMatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    match_type: Literal["fuzzy"] = "fuzzy"
    topic: str
    confidence: float = Field(gt=0.0, le=1.0)
    # Runner-ups, highest confidence first, never the primary topic.
    alternatives: Tuple[Alternative, ...] = ()


class KeywordMatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    match_type: Literal["keyword"] = "keyword"
    topic: str
    confidence: float = Field(gt=0.0, le=1.0)
    alternatives: Tuple[Alternative, ...] = ()


class NoMatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    match_type: Literal["none"] = "none"
    topic: None = None
    confidence: float = 0.0


MatchResult = Union[ExactMatch, AliasMatch, FuzzyMatch, KeywordMatch, NoMatch]

NO_MATCH = NoMatch()


def alternatives_of(match: MatchResult) -> Optional[Tuple[Alternative, ...]]:
    """Alternatives for ranked matches (fuzzy/keyword), None for the other variants."""
    if isinstance(match, (FuzzyMatch, KeywordMatch)):
        return match.alternatives
    return None
