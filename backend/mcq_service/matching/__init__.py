from .aliases import (
    DEFAULT_ALIASES,
    DEFAULT_OBJECTIVE_PREFIXES,
    DEFAULT_TOPIC_PREFIXES,
    AliasTable,
    lookup_alias,
)
from .matcher import MatcherConfig, TopicMatcher, match_topic
from .normalize import normalize, normalize_objective
from .policy import MATCH_THRESHOLD, should_use_item_bank
from .results import (
    NO_MATCH,
    AliasMatch,
    Alternative,
    ExactMatch,
    FuzzyMatch,
    KeywordMatch,
    MatchResult,
    NoMatch,
    alternatives_of,
)
from .similarity import STOPWORDS, extract_keywords, keyword_score, levenshtein_distance, similarity

__all__ = [
    "DEFAULT_ALIASES",
    "DEFAULT_OBJECTIVE_PREFIXES",
    "DEFAULT_TOPIC_PREFIXES",
    "MATCH_THRESHOLD",
    "NO_MATCH",
    "STOPWORDS",
    "AliasMatch",
    "AliasTable",
    "Alternative",
    "ExactMatch",
    "FuzzyMatch",
    "KeywordMatch",
    "MatchResult",
    "MatcherConfig",
    "NoMatch",
    "TopicMatcher",
    "alternatives_of",
    "extract_keywords",
    "keyword_score",
    "levenshtein_distance",
    "lookup_alias",
    "match_topic",
    "normalize",
    "normalize_objective",
    "should_use_item_bank",
    "similarity",
]
