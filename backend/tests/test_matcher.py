import pytest

from mcq_service.matching import (
    NO_MATCH,
    AliasTable,
    Alternative,
    MatcherConfig,
    TopicMatcher,
    match_topic,
    should_use_item_bank,
)

TOPICS = ["js-closures", "react-hooks", "math-probability"]


@pytest.fixture
def bare_matcher():
    """Matcher with no aliases, so only exact/fuzzy/keyword stages can hit."""
    return TopicMatcher(MatcherConfig(aliases=AliasTable({})))


def test_alias_match_for_hook_name(matcher):
    result = matcher.match("useEffect", TOPICS)
    assert result.match_type == "alias"
    assert result.topic == "react-hooks"
    assert result.confidence == 0.95


def test_exact_match_verbatim(matcher):
    result = matcher.match("js-closures", TOPICS)
    assert result.match_type == "exact"
    assert result.topic == "js-closures"
    assert result.confidence == 1.0


def test_exact_match_with_spaces_for_hyphens(matcher):
    result = matcher.match("  JS Closures ", TOPICS)
    assert result.match_type == "exact"
    assert result.topic == "js-closures"


def test_exact_match_returns_callers_spelling(matcher):
    result = matcher.match("js-closures", ["JS-Closures"])
    assert result.topic == "JS-Closures"


def test_fuzzy_match_strips_subject_prefixes(matcher):
    result = matcher.match("JavaScript Closures", ["js-closures", "react-hooks"])
    assert result.match_type == "fuzzy"
    assert result.topic == "js-closures"
    assert result.confidence >= 0.7
    assert should_use_item_bank(result)


def test_nonsense_objective_has_no_match(matcher):
    result = matcher.match("xyzzy nonsense quantum", ["js-closures", "react-hooks"])
    assert result == NO_MATCH
    assert result.topic is None
    assert result.confidence == 0


@pytest.mark.parametrize("objective", ["", "   ", "\n\t"])
def test_blank_objective_has_no_match(matcher, objective):
    assert matcher.match(objective, TOPICS).match_type == "none"


def test_punctuation_only_objective_has_no_match(matcher):
    assert matcher.match("?!?", TOPICS) == NO_MATCH


def test_keyword_match_is_discounted(matcher):
    result = matcher.match("probability dice", TOPICS)
    assert result.match_type == "keyword"
    assert result.topic == "math-probability"
    assert result.confidence == pytest.approx(0.5 * 0.8)
    assert result.alternatives == ()
    assert not should_use_item_bank(result)


def test_weak_keyword_overlap_falls_back_to_discounted_fuzzy(matcher):
    # one of three keywords overlaps (below 0.5); best fuzzy score is 1 - 15/26
    result = matcher.match("probability and dice games", TOPICS)
    assert result.match_type == "fuzzy"
    assert result.topic == "math-probability"
    assert result.confidence == pytest.approx((1 - 15 / 26) * 0.7)
    assert not should_use_item_bank(result)


def test_alias_wins_over_fuzzy(matcher):
    # "closure" would fuzzy-match js-closure perfectly, the alias points elsewhere
    result = matcher.match("closure", ["js-closure", "js-closures"])
    assert result.match_type == "alias"
    assert result.topic == "js-closures"


def test_alias_target_must_be_available(matcher):
    assert matcher.match("useEffect", ["js-closures"]) == NO_MATCH


def test_alias_target_compared_case_insensitively(matcher):
    result = matcher.match("useEffect", ["React-Hooks"])
    assert result.match_type == "alias"
    assert result.topic == "React-Hooks"


def test_fuzzy_alternatives_above_floor(bare_matcher):
    topics = ["react-hooks", "react-hook", "js-books", "math-algebra-1"]
    result = bare_matcher.match("hooks", topics)
    assert result.match_type == "fuzzy"
    assert result.topic == "react-hooks"
    assert result.confidence == 1.0
    assert [a.topic for a in result.alternatives] == ["react-hook", "js-books"]
    assert [a.confidence for a in result.alternatives] == pytest.approx([0.8, 0.8])
    assert all(isinstance(a, Alternative) for a in result.alternatives)


def test_keyword_alternatives_are_discounted(bare_matcher):
    topics = ["js-closures", "react-hooks", "js-closures-advanced"]
    result = bare_matcher.match("closures hooks", topics)
    assert result.match_type == "keyword"
    assert result.topic == "js-closures"
    assert result.confidence == pytest.approx(0.4)
    assert [a.topic for a in result.alternatives] == ["react-hooks", "js-closures-advanced"]
    assert all(a.confidence == pytest.approx(0.4) for a in result.alternatives)


def test_ties_keep_caller_order(bare_matcher):
    first = bare_matcher.match("aaa", ["math-aaa", "js-aaa"])
    second = bare_matcher.match("aaa", ["js-aaa", "math-aaa"])
    assert first.topic == "math-aaa"
    assert second.topic == "js-aaa"
    assert [a.topic for a in first.alternatives] == ["js-aaa"]


def test_alternatives_sorted_and_exclude_primary(bare_matcher):
    topics = ["js-closures", "js-closures", "js-closure", "react-closures"]
    result = bare_matcher.match("closures", topics)
    assert result.topic == "js-closures"
    confidences = [a.confidence for a in result.alternatives]
    assert confidences == sorted(confidences, reverse=True)
    assert "js-closures" not in [a.topic for a in result.alternatives]


def test_at_most_three_alternatives(bare_matcher):
    topics = ["js-hooks", "js-hook", "react-hook", "math-hook", "css-hook"]
    result = bare_matcher.match("hooks", topics)
    assert result.topic == "js-hooks"
    assert len(result.alternatives) == 3


def test_empty_topic_list(matcher):
    assert matcher.match("closures", []) == NO_MATCH
    assert matcher.match("JavaScript Closures", []) == NO_MATCH


def test_matching_is_idempotent(matcher):
    first = matcher.match("JavaScript Closures", TOPICS)
    second = matcher.match("JavaScript Closures", TOPICS)
    assert first == second


def test_custom_prefix_lists():
    config = MatcherConfig(
        aliases=AliasTable({}),
        topic_prefixes=("py",),
        objective_prefixes=("python",),
    )
    custom = TopicMatcher(config)
    assert custom.strip_topic_prefix("py-generators") == "generators"
    assert custom.strip_topic_prefix("js-closures") == "js-closures"
    result = custom.match("Python generators", ["py-generators"])
    assert result.match_type == "fuzzy"
    assert result.confidence == 1.0


def test_stages_run_in_priority_order(matcher):
    assert [name for name, _ in matcher.stages] == [
        "guard", "exact", "alias", "fuzzy", "keyword", "fallback",
    ]


def test_module_level_match_topic_uses_default_matcher():
    assert match_topic("useEffect", TOPICS).topic == "react-hooks"


def test_punctuation_only_objective_against_prefix_only_topic(matcher):
    assert matcher.match("!!!", ["js-"]) == NO_MATCH
