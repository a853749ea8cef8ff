import pytest

from mcq_service.matching import (
    MATCH_THRESHOLD,
    NO_MATCH,
    AliasMatch,
    ExactMatch,
    FuzzyMatch,
    KeywordMatch,
    should_use_item_bank,
)


def test_threshold_value():
    assert MATCH_THRESHOLD == 0.6


def test_confident_matches_use_the_bank():
    assert should_use_item_bank(ExactMatch(topic="js-closures"))
    assert should_use_item_bank(AliasMatch(topic="react-hooks"))
    assert should_use_item_bank(FuzzyMatch(topic="js-closures", confidence=0.6))


def test_low_confidence_matches_generate():
    assert not should_use_item_bank(FuzzyMatch(topic="js-closures", confidence=0.59))
    assert not should_use_item_bank(KeywordMatch(topic="math-probability", confidence=0.4))


def test_no_match_never_uses_the_bank():
    assert not should_use_item_bank(NO_MATCH)


def test_ranked_matches_reject_zero_confidence():
    with pytest.raises(ValueError):
        FuzzyMatch(topic="js-closures", confidence=0.0)
