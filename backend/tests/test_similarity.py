import pytest

from mcq_service.matching import extract_keywords, keyword_score, levenshtein_distance, similarity


def test_levenshtein_classic_cases():
    assert levenshtein_distance("kitten", "sitting") == 3
    assert levenshtein_distance("", "abc") == 3
    assert levenshtein_distance("flaw", "lawn") == 2
    assert levenshtein_distance("same", "same") == 0


@pytest.mark.parametrize("text", ["", "a", "closures", "React Hooks", "async/await"])
def test_similarity_is_reflexive(text):
    assert similarity(text, text) == 1.0


@pytest.mark.parametrize(
    "a,b",
    [("closures", "closure"), ("hooks", "react-hooks"), ("", "abc"), ("JavaScript", "java")],
)
def test_similarity_is_symmetric(a, b):
    assert similarity(a, b) == similarity(b, a)


def test_similarity_bounds_and_case():
    assert similarity("", "") == 1.0
    assert similarity("", "abc") == 0.0
    assert similarity("CLOSURES", "closures") == 1.0
    assert similarity("hook", "hooks") == pytest.approx(0.8)
    assert 0.0 <= similarity("xyz", "closures") <= 1.0


def test_extract_keywords_drops_short_tokens_and_stopwords():
    assert extract_keywords("Help me learn about JS closures and the event loop!") == [
        "help", "closures", "event", "loop",
    ]


def test_extract_keywords_keeps_order_and_duplicates():
    assert extract_keywords("closures, closures; hooks") == ["closures", "closures", "hooks"]


def test_extract_keywords_of_filler_only_text_is_empty():
    assert extract_keywords("quiz me on the") == []
    assert extract_keywords("") == []


def test_keyword_score_uses_symmetric_containment():
    assert keyword_score("react-hooks", ["hook"]) == 1.0
    assert keyword_score("react-hooks", ["reactjs"]) == 1.0
    assert keyword_score("math-probability", ["probability", "dice"]) == 0.5


def test_keyword_score_without_keywords_is_zero():
    assert keyword_score("math-probability", []) == 0.0


def test_keyword_score_ignores_empty_topic_parts():
    assert keyword_score("", ["anything"]) == 0.0
    assert keyword_score("js--async", ["closures"]) == 0.0


def test_levenshtein_counts_substitution_as_one_edit():
    # an insert/delete-only distance would give 2 here
    assert levenshtein_distance("hook", "book") == 1
    assert similarity("hooks", "books") == 0.8
