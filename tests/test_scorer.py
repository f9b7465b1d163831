import pytest

from sitesearch.search.scorer import fuzzy_score, highlight_keywords, query_terms


def test_whole_query_at_start_scores_one():
    assert fuzzy_score("碳", "碳足迹评估") == 1.0
    assert fuzzy_score("Carbon", "carbon market") == 1.0


def test_later_match_scores_lower():
    # index 4 of 10 chars: 1 - 0.4 * 0.3
    assert fuzzy_score("carbon", "xxxxcarbon") == pytest.approx(0.88)
    assert fuzzy_score("carbon", "xxxxcarbon") < fuzzy_score("carbon", "carbonxxxx")


def test_word_matches_when_whole_query_missing():
    # "carbon" found at 0, "zzz" missing: (0.8 + 0.3) / 2
    assert fuzzy_score("carbon zzz", "carbon market") == pytest.approx(0.55)


def test_short_words_count_in_divisor():
    assert fuzzy_score("a carbon", "carbon") == pytest.approx(0.55)


def test_no_match_and_empty_inputs_score_zero():
    assert fuzzy_score("hydrogen", "carbon market") == 0
    assert fuzzy_score("", "text") == 0
    assert fuzzy_score("   ", "text") == 0
    assert fuzzy_score("query", "") == 0


def test_scoring_is_deterministic():
    scores = {fuzzy_score("碳市场 报告", "2024年碳市场趋势报告") for _ in range(5)}
    assert len(scores) == 1


def test_query_terms_skip_short_words():
    assert query_terms(" ESG a Report ") == ["esg", "report"]


def test_highlight_wraps_terms_case_insensitively():
    assert highlight_keywords("ESG Report on esg", "esg") == "<mark>ESG</mark> Report on <mark>esg</mark>"


def test_highlight_escapes_when_asked():
    out = highlight_keywords("<b>ESG</b>", "esg", escape=True)
    assert out == "&lt;b&gt;<mark>ESG</mark>&lt;/b&gt;"


def test_highlight_without_terms_returns_text():
    assert highlight_keywords("some text", "a") == "some text"
    assert highlight_keywords("", "esg") == ""
