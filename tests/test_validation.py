import pytest

from sitesearch.routes.validators import parse_filters, validate_pagination
from sitesearch.search.errors import InvalidQueryError
from sitesearch.search.models import SortBy, TypeFilter
from sitesearch.search.validation import (
    MAX_QUERY_LENGTH,
    is_suspicious_query,
    require_valid_query,
    sanitize_search_history,
    sanitize_search_suggestion,
    validate_search_query,
)


def test_plain_queries_pass_unchanged():
    result = validate_search_query("碳中和 咨询")
    assert result.is_valid
    assert result.cleaned_query == "碳中和 咨询"
    assert result.errors == []


def test_empty_and_blank_queries_are_invalid():
    assert not validate_search_query("").is_valid
    assert not validate_search_query("    ").is_valid
    assert not validate_search_query(None).is_valid


def test_script_and_sql_fragments_are_stripped():
    result = validate_search_query("esg<script>alert(1)</script> report")
    assert result.is_valid
    assert "script" not in result.cleaned_query
    assert result.errors

    result = validate_search_query("report; DROP TABLE users")
    assert "DROP" not in result.cleaned_query


def test_long_query_is_truncated():
    result = validate_search_query("esg report " * 30)
    assert result.is_valid
    assert len(result.cleaned_query) <= MAX_QUERY_LENGTH
    assert result.errors


def test_require_valid_query_raises():
    assert require_valid_query("  esg  ") == "esg"
    with pytest.raises(InvalidQueryError):
        require_valid_query("<i></i>")


def test_suspicious_queries():
    assert is_suspicious_query("!!!@@@###")
    assert is_suspicious_query("12345678901234")
    assert is_suspicious_query("window.location")
    assert not is_suspicious_query("碳中和")
    assert not is_suspicious_query("ESG 2024")


def test_sanitize_suggestion_truncates():
    assert sanitize_search_suggestion("<b>碳中和</b>") == "碳中和"
    long_text = "x" * 80
    assert sanitize_search_suggestion(long_text) == "x" * 50 + "..."


def test_sanitize_history_dedupes_and_caps():
    history = ["esg", "esg", "  ", "碳"] + [f"q{i}" for i in range(20)]
    cleaned = sanitize_search_history(history)

    assert cleaned[:2] == ["esg", "碳"]
    assert len(cleaned) == 10


def test_validate_pagination_caps_and_rejects():
    assert validate_pagination(None, None) == (20, 0, None)
    assert validate_pagination("500", "5") == (100, 5, None)
    assert validate_pagination("abc", 0)[2] == "Invalid limit"
    assert validate_pagination(10, -1)[2] == "Offset must not be negative"


def test_parse_filters():
    filters, error = parse_filters({"type": "news", "sortBy": "date"})
    assert error is None
    assert filters.type == TypeFilter.NEWS
    assert filters.sort_by == SortBy.DATE

    _, error = parse_filters({"timeRange": "decade"})
    assert error
