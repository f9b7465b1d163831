from sitesearch.search.cache import SearchCache
from sitesearch.search.models import SearchSuggestion
from sitesearch.search.suggestions import SuggestionProvider


def test_short_query_returns_popular_suggestions():
    provider = SuggestionProvider()
    suggestions = provider.suggest("碳", limit=3)

    assert [s.text for s in suggestions] == ["碳中和", "碳足迹评估", "ESG报告"]


def test_containment_matches_text_or_category():
    provider = SuggestionProvider()

    assert [s.text for s in provider.suggest("碳足迹")] == ["碳足迹评估"]
    assert [s.text for s in provider.suggest("案例")] == ["净零排放", "再生能源"]


def test_character_fallback():
    provider = SuggestionProvider()
    # no suggestion contains "和碳", but 碳中和 contains both characters
    assert [s.text for s in provider.suggest("和碳")] == ["碳中和"]


def test_limit_is_capped_at_ten():
    provider = SuggestionProvider()
    assert len(provider.suggest("", limit=50)) == 10


def test_results_are_cached():
    cache = SearchCache(sweep_interval=None)
    provider = SuggestionProvider(cache=cache)

    first = provider.suggest("服务")
    provider.suggestions = []
    second = provider.suggest("服务")

    assert second == first
    assert cache.stats()["hits"] == 1


def test_suggestion_text_is_sanitized():
    provider = SuggestionProvider([
        SearchSuggestion("<b>碳中和</b>", "服务", 156),
        SearchSuggestion("<i> </i>", "服务", 3),
        SearchSuggestion("碳" * 60, "知识", 1),
    ])

    assert [s.text for s in provider.suggest("")] == ["碳中和", "碳" * 50 + "..."]
    assert provider.suggest("碳中")[0].count == 156
