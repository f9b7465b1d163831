from datetime import datetime, timezone

import pytest

from sitesearch.search.index import ContentIndex
from sitesearch.search.local_search import LocalSearchEngine, score_document
from sitesearch.search.models import SearchFilters, SortBy, TimeRange, TypeFilter

NOW = datetime(2024, 3, 20, tzinfo=timezone.utc).timestamp()


def doc(id, title, content="", excerpt="", type="page", published=None):
    record = {"id": id, "type": type, "title": title, "content": content, "excerpt": excerpt, "url": f"/{id}"}
    if published:
        record["publishedAt"] = published
    return record


@pytest.fixture
def engine():
    index = ContentIndex.from_dicts([
        doc("late", "企业服务", content="我们的服务涵盖碳管理"),
        doc("title", "碳中和"),
        doc("week-old", "碳市场周报", type="news", published="2024-03-15"),
        doc("older", "碳市场月报", type="news", published="2024-03-01"),
        doc("other", "ESG 投资", content="green finance"),
    ])
    return LocalSearchEngine(index, clock=lambda: NOW)


def test_blank_query_returns_empty_response(engine):
    response = engine.search("   ")

    assert response.results == []
    assert response.total == 0
    assert response.suggestions == []
    assert response.query == "   "
    assert response.took >= 0


def test_title_match_ranks_above_late_content_match(engine):
    response = engine.search("碳")
    ids = [item.id for item in response.results]

    assert ids[0] == "title"
    assert ids.index("title") < ids.index("late")
    assert "other" not in ids
    assert response.total == 4


def test_score_document_weights_fields():
    index = ContentIndex.from_dicts([doc("d", "esg", content="esg", excerpt="esg")])
    assert score_document("esg", index.get("d")) == pytest.approx(2 + 1 + 1.5)


def test_type_filter(engine):
    response = engine.search("碳", SearchFilters(type=TypeFilter.NEWS))
    assert {item.id for item in response.results} == {"week-old", "older"}


def test_time_range_skips_old_documents_but_keeps_undated(engine):
    response = engine.search("碳", SearchFilters(time_range=TimeRange.WEEK))
    ids = {item.id for item in response.results}

    assert "week-old" in ids
    assert "older" not in ids
    assert {"title", "late"} <= ids


def test_custom_time_range_does_not_filter(engine):
    response = engine.search("碳", SearchFilters(time_range=TimeRange.CUSTOM))
    assert response.total == 4


def test_date_sort_puts_undated_last(engine):
    response = engine.search("碳", SearchFilters(sort_by=SortBy.DATE))
    ids = [item.id for item in response.results]

    assert ids[:2] == ["week-old", "older"]
    # undated keep their index order (stable sort)
    assert ids[2:] == ["late", "title"]


def test_title_sort_is_ascending():
    index = ContentIndex.from_dicts([
        doc("c", "carbon c"), doc("a", "carbon a"), doc("b", "carbon b"),
    ])
    response = LocalSearchEngine(index).search("carbon", SearchFilters(sort_by=SortBy.TITLE))
    assert [item.id for item in response.results] == ["a", "b", "c"]


def test_title_sort_ignores_case():
    index = ContentIndex.from_dicts([
        doc("b", "beta esg"), doc("Z", "Zeta esg"), doc("a", "alpha esg"), doc("A", "Alpha esg"),
    ])
    response = LocalSearchEngine(index).search("esg", SearchFilters(sort_by=SortBy.TITLE))
    assert [item.title for item in response.results] == ["Alpha esg", "alpha esg", "beta esg", "Zeta esg"]


def test_equal_scores_keep_index_order():
    index = ContentIndex.from_dicts([doc(str(i), "same title") for i in range(6)])
    response = LocalSearchEngine(index).search("same")
    assert [item.id for item in response.results] == ["0", "1", "2", "3", "4", "5"]


def test_pagination_and_suggestions():
    index = ContentIndex.from_dicts([doc(str(i), "report") for i in range(8)])
    engine = LocalSearchEngine(index)

    response = engine.search("report", limit=3, offset=6)

    assert [item.id for item in response.results] == ["6", "7"]
    assert response.total == 8
    assert [item.id for item in response.suggestions] == ["0", "1", "2", "3", "4"]


def test_negative_paging_is_rejected(engine):
    with pytest.raises(ValueError):
        engine.search("碳", limit=-1)
    with pytest.raises(ValueError):
        engine.search("碳", offset=-1)


def test_default_index_finds_site_content():
    engine = LocalSearchEngine(ContentIndex.default())
    response = engine.search("碳足迹")

    assert response.results[0].id == "carbon-footprint-assessment"


def test_index_rejects_duplicate_ids():
    with pytest.raises(ValueError):
        ContentIndex.from_dicts([doc("x", "a"), doc("x", "b")])


def test_replace_index_swaps_documents(engine):
    engine.replace_index(ContentIndex.from_dicts([doc("new", "碳足迹")]))
    assert [item.id for item in engine.search("碳").results] == ["new"]
