"""Tests for the filter -> sort -> paginate pipeline."""

from __future__ import annotations

import pytest

from backend.lilyshelf.domain.catalog.models import Category, Entry, Rating
from backend.lilyshelf.domain.catalog.pipeline import (
    ALL,
    SortKey,
    ViewState,
    collection_stats,
    filter_entries,
    paginate,
    run_pipeline,
    sort_entries,
    tag_vocabulary,
)

pytestmark = [pytest.mark.pipeline]


def _entry(
    entry_id: str,
    *,
    category: Category | str = Category.MANGA,
    rating: Rating | str = Rating.ORDINARY,
    created_at: int = 0,
    title: str | None = None,
    author: str = "someone",
    note: str | None = None,
    tags: list[str] | None = None,
) -> Entry:
    return Entry(
        id=entry_id,
        title=title or f"title {entry_id}",
        author=author,
        category=category,
        rating=rating,
        created_at=created_at,
        tags=list(tags or []),
        note=note,
    )


def _ids(entries) -> list[str]:
    return [entry.id for entry in entries]


@pytest.fixture
def mixed_collection() -> list[Entry]:
    return [
        _entry("n1", category=Category.NOVEL, created_at=10, tags=["a", "b"]),
        _entry("m1", category=Category.MANGA, created_at=20, tags=["a"]),
        _entry("v1", category=Category.MOVIE, created_at=30),
        _entry("n2", category=Category.NOVEL, created_at=40, note="Quiet Ending"),
        _entry("g1", category=Category.GAME, created_at=50, tags=["b"]),
        _entry("d1", category=Category.DRAMA_SERIES, created_at=60),
        _entry("o1", category=Category.OTHER, created_at=70, author="Ada Lovelace"),
    ]


def test_default_view_state_matches_everything(mixed_collection):
    state = ViewState()

    assert state.category == ALL
    assert state.rating == ALL
    assert filter_entries(mixed_collection, state) == mixed_collection


def test_category_filter_scenario_b(mixed_collection):
    state = ViewState(category=Category.NOVEL, search="", tags=[])

    result = run_pipeline(mixed_collection, state)

    assert result.total_items == 2
    assert sorted(_ids(result.items)) == ["n1", "n2"]


def test_filtering_is_idempotent(mixed_collection):
    state = ViewState(category="NOVEL", search="e")
    once = filter_entries(mixed_collection, state)

    assert filter_entries(once, state) == once


def test_tag_filter_uses_and_semantics(mixed_collection):
    both = ViewState(tags=["a", "b"])
    only_a = ViewState(tags=["a"])

    assert _ids(filter_entries(mixed_collection, both)) == ["n1"]
    assert _ids(filter_entries(mixed_collection, only_a)) == ["n1", "m1"]
    assert filter_entries([_entry("x", tags=["a"])], both) == []


def test_unmatched_tag_set_yields_empty_result(mixed_collection):
    result = run_pipeline(mixed_collection, ViewState(tags=["missing"]))

    assert result.items == []
    assert result.total_pages == 1


def test_search_is_case_insensitive_across_fields(mixed_collection):
    assert _ids(filter_entries(mixed_collection, ViewState(search="quiet"))) == ["n2"]
    assert _ids(filter_entries(mixed_collection, ViewState(search="LOVELACE"))) == ["o1"]
    assert _ids(filter_entries(mixed_collection, ViewState(search="TITLE V1"))) == ["v1"]
    assert _ids(filter_entries(mixed_collection, ViewState(search="B"))) == ["n1", "g1"]


def test_absent_note_never_matches():
    entry = _entry("x", title="abc", author="def", note=None)

    assert filter_entries([entry], ViewState(search="x")) == []
    assert filter_entries([entry], ViewState(search="")) == [entry]


def test_filters_combine_with_and(mixed_collection):
    state = ViewState(category=Category.NOVEL, tags=["b"], search="title")

    assert _ids(filter_entries(mixed_collection, state)) == ["n1"]

    state = state.with_changes(rating=Rating.BIBLE)
    assert filter_entries(mixed_collection, state) == []


def test_scenario_a_rating_and_date_order():
    entries = [
        _entry("mysterious", rating=Rating.MYSTERIOUS, created_at=3),
        _entry("bible", rating=Rating.BIBLE, created_at=1),
        _entry("ordinary", rating=Rating.ORDINARY, created_at=2),
    ]

    by_rating = sort_entries(entries, SortKey.RATING_DESC)
    by_date = sort_entries(entries, SortKey.DATE_ASC)

    assert _ids(by_rating) == ["bible", "ordinary", "mysterious"]
    assert [entry.created_at for entry in by_date] == [1, 2, 3]


def test_date_desc_reversed_equals_date_asc_without_ties(mixed_collection):
    desc = sort_entries(mixed_collection, "date-desc")
    asc = sort_entries(mixed_collection, "date-asc")

    assert list(reversed(desc)) == asc


def test_ties_keep_input_order_in_both_directions():
    entries = [
        _entry("first", rating=Rating.DESTINY, created_at=5),
        _entry("second", rating=Rating.DESTINY, created_at=5),
        _entry("third", rating=Rating.DESTINY, created_at=1),
    ]

    assert _ids(sort_entries(entries, SortKey.RATING_DESC)) == ["first", "second", "third"]
    assert _ids(sort_entries(entries, SortKey.RATING_ASC)) == ["first", "second", "third"]
    assert _ids(sort_entries(entries, SortKey.DATE_DESC)) == ["first", "second", "third"]
    assert _ids(sort_entries(entries, SortKey.DATE_ASC)) == ["third", "first", "second"]


def test_rating_tie_is_not_broken_by_date():
    entries = [
        _entry("older", rating=Rating.TOP_TIER, created_at=1),
        _entry("newer", rating=Rating.TOP_TIER, created_at=99),
    ]

    assert _ids(sort_entries(entries, SortKey.RATING_DESC)) == ["older", "newer"]


def test_unknown_rating_sorts_as_weight_zero():
    entries = [
        _entry("odd", rating="legendary"),
        _entry("low", rating=Rating.MYSTERIOUS),
    ]

    assert _ids(sort_entries(entries, SortKey.RATING_DESC)) == ["low", "odd"]
    assert _ids(sort_entries(entries, SortKey.RATING_ASC)) == ["odd", "low"]


def test_scenario_d_paging():
    entries = [_entry(str(index), created_at=index) for index in range(5)]
    state = ViewState(sort=SortKey.DATE_ASC, page=3, page_size=2)

    result = run_pipeline(entries, state)

    assert result.total_pages == 3
    assert result.total_items == 5
    assert _ids(result.items) == ["4"]


def test_empty_collection_has_one_page():
    result = run_pipeline([], ViewState(page=1, page_size=24))

    assert result.items == []
    assert result.total_items == 0
    assert result.total_pages == 1


def test_paginate_clamps_to_available_range():
    entries = [_entry(str(index)) for index in range(3)]

    items, total_pages = paginate(entries, page=9, page_size=2)
    assert items == []
    assert total_pages == 2

    items, _ = paginate(entries, page=0, page_size=2)
    assert _ids(items) == ["0", "1"]

    with pytest.raises(ValueError):
        paginate(entries, page=1, page_size=0)


def test_paging_disabled_returns_everything(mixed_collection):
    result = run_pipeline(mixed_collection, ViewState())

    assert result.page_size is None
    assert result.total_pages == 1
    assert len(result.items) == len(mixed_collection)


def test_view_state_round_trips_through_dict():
    state = ViewState(
        category=Category.ANIMATION,
        rating="top_tier",
        tags="b, a",
        search="Bloom",
        sort="rating-asc",
        page=2,
        page_size=10,
    )

    data = state.to_dict()

    assert data == {
        "category": "動畫",
        "rating": "極品",
        "tags": ["a", "b"],
        "search": "Bloom",
        "sort": "rating-asc",
        "page": 2,
        "page_size": 10,
    }
    assert ViewState.from_dict(data) == state


def test_view_state_normalizes_inputs():
    assert ViewState(sort="sideways").sort is SortKey.DATE_DESC
    assert ViewState(category="all").category == ALL
    with pytest.raises(ValueError):
        ViewState(category="podcast")


def test_changing_filters_resets_page():
    state = ViewState(page=4, page_size=5)

    assert state.with_changes(search="x").page == 1
    assert state.with_changes(page=2).page == 2
    toggled = state.toggle_tag("yuri")
    assert toggled.tags == frozenset({"yuri"})
    assert toggled.page == 1
    assert toggled.toggle_tag("yuri").tags == frozenset()


def test_collection_stats_counts_every_category(mixed_collection):
    stats = collection_stats(mixed_collection + [_entry("z", category="podcast")])

    assert stats.total == 8
    assert stats.by_category["NOVEL"] == 2
    assert stats.by_category["ANIMATION"] == 0
    assert stats.by_category["podcast"] == 1


def test_tag_vocabulary_counts_each_entry_once():
    entries = [
        _entry("1", tags=["a", "b", "a"]),
        _entry("2", tags=["b"]),
        _entry("3", tags=["c", "b"]),
    ]

    assert tag_vocabulary(entries) == [("b", 3), ("a", 1), ("c", 1)]


@pytest.mark.parametrize(
    "data",
    [{"page_size": 0}, {"page": 0, "page_size": 10}, {"page": -1}],
)
def test_view_state_rejects_non_positive_paging(data):
    with pytest.raises(ValueError):
        ViewState.from_dict(data)
