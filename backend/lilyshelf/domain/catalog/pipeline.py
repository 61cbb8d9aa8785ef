"""Filter -> sort -> paginate pipeline over an in-memory entry collection.

Everything here is a pure function of ``(entries, ViewState)`` so the
displayed list can be recomputed from scratch on every parameter change.
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .models import Category, Entry, Rating, parse_category, parse_rating, parse_tags

__all__ = [
    "ALL",
    "CatalogStats",
    "PipelineResult",
    "SortKey",
    "ViewState",
    "collection_stats",
    "filter_entries",
    "matches",
    "paginate",
    "run_pipeline",
    "sort_entries",
    "tag_vocabulary",
]

ALL = "ALL"


class SortKey(str, Enum):
    DATE_DESC = "date-desc"
    DATE_ASC = "date-asc"
    RATING_DESC = "rating-desc"
    RATING_ASC = "rating-asc"

    @classmethod
    def parse(cls, value: Union[str, "SortKey", None]) -> "SortKey":
        """Unknown or empty keys fall back to newest-first."""

        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.DATE_DESC


CategoryFilter = Union[Category, str]
RatingFilter = Union[Rating, str]


@dataclass(frozen=True)
class ViewState:
    """Explicit, serializable filter/sort/page parameters."""

    category: CategoryFilter = ALL
    rating: RatingFilter = ALL
    tags: frozenset = field(default_factory=frozenset)
    search: str = ""
    sort: SortKey = SortKey.DATE_DESC
    page: Optional[int] = None
    page_size: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "category", _parse_filter(parse_category, self.category))
        object.__setattr__(self, "rating", _parse_filter(parse_rating, self.rating))
        object.__setattr__(self, "tags", frozenset(parse_tags(self.tags)))
        object.__setattr__(self, "sort", SortKey.parse(self.sort))
        object.__setattr__(self, "search", self.search or "")
        if self.page_size is not None and self.page_size < 1:
            raise ValueError("page_size must be a positive integer")
        if self.page is not None and self.page < 1:
            raise ValueError("page must be a positive integer")

    @property
    def paging_enabled(self) -> bool:
        return self.page_size is not None

    def with_changes(self, **changes: Any) -> "ViewState":
        """Return a copy with the given fields replaced.

        Changing any filter resets the page back to the first one.
        """

        filter_keys = {"category", "rating", "tags", "search", "sort"}
        if self.page is not None and "page" not in changes and filter_keys & set(changes):
            changes["page"] = 1
        return replace(self, **changes)

    def toggle_tag(self, tag: str) -> "ViewState":
        tags = set(self.tags)
        if tag in tags:
            tags.remove(tag)
        else:
            tags.add(tag)
        return self.with_changes(tags=sorted(tags))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": _filter_value(self.category),
            "rating": _filter_value(self.rating),
            "tags": sorted(self.tags),
            "search": self.search,
            "sort": self.sort.value,
            "page": self.page,
            "page_size": self.page_size,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ViewState":
        """Rebuild a state; values outside the enumerations raise ValueError."""

        page = data.get("page")
        page_size = data.get("page_size")
        return cls(
            category=data.get("category") or ALL,
            rating=data.get("rating") or ALL,
            tags=data.get("tags") or (),
            search=str(data.get("search") or ""),
            sort=data.get("sort"),
            page=int(page) if page is not None else None,
            page_size=int(page_size) if page_size is not None else None,
        )


@dataclass(frozen=True)
class PipelineResult:
    items: List[Entry]
    total_items: int
    total_pages: int
    page: int
    page_size: Optional[int]


@dataclass(frozen=True)
class CatalogStats:
    total: int
    by_category: Dict[str, int]


def _parse_filter(parser, value: Any):
    if value is None or value == "" or (isinstance(value, str) and value.upper() == ALL):
        return ALL
    return parser(value)


def _filter_value(value: Union[Enum, str]) -> str:
    if isinstance(value, Enum):
        return value.value
    return value


def _contains(haystack: Optional[str], needle: str) -> bool:
    if not haystack:
        return False
    return needle in haystack.casefold()


def matches(entry: Entry, state: ViewState) -> bool:
    """True when the entry satisfies every active filter (logical AND)."""

    if state.category != ALL and entry.category != state.category:
        return False
    if state.rating != ALL and entry.rating != state.rating:
        return False
    if state.tags and not state.tags.issubset(entry.tags):
        return False
    if state.search:
        needle = state.search.casefold()
        if not (
            _contains(entry.title, needle)
            or _contains(entry.author, needle)
            or _contains(entry.note, needle)
            or any(_contains(tag, needle) for tag in entry.tags)
        ):
            return False
    return True


def filter_entries(entries: Iterable[Entry], state: ViewState) -> List[Entry]:
    return [entry for entry in entries if matches(entry, state)]


def sort_entries(entries: Iterable[Entry], sort: Union[SortKey, str]) -> List[Entry]:
    """Stable sort; ties keep their incoming order, with no secondary key."""

    key = SortKey.parse(sort)
    if key in (SortKey.DATE_DESC, SortKey.DATE_ASC):
        return sorted(
            entries,
            key=lambda entry: entry.created_at,
            reverse=key is SortKey.DATE_DESC,
        )
    return sorted(
        entries,
        key=lambda entry: entry.weight,
        reverse=key is SortKey.RATING_DESC,
    )


def paginate(
    items: Sequence[Entry], *, page: int, page_size: int
) -> Tuple[List[Entry], int]:
    """Return the requested 1-indexed page and the total page count.

    The page count is at least 1 even for an empty sequence; pages past the
    end come back empty.
    """

    if page_size < 1:
        raise ValueError("page_size must be a positive integer")
    total_pages = max(1, math.ceil(len(items) / page_size))
    page = max(page, 1)
    start = (page - 1) * page_size
    return list(items[start : start + page_size]), total_pages


def run_pipeline(entries: Sequence[Entry], state: ViewState) -> PipelineResult:
    ordered = sort_entries(filter_entries(entries, state), state.sort)
    if not state.paging_enabled:
        return PipelineResult(
            items=ordered,
            total_items=len(ordered),
            total_pages=1,
            page=1,
            page_size=None,
        )
    page = state.page or 1
    items, total_pages = paginate(ordered, page=page, page_size=state.page_size or 0)
    return PipelineResult(
        items=items,
        total_items=len(ordered),
        total_pages=total_pages,
        page=page,
        page_size=state.page_size,
    )


def collection_stats(entries: Iterable[Entry]) -> CatalogStats:
    counts: Dict[str, int] = {category.name: 0 for category in Category}
    total = 0
    for entry in entries:
        total += 1
        if isinstance(entry.category, Category):
            key = entry.category.name
        else:
            key = entry.category or "UNKNOWN"
        counts[key] = counts.get(key, 0) + 1
    return CatalogStats(total=total, by_category=counts)


def tag_vocabulary(entries: Iterable[Entry]) -> List[Tuple[str, int]]:
    """Distinct tags with usage counts, most used first."""

    counter: Counter = Counter()
    for entry in entries:
        counter.update(dict.fromkeys(entry.tags, 1))
    return counter.most_common()
