"""Catalog data models, enumerations and their lookup tables."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Type, TypeVar, Union

__all__ = [
    "Category",
    "Rating",
    "Entry",
    "CATEGORY_DISPLAY_NAMES",
    "CATEGORY_STYLES",
    "DEFAULT_STYLE",
    "RATING_ICONS",
    "RATING_STYLES",
    "RATING_WEIGHTS",
    "category_style",
    "coerce_timestamp",
    "parse_category",
    "parse_rating",
    "parse_tags",
    "rating_style",
    "rating_weight",
]


class Category(str, Enum):
    """Closed set of media categories; values are the stored labels."""

    MANGA = "漫畫"
    NOVEL = "小說"
    MOVIE = "電影"
    ANIMATION = "動畫"
    GAME = "遊戲"
    DRAMA_SERIES = "劇集"
    GAY = "甲片"
    OTHER = "其他"


class Rating(str, Enum):
    """Closed set of personal ratings, highest first."""

    BIBLE = "聖經"
    TOP_TIER = "極品"
    DESTINY = "頂級"
    ORDINARY = "普通"
    MYSTERIOUS = "神秘"


DEFAULT_STYLE = "text-stone-400 border-stone-200"

RATING_WEIGHTS: Dict[Rating, int] = {
    Rating.BIBLE: 5,
    Rating.TOP_TIER: 4,
    Rating.DESTINY: 3,
    Rating.ORDINARY: 2,
    Rating.MYSTERIOUS: 1,
}

RATING_STYLES: Dict[Rating, str] = {
    Rating.BIBLE: "bg-amber-50 text-amber-700 border-amber-200",
    Rating.TOP_TIER: "bg-rose-50 text-rose-700 border-rose-200",
    Rating.DESTINY: "bg-blue-50 text-blue-700 border-blue-200",
    Rating.ORDINARY: "bg-stone-50 text-stone-700 border-stone-200",
    Rating.MYSTERIOUS: "bg-purple-50 text-purple-700 border-purple-200",
}

RATING_ICONS: Dict[Rating, str] = {
    Rating.BIBLE: "👑",
    Rating.TOP_TIER: "🌹",
    Rating.DESTINY: "✨",
    Rating.ORDINARY: "☕",
    Rating.MYSTERIOUS: "🔮",
}

CATEGORY_STYLES: Dict[Category, str] = {
    Category.MANGA: "text-blue-500 border-blue-200",
    Category.NOVEL: "text-emerald-500 border-emerald-200",
    Category.MOVIE: DEFAULT_STYLE,
    Category.ANIMATION: DEFAULT_STYLE,
    Category.GAME: DEFAULT_STYLE,
    Category.DRAMA_SERIES: DEFAULT_STYLE,
    Category.GAY: DEFAULT_STYLE,
    Category.OTHER: DEFAULT_STYLE,
}

CATEGORY_DISPLAY_NAMES: Dict[Category, str] = {
    Category.MANGA: "MANGA",
    Category.NOVEL: "NOVEL",
    Category.MOVIE: "MOVIE",
    Category.ANIMATION: "ANIME",
    Category.GAME: "GAME",
    Category.DRAMA_SERIES: "DRAMA",
    Category.GAY: "GAY",
    Category.OTHER: "OTHER",
}


def _assert_total(table: Mapping[Any, Any], enum_cls: Type[Enum], name: str) -> None:
    missing = [member.name for member in enum_cls if member not in table]
    if missing:
        raise AssertionError(f"{name} is missing entries for {missing}")


for _table, _enum_cls, _name in (
    (RATING_WEIGHTS, Rating, "RATING_WEIGHTS"),
    (RATING_STYLES, Rating, "RATING_STYLES"),
    (RATING_ICONS, Rating, "RATING_ICONS"),
    (CATEGORY_STYLES, Category, "CATEGORY_STYLES"),
    (CATEGORY_DISPLAY_NAMES, Category, "CATEGORY_DISPLAY_NAMES"),
):
    _assert_total(_table, _enum_cls, _name)


E = TypeVar("E", Category, Rating)

TAG_SPLIT_PATTERN = re.compile(r"[,，\s]+")
FRACTION_PATTERN = re.compile(r"\.(\d+)")


def _parse_enum(enum_cls: Type[E], value: Union[str, E]) -> E:
    if isinstance(value, enum_cls):
        return value
    text = str(value).strip()
    try:
        return enum_cls(text)
    except ValueError:
        pass
    try:
        return enum_cls[text.upper()]
    except KeyError:
        allowed = ", ".join(member.name for member in enum_cls)
        raise ValueError(
            f"{text!r} is not a valid {enum_cls.__name__.lower()} (expected one of {allowed})"
        ) from None


def parse_category(value: Union[str, Category]) -> Category:
    """Accept either the stored label or the member name."""

    return _parse_enum(Category, value)


def parse_rating(value: Union[str, Rating]) -> Rating:
    """Accept either the stored label or the member name."""

    return _parse_enum(Rating, value)


def _lenient(enum_cls: Type[E], value: Any) -> Union[E, str]:
    try:
        return _parse_enum(enum_cls, value)
    except ValueError:
        return str(value)


def rating_weight(rating: Union[Rating, str, None]) -> int:
    """Sort weight for a rating; unknown values weigh 0."""

    if isinstance(rating, Rating):
        return RATING_WEIGHTS[rating]
    try:
        return RATING_WEIGHTS[parse_rating(rating or "")]
    except ValueError:
        return 0


def rating_style(rating: Union[Rating, str, None]) -> str:
    try:
        return RATING_STYLES[parse_rating(rating or "")]
    except ValueError:
        return DEFAULT_STYLE


def category_style(category: Union[Category, str, None]) -> str:
    try:
        return CATEGORY_STYLES[parse_category(category or "")]
    except ValueError:
        return DEFAULT_STYLE


def parse_tags(raw: Union[str, Iterable[str], None]) -> List[str]:
    """Split free text on runs of commas/whitespace and drop empty pieces.

    Lists are cleaned the same way so stored rows never carry blank tags.
    """

    if raw is None:
        return []
    if isinstance(raw, str):
        pieces: Iterable[str] = TAG_SPLIT_PATTERN.split(raw)
    else:
        pieces = (str(item) for item in raw)
    return [piece.strip() for piece in pieces if piece and piece.strip()]


def coerce_timestamp(value: Any) -> int:
    """Normalize ``createdAt`` to epoch milliseconds.

    The store may hand back a number or an ISO-8601 string when the column
    is filled by a database default.
    """

    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        raise ValueError("createdAt must be numeric or an ISO-8601 string")
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, datetime):
        moment = value
    else:
        text = str(value).strip()
        try:
            return int(float(text))
        except ValueError:
            pass
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        # fromisoformat before 3.11 only takes 3 or 6 fractional digits.
        text = FRACTION_PATTERN.sub(lambda match: "." + match.group(1)[:6].ljust(6, "0"), text)
        moment = datetime.fromisoformat(text)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


@dataclass(frozen=True)
class Entry:
    """One catalogued media item as held in memory."""

    id: str
    title: str
    author: str
    category: Union[Category, str]
    rating: Union[Rating, str]
    created_at: int
    tags: List[str] = field(default_factory=list)
    cover_url: Optional[str] = None
    note: Optional[str] = None
    plurk_url: Optional[str] = None

    @property
    def weight(self) -> int:
        return rating_weight(self.rating)

    @property
    def category_label(self) -> str:
        if isinstance(self.category, Category):
            return CATEGORY_DISPLAY_NAMES[self.category]
        return self.category

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Entry":
        """Build an Entry from a store row.

        Unknown category/rating strings are preserved rather than rejected so
        a single bad row cannot break the listing.
        """

        return cls(
            id=str(row["id"]),
            title=str(row.get("title") or ""),
            author=str(row.get("author") or ""),
            category=_lenient(Category, row.get("category") or ""),
            rating=_lenient(Rating, row.get("rating") or ""),
            created_at=coerce_timestamp(row.get("createdAt")),
            tags=parse_tags(row.get("tags")),
            cover_url=_optional_text(row.get("coverUrl")),
            note=_optional_text(row.get("note")),
            plurk_url=_optional_text(row.get("plurkUrl")),
        )

    def to_row(self) -> Dict[str, Any]:
        """Serialize using the store's camelCase column names."""

        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "category": _enum_value(self.category),
            "rating": _enum_value(self.rating),
            "coverUrl": self.cover_url,
            "note": self.note,
            "tags": list(self.tags),
            "plurkUrl": self.plurk_url,
            "createdAt": self.created_at,
        }


def _enum_value(value: Union[Enum, str]) -> str:
    if isinstance(value, Enum):
        return value.value
    return value
