"""Create/edit form contract shared by the view layer."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional, Union

from ...config import DEFAULT_COVER_URL
from .errors import ValidationError
from .models import Category, Entry, Rating, parse_category, parse_rating, parse_tags

__all__ = ["EntryForm"]


@dataclass(frozen=True)
class EntryForm:
    """Raw form input; `entry_id` is set when editing an existing entry.

    Category and rating accept a member, its stored label or its name.
    Values outside the enumerations are kept as raw strings so an edit
    form never silently replaces them; `validate()` rejects them.
    """

    title: str = ""
    author: str = ""
    category: Union[Category, str] = Category.MANGA
    rating: Union[Rating, str] = Rating.ORDINARY
    note: str = ""
    tags: str = ""
    cover_url: str = ""
    plurk_url: str = ""
    password: str = ""
    entry_id: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "category", _coerce_choice(parse_category, self.category))
        object.__setattr__(self, "rating", _coerce_choice(parse_rating, self.rating))

    @property
    def is_edit(self) -> bool:
        return self.entry_id is not None

    @classmethod
    def for_entry(cls, entry: Entry) -> "EntryForm":
        """Pre-fill an edit form; the password is never pre-filled."""

        return cls(
            title=entry.title,
            author=entry.author,
            category=entry.category,
            rating=entry.rating,
            note=entry.note or "",
            tags=" ".join(entry.tags),
            cover_url=entry.cover_url or "",
            plurk_url=entry.plurk_url or "",
            entry_id=entry.id,
        )

    def with_changes(self, **changes: Any) -> "EntryForm":
        return replace(self, **changes)

    def validate(self) -> None:
        """Reject locally, before any request is issued."""

        missing = [
            name
            for name, value in (
                ("title", self.title),
                ("author", self.author),
                ("password", self.password),
            )
            if not (value or "").strip()
        ]
        if missing:
            raise ValidationError(
                "Please fill in the title, author and password",
                details={"fields": missing},
            )
        unknown = [
            name
            for name, value, enum_cls in (
                ("category", self.category, Category),
                ("rating", self.rating, Rating),
            )
            if not isinstance(value, enum_cls)
        ]
        if unknown:
            raise ValidationError(
                "Please pick a category and rating from the list",
                details={"fields": unknown},
            )

    def to_payload(self, *, default_cover_url: str = DEFAULT_COVER_URL) -> Dict[str, Any]:
        """Fields sent to the gateway, excluding the password."""

        return {
            "title": self.title.strip(),
            "author": self.author.strip(),
            "category": _choice_value(self.category),
            "rating": _choice_value(self.rating),
            "note": self.note,
            "tags": parse_tags(self.tags),
            "coverUrl": self.cover_url.strip() or default_cover_url,
            "plurkUrl": self.plurk_url.strip(),
        }


def _coerce_choice(parser, value: Any):
    try:
        return parser(value)
    except ValueError:
        return "" if value is None else str(value)


def _choice_value(value: Union[Enum, str]) -> str:
    if isinstance(value, Enum):
        return value.value
    return value
