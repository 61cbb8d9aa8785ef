"""Illustrative entries shown when the store is empty, and used for seeding."""

from __future__ import annotations

from typing import Any, Dict, List

from ...config import DEFAULT_COVER_URL
from .models import Category, Entry, Rating

__all__ = ["PLACEHOLDER_ROWS", "placeholder_entries"]

PLACEHOLDER_ROWS: List[Dict[str, Any]] = [
    {
        "id": "placeholder-1",
        "title": "やがて君になる",
        "author": "仲谷鳰",
        "category": Category.MANGA.value,
        "rating": Rating.BIBLE.value,
        "coverUrl": DEFAULT_COVER_URL,
        "note": "Example entry: replace it with your own collection.",
        "tags": ["百合", "校園"],
        "plurkUrl": "",
        "createdAt": 1700000000000,
    },
    {
        "id": "placeholder-2",
        "title": "Portrait of a Lady on Fire",
        "author": "Céline Sciamma",
        "category": Category.MOVIE.value,
        "rating": Rating.TOP_TIER.value,
        "coverUrl": DEFAULT_COVER_URL,
        "note": "Example entry.",
        "tags": ["film", "historical"],
        "plurkUrl": "",
        "createdAt": 1690000000000,
    },
    {
        "id": "placeholder-3",
        "title": "Example novel",
        "author": "Unknown",
        "category": Category.NOVEL.value,
        "rating": Rating.ORDINARY.value,
        "coverUrl": DEFAULT_COVER_URL,
        "note": None,
        "tags": [],
        "plurkUrl": "",
        "createdAt": 1680000000000,
    },
]


def placeholder_entries() -> List[Entry]:
    return [Entry.from_row(row) for row in PLACEHOLDER_ROWS]
