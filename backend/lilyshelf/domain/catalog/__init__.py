"""Catalog domain package."""

from .errors import (
    CatalogError,
    StoreError,
    TransportError,
    Unauthorized,
    ValidationError,
)
from .forms import EntryForm
from .gateway import CatalogGateway
from .models import Category, Entry, Rating, parse_tags, rating_weight
from .pipeline import ALL, PipelineResult, SortKey, ViewState, run_pipeline
from .session import CatalogSession
from .store import (
    InMemoryRecordStore,
    RecordStore,
    RestRecordStore,
    build_record_store,
)

__all__ = [
    "ALL",
    "CatalogError",
    "CatalogGateway",
    "CatalogSession",
    "Category",
    "Entry",
    "EntryForm",
    "InMemoryRecordStore",
    "PipelineResult",
    "Rating",
    "RecordStore",
    "RestRecordStore",
    "SortKey",
    "StoreError",
    "TransportError",
    "Unauthorized",
    "ValidationError",
    "ViewState",
    "build_record_store",
    "parse_tags",
    "rating_weight",
    "run_pipeline",
]
