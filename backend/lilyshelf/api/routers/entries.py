"""Catalog endpoints: listing, pipeline views and password-gated mutations."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field

from ...api.dependencies import get_catalog_gateway, get_settings
from ...config import Settings
from ...domain.catalog.errors import CatalogError, ValidationError
from ...domain.catalog.gateway import CatalogGateway
from ...domain.catalog.models import Entry
from ...domain.catalog.pipeline import (
    SortKey,
    ViewState,
    collection_stats,
    run_pipeline,
    tag_vocabulary,
)
from ...infra.logging import get_logger
from ...infra.metrics import get_metrics_client

router = APIRouter(prefix="/api", tags=["entries"])
logger = get_logger(__name__)
metrics = get_metrics_client()

MAX_QUERY_LENGTH = 256
MAX_PAGE_SIZE = 100


class EntryRecord(BaseModel):
    """Wire representation of one entry (camelCase, as stored)."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    author: str
    category: str
    rating: str
    cover_url: Optional[str] = Field(default=None, alias="coverUrl")
    note: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    plurk_url: Optional[str] = Field(default=None, alias="plurkUrl")
    created_at: int = Field(alias="createdAt")


class EntryFields(BaseModel):
    """Mutable entry fields accepted on create/edit; all optional here."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: Optional[str] = None
    author: Optional[str] = None
    category: Optional[str] = None
    rating: Optional[str] = None
    cover_url: Optional[str] = Field(default=None, alias="coverUrl")
    note: Optional[str] = None
    tags: Union[List[str], str, None] = None
    plurk_url: Optional[str] = Field(default=None, alias="plurkUrl")


class CreateEntryRequest(EntryFields):
    password: str = ""


class UpdateEntryRequest(EntryFields):
    id: Optional[str] = None
    password: str = ""


class DeleteEntryRequest(BaseModel):
    id: Optional[str] = None
    password: str = ""


class MutationResponse(BaseModel):
    message: str
    entry: Optional[EntryRecord] = None


class PaginationMeta(BaseModel):
    page: int
    page_size: int
    total_items: int
    total_pages: int


class EntryListResponse(BaseModel):
    items: List[EntryRecord] = Field(default_factory=list)
    pagination: PaginationMeta
    filters: Dict[str, object] = Field(default_factory=dict)
    search_applied: bool = False


class CatalogStatsResponse(BaseModel):
    total: int
    by_category: Dict[str, int]


class TagCount(BaseModel):
    tag: str
    count: int


class TagListResponse(BaseModel):
    items: List[TagCount] = Field(default_factory=list)


@router.get(
    "/get",
    response_model=List[EntryRecord],
    summary="List the whole collection",
)
def list_collection(
    gateway: CatalogGateway = Depends(get_catalog_gateway),
) -> List[EntryRecord]:
    metrics.increment("catalog_list_http_total")
    entries = _list_or_raise(gateway)
    return [_serialize_entry(entry) for entry in entries]


@router.get(
    "/entries",
    response_model=EntryListResponse,
    summary="Filter, sort and paginate the collection",
)
def browse_entries(
    category: Optional[str] = Query(None, description="'ALL' or a category."),
    rating: Optional[str] = Query(None, description="'ALL' or a rating."),
    tag: List[str] = Query(default_factory=list),
    q: Optional[str] = Query(None, description="Case-insensitive search text."),
    sort: str = Query(SortKey.DATE_DESC.value),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=MAX_PAGE_SIZE),
    gateway: CatalogGateway = Depends(get_catalog_gateway),
    settings: Settings = Depends(get_settings),
) -> EntryListResponse:
    metrics.increment("catalog_browse_http_total")
    if sort not in {key.value for key in SortKey}:
        raise _invalid_request("Unsupported sort key", fields={"sort": sort})
    search = _normalize_query(q)
    tags = _normalize_multi_value(tag)
    try:
        state = ViewState(
            category=category or "ALL",
            rating=rating or "ALL",
            tags=tags,
            search=search or "",
            sort=sort,
            page=page,
            page_size=page_size or settings.catalog.page_size,
        )
    except ValueError as exc:
        raise _invalid_request(
            str(exc), fields={"category": category, "rating": rating}
        ) from exc

    entries = _list_or_raise(gateway)
    result = run_pipeline(entries, state)
    return EntryListResponse(
        items=[_serialize_entry(entry) for entry in result.items],
        pagination=PaginationMeta(
            page=result.page,
            page_size=result.page_size or len(result.items),
            total_items=result.total_items,
            total_pages=result.total_pages,
        ),
        filters=state.to_dict(),
        search_applied=bool(state.search),
    )


@router.get(
    "/entries/stats",
    response_model=CatalogStatsResponse,
    summary="Collection totals per category",
)
def entry_stats(
    gateway: CatalogGateway = Depends(get_catalog_gateway),
) -> CatalogStatsResponse:
    stats = collection_stats(_list_or_raise(gateway))
    return CatalogStatsResponse(total=stats.total, by_category=stats.by_category)


@router.get(
    "/tags",
    response_model=TagListResponse,
    summary="Distinct tags with usage counts",
)
def list_tags(
    gateway: CatalogGateway = Depends(get_catalog_gateway),
) -> TagListResponse:
    vocabulary = tag_vocabulary(_list_or_raise(gateway))
    return TagListResponse(
        items=[TagCount(tag=tag, count=count) for tag, count in vocabulary]
    )


@router.post(
    "/add",
    response_model=MutationResponse,
    summary="Create an entry (password required)",
)
def add_entry(
    payload: CreateEntryRequest,
    gateway: CatalogGateway = Depends(get_catalog_gateway),
) -> MutationResponse:
    metrics.increment("catalog_add_http_total")
    fields = _entry_fields(payload)
    try:
        created = gateway.create_entry(fields, secret=payload.password)
    except CatalogError as exc:
        raise _catalog_error(exc, operation="create") from exc
    return MutationResponse(
        message="Entry saved",
        entry=_serialize_entry(created) if created else None,
    )


@router.post(
    "/edit",
    response_model=MutationResponse,
    summary="Update an entry's mutable fields (password required)",
)
def edit_entry(
    payload: UpdateEntryRequest,
    gateway: CatalogGateway = Depends(get_catalog_gateway),
) -> MutationResponse:
    metrics.increment("catalog_edit_http_total")
    fields = _entry_fields(payload)
    try:
        updated = gateway.update_entry(
            payload.id or "", fields, secret=payload.password
        )
    except CatalogError as exc:
        raise _catalog_error(exc, operation="update", entry_id=payload.id) from exc
    return MutationResponse(
        message="Entry updated",
        entry=_serialize_entry(updated) if updated else None,
    )


@router.post(
    "/delete",
    response_model=MutationResponse,
    summary="Delete an entry permanently (password required)",
)
def delete_entry(
    payload: DeleteEntryRequest,
    gateway: CatalogGateway = Depends(get_catalog_gateway),
) -> MutationResponse:
    metrics.increment("catalog_delete_http_total")
    try:
        gateway.delete_entry(payload.id or "", secret=payload.password)
    except CatalogError as exc:
        raise _catalog_error(exc, operation="delete", entry_id=payload.id) from exc
    return MutationResponse(message="Entry deleted")


def _list_or_raise(gateway: CatalogGateway) -> List[Entry]:
    try:
        return gateway.list_entries()
    except CatalogError as exc:
        raise _catalog_error(exc, operation="list") from exc


def _entry_fields(payload: EntryFields) -> Dict[str, Any]:
    return payload.model_dump(
        by_alias=True,
        exclude_unset=True,
        exclude={"id", "password"},
    )


def _serialize_entry(entry: Entry) -> EntryRecord:
    return EntryRecord.model_validate(entry.to_row())


def _normalize_query(value: Optional[str]) -> Optional[str]:
    """Search text is a literal substring; whitespace is kept as typed."""

    if not value:
        return None
    return value[:MAX_QUERY_LENGTH]


def _normalize_multi_value(values: List[str]) -> tuple[str, ...]:
    normalized: List[str] = []
    seen: set[str] = set()
    for chunk in values:
        for part in (chunk or "").split(","):
            cleaned = part.strip()
            if not cleaned or cleaned in seen:
                continue
            normalized.append(cleaned)
            seen.add(cleaned)
    return tuple(normalized)


def _catalog_error(
    exc: CatalogError,
    *,
    operation: str,
    entry_id: Optional[str] = None,
) -> HTTPException:
    logger.warning(
        "catalog_request_failed",
        extra={
            "operation": operation,
            "entry_id": entry_id,
            "error_code": exc.error_code,
            "status": int(exc.status_code),
        },
    )
    return HTTPException(
        status_code=int(exc.status_code),
        detail={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": exc.details,
        },
    )


def _invalid_request(
    message: str,
    *,
    fields: Dict[str, object] | None = None,
) -> HTTPException:
    return HTTPException(
        status_code=int(ValidationError.status_code),
        detail={
            "error_code": "CATALOG-INVALID-REQUEST",
            "message": message,
            "details": fields or {},
        },
    )
