"""Catalog gateway: list/create/update/delete over the record store."""

from __future__ import annotations

import hmac
from typing import Any, Dict, List, Mapping, Optional

from ...config import DEFAULT_COVER_URL
from ...infra.logging import get_logger
from ...infra.metrics import MetricsClient, get_metrics_client
from .errors import Unauthorized, ValidationError
from .models import Entry, parse_category, parse_rating, parse_tags
from .store import RecordStore

__all__ = ["CatalogGateway", "MUTABLE_FIELDS", "IMMUTABLE_FIELDS"]

logger = get_logger(__name__)

MUTABLE_FIELDS: tuple[str, ...] = (
    "title",
    "author",
    "category",
    "rating",
    "coverUrl",
    "note",
    "tags",
    "plurkUrl",
)
IMMUTABLE_FIELDS: tuple[str, ...] = ("id", "createdAt")
REQUIRED_ON_CREATE: tuple[str, ...] = ("title", "author", "category", "rating")


class CatalogGateway:
    """Stateless operations over the `collection` table.

    Every mutation is gated by a single shared-secret comparison against
    the configured administrator secret. This is a convenience gate for a
    single-owner catalogue, not an authentication system.
    """

    def __init__(
        self,
        store: RecordStore,
        *,
        admin_secret: str,
        default_cover_url: str = DEFAULT_COVER_URL,
        metrics: MetricsClient | None = None,
    ) -> None:
        self._store = store
        self._admin_secret = admin_secret or ""
        self._default_cover_url = default_cover_url
        self._metrics = metrics or get_metrics_client()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def list_entries(self) -> List[Entry]:
        """Return the whole collection in store-native order."""

        self._metrics.increment("catalog_list_total")
        try:
            with self._metrics.timed("catalog_list_store_ms"):
                rows = self._store.list_rows()
        except Exception:
            self._metrics.increment("catalog_list_failed_total")
            raise
        entries: List[Entry] = []
        for row in rows:
            if row.get("id") in (None, ""):
                logger.warning("catalog_row_without_id_skipped")
                continue
            try:
                entries.append(Entry.from_row(row))
            except ValueError as exc:
                self._metrics.increment("catalog_row_unreadable_total")
                logger.warning(
                    "catalog_row_unreadable_skipped",
                    extra={"entry_id": str(row.get("id")), "error": str(exc)},
                )
        self._metrics.gauge("catalog_entries", len(entries))
        logger.info("catalog_listed", extra={"count": len(entries)})
        return entries

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def create_entry(self, payload: Mapping[str, Any], *, secret: str) -> Optional[Entry]:
        """Persist a new entry; the store assigns `id` and `createdAt`.

        The created row is returned only when the store echoes it back.
        """

        self._require_secret(secret, operation="create")
        row = self._normalize_fields(payload, partial=False)
        if not row.get("coverUrl"):
            row["coverUrl"] = self._default_cover_url
        created = self._call_store("create", lambda: self._store.insert_row(row))
        logger.info(
            "catalog_entry_created",
            extra={"title": row["title"], "category": row["category"]},
        )
        return Entry.from_row(created) if created else None

    def update_entry(
        self, entry_id: str, changes: Mapping[str, Any], *, secret: str
    ) -> Optional[Entry]:
        """Replace the given mutable fields of one entry in place."""

        self._require_secret(secret, operation="update")
        entry_id = _require_id(entry_id)
        patch = self._normalize_fields(changes, partial=True)
        if not patch:
            raise ValidationError(
                "At least one field must be provided",
                details={"fields": list(MUTABLE_FIELDS)},
            )
        updated = self._call_store(
            "update", lambda: self._store.update_row(entry_id, patch)
        )
        logger.info(
            "catalog_entry_updated",
            extra={"entry_id": entry_id, "fields": ",".join(sorted(patch))},
        )
        return Entry.from_row(updated) if updated else None

    def delete_entry(self, entry_id: str, *, secret: str) -> None:
        """Remove one entry permanently."""

        self._require_secret(secret, operation="delete")
        entry_id = _require_id(entry_id)
        self._call_store("delete", lambda: self._store.delete_row(entry_id))
        logger.info("catalog_entry_deleted", extra={"entry_id": entry_id})

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _require_secret(self, secret: Optional[str], *, operation: str) -> None:
        supplied = (secret or "").encode("utf-8")
        expected = self._admin_secret.encode("utf-8")
        if expected and hmac.compare_digest(supplied, expected):
            return
        self._metrics.increment(f"catalog_{operation}_unauthorized_total")
        logger.warning("catalog_secret_rejected", extra={"operation": operation})
        raise Unauthorized("Incorrect password; the change was not applied")

    def _call_store(self, operation: str, call):
        self._metrics.increment(f"catalog_{operation}_attempt_total")
        try:
            with self._metrics.timed(f"catalog_{operation}_store_ms"):
                result = call()
        except Exception:
            self._metrics.increment(f"catalog_{operation}_failed_total")
            raise
        self._metrics.increment(f"catalog_{operation}_success_total")
        return result

    def _normalize_fields(
        self, payload: Mapping[str, Any], *, partial: bool
    ) -> Dict[str, Any]:
        unknown = sorted(
            key
            for key in payload
            if key not in MUTABLE_FIELDS and key not in IMMUTABLE_FIELDS
        )
        if unknown:
            raise ValidationError(
                "Unknown entry fields", details={"fields": unknown}
            )

        normalized: Dict[str, Any] = {}
        for key in MUTABLE_FIELDS:
            if key not in payload:
                continue
            value = payload[key]
            if key in ("title", "author"):
                text = (value or "").strip() if isinstance(value, str) else ""
                if not text:
                    raise ValidationError(
                        f"{key} is required", details={"field": key}
                    )
                normalized[key] = text
            elif key == "category":
                normalized[key] = _parse_choice(parse_category, key, value).value
            elif key == "rating":
                normalized[key] = _parse_choice(parse_rating, key, value).value
            elif key == "tags":
                normalized[key] = parse_tags(value)
            else:
                normalized[key] = "" if value is None else str(value).strip()

        if not partial:
            missing = [key for key in REQUIRED_ON_CREATE if key not in normalized]
            if missing:
                raise ValidationError(
                    "Missing required entry fields", details={"fields": missing}
                )
            normalized.setdefault("tags", [])
        return normalized


def _parse_choice(parser, field_name: str, value: Any):
    try:
        return parser(value if value is not None else "")
    except ValueError as exc:
        raise ValidationError(str(exc), details={"field": field_name}) from exc


def _require_id(entry_id: Any) -> str:
    text = str(entry_id or "").strip()
    if not text:
        raise ValidationError("id is required", details={"field": "id"})
    return text
