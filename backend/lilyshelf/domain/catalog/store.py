"""Record store adapters for the remote `collection` table."""

from __future__ import annotations

import time
from typing import Any, Dict, List, Mapping, Optional, Protocol
from uuid import uuid4

import requests

from ...config import Settings
from ...infra.logging import get_logger
from .errors import StoreError, TransportError

__all__ = [
    "RecordStore",
    "InMemoryRecordStore",
    "RestRecordStore",
    "build_record_store",
]

logger = get_logger(__name__)

REST_PREFIX = "/rest/v1"


class RecordStore(Protocol):  # pragma: no cover
    """Minimal row-level interface the catalog gateway relies on."""

    def list_rows(self) -> List[Dict[str, Any]]: ...

    def insert_row(self, row: Mapping[str, Any]) -> Optional[Dict[str, Any]]: ...

    def update_row(
        self, row_id: str, changes: Mapping[str, Any]
    ) -> Optional[Dict[str, Any]]: ...

    def delete_row(self, row_id: str) -> None: ...


class InMemoryRecordStore(RecordStore):
    """Dict-backed store used for local development and tests.

    Mirrors the remote table: assigns `id`/`createdAt` on insert, keeps
    insertion order, and rejects writes to unknown ids.
    """

    def __init__(self, rows: Optional[List[Mapping[str, Any]]] = None) -> None:
        self._rows: Dict[str, Dict[str, Any]] = {}
        for row in rows or []:
            record = dict(row)
            record.setdefault("id", str(uuid4()))
            record.setdefault("createdAt", _now_ms())
            self._rows[str(record["id"])] = record

    def list_rows(self) -> List[Dict[str, Any]]:
        return [dict(row) for row in self._rows.values()]

    def insert_row(self, row: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        record = {key: value for key, value in row.items() if key not in ("id", "createdAt")}
        record["id"] = str(uuid4())
        record["createdAt"] = _now_ms()
        self._rows[record["id"]] = record
        return dict(record)

    def update_row(
        self, row_id: str, changes: Mapping[str, Any]
    ) -> Optional[Dict[str, Any]]:
        record = self._rows.get(row_id)
        if record is None:
            raise StoreError(
                f"Entry {row_id} not found", details={"id": row_id}
            )
        record.update(
            {key: value for key, value in changes.items() if key not in ("id", "createdAt")}
        )
        return dict(record)

    def delete_row(self, row_id: str) -> None:
        if self._rows.pop(row_id, None) is None:
            raise StoreError(
                f"Entry {row_id} not found", details={"id": row_id}
            )


class RestRecordStore(RecordStore):
    """PostgREST-style adapter (`/rest/v1/<table>`) built on `requests`."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        table: str = "collection",
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not base_url:
            raise ValueError("record store URL is not configured")
        self._endpoint = f"{base_url.rstrip('/')}{REST_PREFIX}/{table}"
        self._api_key = api_key
        self._timeout = timeout
        self._session = session or requests.Session()

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def list_rows(self) -> List[Dict[str, Any]]:
        response = self._request("GET", params={"select": "*"})
        payload = _decode_json(response)
        if not isinstance(payload, list):
            raise StoreError(
                "Record store returned an unexpected payload",
                details={"status": response.status_code},
            )
        return [dict(row) for row in payload if isinstance(row, Mapping)]

    def insert_row(self, row: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        self._request(
            "POST",
            json=dict(row),
            headers={"Content-Type": "application/json", "Prefer": "return=minimal"},
        )
        return None

    def update_row(
        self, row_id: str, changes: Mapping[str, Any]
    ) -> Optional[Dict[str, Any]]:
        response = self._request(
            "PATCH",
            params={"id": f"eq.{row_id}"},
            json=dict(changes),
            headers={
                "Content-Type": "application/json",
                "Prefer": "return=representation",
            },
        )
        return _first_affected(response, row_id)

    def delete_row(self, row_id: str) -> None:
        response = self._request(
            "DELETE",
            params={"id": f"eq.{row_id}"},
            headers={"Prefer": "return=representation"},
        )
        _first_affected(response, row_id)

    def _request(
        self,
        method: str,
        *,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> requests.Response:
        request_headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._api_key}",
        }
        request_headers.update(headers or {})
        try:
            response = self._session.request(
                method,
                self._endpoint,
                params=params,
                json=json,
                headers=request_headers,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            logger.warning(
                "record_store_transport_failed",
                extra={"method": method, "error": type(exc).__name__},
            )
            raise TransportError(
                "Operation failed: the record store could not be reached",
                details={"method": method},
            ) from exc
        if not response.ok:
            message = _error_message(response)
            logger.warning(
                "record_store_rejected",
                extra={
                    "method": method,
                    "status": response.status_code,
                    "store_message": message,
                },
            )
            raise StoreError(
                message,
                details={"method": method, "status": response.status_code},
            )
        return response


def build_record_store(
    settings: Settings,
    *,
    fallback_to_memory: bool = False,
) -> RecordStore:
    """Factory returning the REST adapter, or an in-memory store when allowed."""

    store_cfg = settings.store
    if store_cfg.is_configured:
        return RestRecordStore(
            store_cfg.url,
            store_cfg.key,
            table=store_cfg.table,
            timeout=store_cfg.timeout_seconds,
        )
    if not fallback_to_memory:
        raise RuntimeError(
            "Record store is not configured; set SUPABASE_URL and SUPABASE_KEY"
        )
    logger.warning("record_store_unconfigured_falling_back_to_memory")
    return InMemoryRecordStore()


def _now_ms() -> int:
    return int(time.time() * 1000)


def _decode_json(response: requests.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as exc:
        raise StoreError(
            "Record store returned malformed JSON",
            details={"status": response.status_code},
        ) from exc


def _first_affected(response: requests.Response, row_id: str) -> Dict[str, Any]:
    payload = _decode_json(response)
    if isinstance(payload, list) and payload:
        return dict(payload[0])
    raise StoreError(f"Entry {row_id} not found", details={"id": row_id})


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, Mapping):
        for key in ("message", "error", "hint"):
            value = body.get(key)
            if value:
                return str(value)
    text = (response.text or "").strip()
    if text:
        return text[:200]
    return f"Record store responded with HTTP {response.status_code}"
