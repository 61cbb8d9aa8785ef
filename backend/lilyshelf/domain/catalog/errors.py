"""Catalog error taxonomy surfaced to API handlers and the view session."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Dict

__all__ = [
    "CatalogError",
    "StoreError",
    "TransportError",
    "Unauthorized",
    "ValidationError",
]


class CatalogError(Exception):
    """Base error carrying an HTTP status and a user-facing message."""

    status_code: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR
    error_code: str = "CATALOG-ERROR"

    def __init__(self, message: str, *, details: Dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(CatalogError):
    """A required field is missing or a value is outside its enumeration."""

    status_code = HTTPStatus.UNPROCESSABLE_ENTITY
    error_code = "CATALOG-INVALID-REQUEST"


class Unauthorized(CatalogError):
    """The shared secret did not match the administrator secret."""

    status_code = HTTPStatus.UNAUTHORIZED
    error_code = "CATALOG-UNAUTHORIZED"


class StoreError(CatalogError):
    """The record store rejected or failed the operation."""

    status_code = HTTPStatus.BAD_GATEWAY
    error_code = "CATALOG-STORE-REJECTED"


class TransportError(CatalogError):
    """The request to the record store could not complete."""

    status_code = HTTPStatus.BAD_GATEWAY
    error_code = "CATALOG-STORE-UNREACHABLE"
