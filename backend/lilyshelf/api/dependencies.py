"""Shared API dependencies."""

from __future__ import annotations

from functools import lru_cache

from ..config import Settings, load_settings
from ..domain.catalog.gateway import CatalogGateway
from ..domain.catalog.preferences import PreferenceStore
from ..domain.catalog.session import CatalogSession
from ..domain.catalog.store import build_record_store

__all__ = [
    "build_catalog_session",
    "get_catalog_gateway",
    "get_catalog_session",
    "get_settings",
]

# Profiles where an unconfigured store falls back to an in-memory table.
MEMORY_FALLBACK_ENVIRONMENTS = {"dev", "test"}


@lru_cache()
def _settings_singleton() -> Settings:
    return load_settings()


def get_settings() -> Settings:
    """Return settings loaded once per process."""

    return _settings_singleton()


@lru_cache()
def _catalog_gateway_singleton() -> CatalogGateway:
    settings = get_settings()
    store = build_record_store(
        settings,
        fallback_to_memory=settings.environment in MEMORY_FALLBACK_ENVIRONMENTS,
    )
    return CatalogGateway(
        store,
        admin_secret=settings.admin_password,
        default_cover_url=settings.catalog.default_cover_url,
    )


def get_catalog_gateway() -> CatalogGateway:
    """Return the process-wide catalog gateway."""

    return _catalog_gateway_singleton()


def build_catalog_session(settings: Settings, gateway: CatalogGateway) -> CatalogSession:
    """Wire a browsing session from the catalog and preferences settings."""

    return CatalogSession(
        gateway,
        preferences=PreferenceStore(settings.preferences_path),
        page_size=settings.catalog.page_size,
        placeholder_when_empty=settings.catalog.placeholder_when_empty,
        default_cover_url=settings.catalog.default_cover_url,
    )


@lru_cache()
def _catalog_session_singleton() -> CatalogSession:
    return build_catalog_session(get_settings(), get_catalog_gateway())


def get_catalog_session() -> CatalogSession:
    """Return the owner's session; the catalogue has a single owner."""

    return _catalog_session_singleton()
