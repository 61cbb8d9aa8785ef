"""View preferences persisted for the catalogue owner."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ...api.dependencies import get_catalog_session
from ...domain.catalog.errors import ValidationError
from ...domain.catalog.preferences import THEMES
from ...domain.catalog.session import CatalogSession
from ...infra.logging import get_logger

router = APIRouter(prefix="/api/preferences", tags=["preferences"])
logger = get_logger(__name__)


class ThemeRequest(BaseModel):
    theme: str


class PreferencesResponse(BaseModel):
    theme: str


@router.get("", response_model=PreferencesResponse, summary="Current view preferences")
def read_preferences(
    session: CatalogSession = Depends(get_catalog_session),
) -> PreferencesResponse:
    return PreferencesResponse(theme=session.theme)


@router.put("/theme", response_model=PreferencesResponse, summary="Persist the colour theme")
def update_theme(
    payload: ThemeRequest,
    session: CatalogSession = Depends(get_catalog_session),
) -> PreferencesResponse:
    try:
        theme = session.set_theme(payload.theme)
    except ValueError as exc:
        raise HTTPException(
            status_code=int(ValidationError.status_code),
            detail={
                "error_code": ValidationError.error_code,
                "message": str(exc),
                "details": {"allowed": list(THEMES)},
            },
        ) from exc
    logger.info("preferences_theme_updated", extra={"theme": theme})
    return PreferencesResponse(theme=theme)


@router.post("/theme/toggle", response_model=PreferencesResponse, summary="Flip light/dark")
def toggle_theme(
    session: CatalogSession = Depends(get_catalog_session),
) -> PreferencesResponse:
    return PreferencesResponse(theme=session.toggle_theme())
