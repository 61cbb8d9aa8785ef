"""System health endpoint for frontend polling."""

from typing import Any

from fastapi import APIRouter, Depends

from ...api.dependencies import get_settings
from ...config import Settings

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/healthz")
def healthcheck(settings: Settings = Depends(get_settings)) -> dict[str, Any]:
    """Return coarse-grained readiness information without touching the store."""

    return {
        "status": "ok",
        "environment": settings.environment,
        "recordStore": "configured" if settings.store.is_configured else "unconfigured",
        "table": settings.store.table,
        "mutationsEnabled": bool(settings.admin_password),
    }
