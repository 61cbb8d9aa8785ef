"""FastAPI entrypoint for the catalogue backend."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api.dependencies import get_settings
from .api.routers import entries, health, preferences
from .infra.logging import configure_logging, get_logger

logger = get_logger(__name__)


def create_app() -> FastAPI:
    """Instantiate the FastAPI app and register routers."""

    settings = get_settings()
    configure_logging(settings.log_level)
    application = FastAPI(title="Lily Shelf API", version=__version__)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    for router in (health.router, entries.router, preferences.router):
        application.include_router(router)
    logger.info(
        "app_created",
        extra={
            "environment": settings.environment,
            "store_configured": settings.store.is_configured,
        },
    )
    return application


app = create_app()
