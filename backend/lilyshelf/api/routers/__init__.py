"""Router exports for FastAPI composition."""

from . import entries, health, preferences

__all__ = ["entries", "health", "preferences"]
