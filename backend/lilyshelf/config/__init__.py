"""Config package exporting loader helpers."""

from .loader import DEFAULT_COVER_URL, DEFAULT_PAGE_SIZE, Settings, load_settings

__all__ = ["Settings", "load_settings", "DEFAULT_COVER_URL", "DEFAULT_PAGE_SIZE"]
