"""Profile-driven configuration loader for the catalog service."""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional

import yaml

DEFAULT_ENVIRONMENT = "dev"
DEFAULT_STORE_TABLE = "collection"
DEFAULT_PAGE_SIZE = 24
DEFAULT_COVER_URL = (
    "https://images.unsplash.com/photo-1543002588-bfa74002ed7e"
    "?auto=format&fit=crop&q=80&w=200&h=300"
)
DEFAULT_PREFERENCES_PATH = "~/.lilyshelf/preferences.json"
DEFAULT_ALLOWED_ORIGINS: tuple[str, ...] = (
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:4173",
    "http://127.0.0.1:4173",
)
DEFAULT_PROFILE_DICT: dict[str, Any] = {
    "environment": DEFAULT_ENVIRONMENT,
    "store": {
        "url": "",
        "key": "",
        "table": DEFAULT_STORE_TABLE,
        "timeout_seconds": None,
    },
    "admin": {"password": ""},
    "catalog": {
        "page_size": DEFAULT_PAGE_SIZE,
        "default_cover_url": DEFAULT_COVER_URL,
        "placeholder_when_empty": False,
    },
    "preferences": {"path": DEFAULT_PREFERENCES_PATH},
    "logging": {"level": "INFO"},
    "cors": {"allowed_origins": list(DEFAULT_ALLOWED_ORIGINS)},
}
CONFIG_PROFILE_ENV = "LILYSHELF_CONFIG_PROFILE"
CONFIG_DIR_ENV = "LILYSHELF_CONFIG_DIR"
STORE_URL_ENV = "SUPABASE_URL"
STORE_KEY_ENV = "SUPABASE_KEY"
ADMIN_PASSWORD_ENV = "ADMIN_PASSWORD"
DEFAULT_PROFILE = "dev"
DEFAULT_CONFIG_ROOT = Path(__file__).resolve().parents[3] / "config" / "profiles"
CONFIG_EXTENSIONS = (".yaml", ".yml")


@dataclass
class StoreConfig:
    url: str = ""
    key: str = ""
    table: str = DEFAULT_STORE_TABLE
    timeout_seconds: Optional[float] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.key)


@dataclass
class CatalogConfig:
    page_size: int = DEFAULT_PAGE_SIZE
    default_cover_url: str = DEFAULT_COVER_URL
    placeholder_when_empty: bool = False


@dataclass
class Settings:
    environment: str = DEFAULT_ENVIRONMENT
    store: StoreConfig = field(default_factory=StoreConfig)
    admin_password: str = ""
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    preferences_path: str = DEFAULT_PREFERENCES_PATH
    log_level: str = "INFO"
    allowed_origins: List[str] = field(
        default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS)
    )
    raw: dict[str, Any] = field(default_factory=dict)


def load_settings(
    profile: str | None = None, config_dir: str | Path | None = None
) -> Settings:
    """Load settings from the requested YAML profile or fall back to defaults.

    Secrets (store URL, store key, admin password) can always be supplied
    through the process environment, which wins over the profile.
    """

    profile_name = profile or os.getenv(CONFIG_PROFILE_ENV, DEFAULT_PROFILE)
    config_root = Path(
        config_dir or os.getenv(CONFIG_DIR_ENV, DEFAULT_CONFIG_ROOT)
    ).expanduser()
    config_data = _load_profile_dict(profile_name, config_root)
    if not config_data:
        config_data = copy.deepcopy(DEFAULT_PROFILE_DICT)

    store_cfg = config_data.get("store") or {}
    admin_cfg = config_data.get("admin") or {}
    catalog_cfg = config_data.get("catalog") or {}
    preferences_cfg = config_data.get("preferences") or {}
    logging_cfg = config_data.get("logging") or {}
    cors_cfg = config_data.get("cors") or {}

    return Settings(
        environment=str(config_data.get("environment", DEFAULT_ENVIRONMENT)),
        store=_build_store_config(store_cfg),
        admin_password=os.getenv(
            ADMIN_PASSWORD_ENV, str(admin_cfg.get("password") or "")
        ),
        catalog=_build_catalog_config(catalog_cfg),
        preferences_path=str(preferences_cfg.get("path") or DEFAULT_PREFERENCES_PATH),
        log_level=str(logging_cfg.get("level") or "INFO"),
        allowed_origins=list(
            cors_cfg.get("allowed_origins") or DEFAULT_ALLOWED_ORIGINS
        ),
        raw=config_data,
    )


def _load_profile_dict(profile_name: str, config_root: Path) -> dict[str, Any]:
    """Load the YAML profile if available, otherwise return an empty dict."""

    if not config_root.exists():
        return {}

    for extension in CONFIG_EXTENSIONS:
        candidate = config_root / f"{profile_name}{extension}"
        if not candidate.exists():
            continue
        try:
            with candidate.open("r", encoding="utf-8") as handle:
                loaded = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise RuntimeError(
                f"Failed to parse config profile {candidate}: {exc}"
            ) from exc
        if not isinstance(loaded, dict):
            raise RuntimeError(
                f"Config profile {candidate} must be a mapping at the root"
            )
        return loaded

    return {}


def _build_store_config(store_cfg: dict[str, Any]) -> StoreConfig:
    timeout = store_cfg.get("timeout_seconds")
    return StoreConfig(
        url=os.getenv(STORE_URL_ENV, str(store_cfg.get("url") or "")).rstrip("/"),
        key=os.getenv(STORE_KEY_ENV, str(store_cfg.get("key") or "")),
        table=str(store_cfg.get("table") or DEFAULT_STORE_TABLE),
        timeout_seconds=float(timeout) if timeout is not None else None,
    )


def _build_catalog_config(catalog_cfg: dict[str, Any]) -> CatalogConfig:
    page_size = int(catalog_cfg.get("page_size", DEFAULT_PAGE_SIZE))
    if page_size < 1:
        raise RuntimeError("catalog.page_size must be a positive integer")
    return CatalogConfig(
        page_size=page_size,
        default_cover_url=str(
            catalog_cfg.get("default_cover_url") or DEFAULT_COVER_URL
        ),
        placeholder_when_empty=bool(catalog_cfg.get("placeholder_when_empty", False)),
    )
