"""Key-value persistence for view preferences such as the colour theme."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from ...infra.logging import get_logger

__all__ = ["PreferenceStore", "THEME_KEY", "THEMES"]

logger = get_logger(__name__)

THEME_KEY = "theme"
THEMES = ("light", "dark")


class PreferenceStore:
    """JSON file of preferences: read once at startup, written on every change."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path).expanduser()
        self._values: Dict[str, Any] = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        if self._values.get(key) == value:
            return
        self._values[key] = value
        self._save()

    def theme(self, default: str = "light") -> str:
        value = self.get(THEME_KEY)
        return value if value in THEMES else default

    def set_theme(self, theme: str) -> None:
        if theme not in THEMES:
            raise ValueError(f"theme must be one of {THEMES}")
        self.set(THEME_KEY, theme)

    def _load(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            loaded = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError:
            logger.warning("preferences_file_unreadable", extra={"path": str(self._path)})
            return {}
        if not isinstance(loaded, dict):
            logger.warning("preferences_file_not_mapping", extra={"path": str(self._path)})
            return {}
        return loaded

    def _save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            json.dumps(self._values, ensure_ascii=False, indent=2, sort_keys=True),
            encoding="utf-8",
        )
