"""View-session state for one browsing client.

Holds the last successfully listed collection plus the current view
parameters, and turns every gateway failure into a user-visible message.
"""

from __future__ import annotations

from typing import Any, List, Optional, Tuple

from ...config import DEFAULT_COVER_URL
from ...infra.logging import get_logger
from .errors import CatalogError
from .forms import EntryForm
from .gateway import CatalogGateway
from .models import Entry
from .pipeline import (
    CatalogStats,
    PipelineResult,
    ViewState,
    collection_stats,
    run_pipeline,
    tag_vocabulary,
)
from .preferences import THEMES, PreferenceStore
from .samples import placeholder_entries

__all__ = ["CatalogSession"]

logger = get_logger(__name__)

GENERIC_FAILURE_MESSAGE = "Operation failed, please try again"
LIST_FAILURE_MESSAGE = "Could not load the collection; showing the last known data"


class CatalogSession:
    def __init__(
        self,
        gateway: CatalogGateway,
        *,
        preferences: Optional[PreferenceStore] = None,
        page_size: Optional[int] = None,
        placeholder_when_empty: bool = False,
        default_cover_url: str = DEFAULT_COVER_URL,
    ) -> None:
        self._gateway = gateway
        self._preferences = preferences
        self._placeholder_when_empty = placeholder_when_empty
        self._default_cover_url = default_cover_url
        self.entries: List[Entry] = []
        self.loaded = False
        self.showing_placeholders = False
        self.state = ViewState(page=1 if page_size else None, page_size=page_size)
        self.form: Optional[EntryForm] = None
        self.message: Optional[str] = None

    # ------------------------------------------------------------------
    # Collection
    # ------------------------------------------------------------------
    def refresh(self) -> bool:
        """Replace the in-memory collection with a fresh listing.

        On failure the previous collection stays in place untouched.
        """

        try:
            listed = self._gateway.list_entries()
        except CatalogError as exc:
            logger.warning(
                "catalog_session_refresh_failed",
                extra={"error_code": exc.error_code},
            )
            self.message = LIST_FAILURE_MESSAGE
            return False
        except Exception:
            logger.exception("catalog_session_refresh_crashed")
            self.message = LIST_FAILURE_MESSAGE
            return False
        if not listed and self._placeholder_when_empty:
            self.entries = placeholder_entries()
            self.showing_placeholders = True
        else:
            self.entries = listed
            self.showing_placeholders = False
        self.loaded = True
        return True

    def visible(self) -> PipelineResult:
        return run_pipeline(self.entries, self.state)

    def update_view(self, **changes: Any) -> PipelineResult:
        self.state = self.state.with_changes(**changes)
        return self.visible()

    def toggle_tag(self, tag: str) -> PipelineResult:
        self.state = self.state.toggle_tag(tag)
        return self.visible()

    def stats(self) -> CatalogStats:
        return collection_stats(self.entries)

    def tags(self) -> List[Tuple[str, int]]:
        return tag_vocabulary(self.entries)

    # ------------------------------------------------------------------
    # Editing surface
    # ------------------------------------------------------------------
    def open_create_form(self) -> EntryForm:
        self.form = EntryForm()
        return self.form

    def open_edit_form(self, entry_id: str) -> EntryForm:
        for entry in self.entries:
            if entry.id == entry_id:
                self.form = EntryForm.for_entry(entry)
                return self.form
        raise KeyError(f"Entry {entry_id} not loaded")

    def close_form(self) -> None:
        self.form = None

    def submit_form(self, form: EntryForm) -> bool:
        """Create or edit from form input, then re-list and close on success.

        Failures keep the form (and its input) open for another attempt.
        """

        self.form = form
        try:
            form.validate()
            payload = form.to_payload(default_cover_url=self._default_cover_url)
            if form.is_edit:
                self._gateway.update_entry(
                    form.entry_id or "", payload, secret=form.password
                )
            else:
                self._gateway.create_entry(payload, secret=form.password)
        except CatalogError as exc:
            self.message = exc.message or GENERIC_FAILURE_MESSAGE
            return False
        except Exception:
            logger.exception("catalog_session_submit_crashed")
            self.message = GENERIC_FAILURE_MESSAGE
            return False
        self.message = "Entry updated" if form.is_edit else "Entry saved"
        self.form = None
        self.refresh()
        return True

    def delete(self, entry_id: str, *, password: str) -> bool:
        if not (password or "").strip():
            self.message = "Please enter the password"
            return False
        try:
            self._gateway.delete_entry(entry_id, secret=password)
        except CatalogError as exc:
            self.message = exc.message or GENERIC_FAILURE_MESSAGE
            return False
        except Exception:
            logger.exception("catalog_session_delete_crashed")
            self.message = GENERIC_FAILURE_MESSAGE
            return False
        self.message = "Entry deleted"
        self.refresh()
        return True

    # ------------------------------------------------------------------
    # Preferences
    # ------------------------------------------------------------------
    @property
    def theme(self) -> str:
        if self._preferences is None:
            return "light"
        return self._preferences.theme()

    def set_theme(self, theme: str) -> str:
        if theme not in THEMES:
            raise ValueError(f"theme must be one of {THEMES}")
        if self._preferences is not None:
            self._preferences.set_theme(theme)
        return theme

    def toggle_theme(self) -> str:
        return self.set_theme("light" if self.theme == "dark" else "dark")
