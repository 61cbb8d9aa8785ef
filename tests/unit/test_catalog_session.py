"""Tests for the browsing session: forms, refresh and preferences."""

from __future__ import annotations

import json

import pytest

from backend.lilyshelf.config import DEFAULT_COVER_URL
from backend.lilyshelf.domain.catalog.errors import TransportError, ValidationError
from backend.lilyshelf.domain.catalog.forms import EntryForm
from backend.lilyshelf.domain.catalog.gateway import CatalogGateway
from backend.lilyshelf.domain.catalog.models import Category, Entry, Rating
from backend.lilyshelf.domain.catalog.preferences import PreferenceStore
from backend.lilyshelf.domain.catalog.samples import PLACEHOLDER_ROWS
from backend.lilyshelf.domain.catalog.session import (
    LIST_FAILURE_MESSAGE,
    CatalogSession,
)
from backend.lilyshelf.domain.catalog.store import InMemoryRecordStore
from backend.lilyshelf.infra.metrics import InMemoryMetricsClient

pytestmark = [pytest.mark.catalog]

SECRET = "hunter2"


class SpyGateway(CatalogGateway):
    """Gateway that counts calls and can be told to fail listing."""

    def __init__(self, store: InMemoryRecordStore) -> None:
        super().__init__(store, admin_secret=SECRET, metrics=InMemoryMetricsClient())
        self.calls: list[str] = []
        self.fail_listing = False

    def list_entries(self):
        self.calls.append("list")
        if self.fail_listing:
            raise TransportError("Operation failed: the record store could not be reached")
        return super().list_entries()

    def create_entry(self, payload, *, secret):
        self.calls.append("create")
        return super().create_entry(payload, secret=secret)

    def update_entry(self, entry_id, changes, *, secret):
        self.calls.append("update")
        return super().update_entry(entry_id, changes, secret=secret)

    def delete_entry(self, entry_id, *, secret):
        self.calls.append("delete")
        return super().delete_entry(entry_id, secret=secret)


def _seed_row(**overrides):
    row = {
        "id": "seed-1",
        "title": "Whisper of the Heart",
        "author": "Kondo",
        "category": "電影",
        "rating": "極品",
        "tags": ["jibli"],
        "createdAt": 1700000000000,
    }
    row.update(overrides)
    return row


@pytest.fixture
def gateway() -> SpyGateway:
    return SpyGateway(InMemoryRecordStore([_seed_row()]))


@pytest.fixture
def session(gateway) -> CatalogSession:
    session = CatalogSession(gateway, page_size=24)
    session.refresh()
    gateway.calls.clear()
    return session


def test_form_defaults_and_validation():
    form = EntryForm()

    assert form.category is Category.MANGA
    assert form.rating is Rating.ORDINARY
    assert form.is_edit is False
    with pytest.raises(ValidationError) as excinfo:
        form.validate()
    assert excinfo.value.details == {"fields": ["title", "author", "password"]}


def test_form_payload_excludes_password_and_fills_cover():
    form = EntryForm(
        title=" Kase-san ",
        author="Yamamoto",
        tags="百合, 校園",
        password=SECRET,
    )

    payload = form.to_payload()

    assert "password" not in payload
    assert payload["title"] == "Kase-san"
    assert payload["category"] == "漫畫"
    assert payload["tags"] == ["百合", "校園"]
    assert payload["coverUrl"] == DEFAULT_COVER_URL


def test_edit_form_is_prefilled_without_password():
    entry = Entry.from_row(_seed_row(note="re-watch"))

    form = EntryForm.for_entry(entry)

    assert form.entry_id == "seed-1"
    assert form.is_edit is True
    assert form.category is Category.MOVIE
    assert form.tags == "jibli"
    assert form.note == "re-watch"
    assert form.password == ""


def test_incomplete_form_makes_no_gateway_call(session, gateway):
    form = session.open_create_form().with_changes(title="Only title")

    assert session.submit_form(form) is False

    assert gateway.calls == []
    assert session.form == form
    assert session.message == "Please fill in the title, author and password"


def test_successful_create_closes_form_and_relists(session, gateway):
    form = EntryForm(title="Citrus", author="Saburouta", password=SECRET)

    assert session.submit_form(form) is True

    assert gateway.calls == ["create", "list"]
    assert session.form is None
    assert session.message == "Entry saved"
    assert {entry.title for entry in session.entries} == {"Whisper of the Heart", "Citrus"}


def test_wrong_password_keeps_form_open(session, gateway):
    form = EntryForm(title="Citrus", author="Saburouta", password="wrong")

    assert session.submit_form(form) is False

    assert gateway.calls == ["create"]
    assert session.form == form
    assert session.message == "Incorrect password; the change was not applied"
    assert len(session.entries) == 1


def test_edit_submits_update_for_loaded_entry(session, gateway):
    form = session.open_edit_form("seed-1").with_changes(
        rating=Rating.BIBLE, password=SECRET
    )

    assert session.submit_form(form) is True

    assert gateway.calls == ["update", "list"]
    assert session.message == "Entry updated"
    assert session.entries[0].rating is Rating.BIBLE
    assert session.entries[0].created_at == 1700000000000


def test_open_edit_form_for_unknown_id_raises(session):
    with pytest.raises(KeyError):
        session.open_edit_form("nope")


def test_refresh_failure_keeps_stale_collection(session, gateway):
    before = list(session.entries)
    gateway.fail_listing = True

    assert session.refresh() is False

    assert session.entries == before
    assert session.message == LIST_FAILURE_MESSAGE


def test_delete_requires_password_before_calling(session, gateway):
    assert session.delete("seed-1", password="  ") is False

    assert gateway.calls == []
    assert session.message == "Please enter the password"


def test_delete_removes_and_relists(session, gateway):
    assert session.delete("seed-1", password=SECRET) is True

    assert gateway.calls == ["delete", "list"]
    assert session.entries == []
    assert session.message == "Entry deleted"


def test_view_changes_reset_paging(session):
    session.state = session.state.with_changes(page=3)

    result = session.update_view(category=Category.MOVIE)

    assert session.state.page == 1
    assert result.total_items == 1
    assert session.toggle_tag("missing").items == []
    assert session.stats().by_category["MOVIE"] == 1
    assert session.tags() == [("jibli", 1)]


def test_placeholders_shown_only_when_enabled():
    enabled = CatalogSession(
        SpyGateway(InMemoryRecordStore()), placeholder_when_empty=True
    )
    disabled = CatalogSession(SpyGateway(InMemoryRecordStore()))

    enabled.refresh()
    disabled.refresh()

    assert enabled.showing_placeholders is True
    assert len(enabled.entries) == len(PLACEHOLDER_ROWS)
    assert disabled.showing_placeholders is False
    assert disabled.entries == []


def test_theme_persists_across_sessions(tmp_path, gateway):
    path = tmp_path / "prefs" / "preferences.json"
    first = CatalogSession(gateway, preferences=PreferenceStore(path))

    assert first.theme == "light"
    assert first.toggle_theme() == "dark"

    second = CatalogSession(gateway, preferences=PreferenceStore(path))
    assert second.theme == "dark"
    assert json.loads(path.read_text(encoding="utf-8")) == {"theme": "dark"}


def test_unreadable_preferences_fall_back_to_defaults(tmp_path):
    path = tmp_path / "preferences.json"
    path.write_text("{not json", encoding="utf-8")

    store = PreferenceStore(path)

    assert store.theme() == "light"
    with pytest.raises(ValueError):
        store.set_theme("sepia")


def test_form_accepts_labels_and_member_names():
    form = EntryForm().with_changes(category="小說", rating="top_tier")

    assert form.category is Category.NOVEL
    assert form.rating is Rating.TOP_TIER
    assert form.to_payload()["category"] == "小說"


def test_edit_form_keeps_unknown_stored_values(session, gateway):
    entry = Entry.from_row(_seed_row(category="podcast", rating="legendary"))

    form = EntryForm.for_entry(entry).with_changes(password=SECRET)

    assert form.category == "podcast"
    assert form.rating == "legendary"
    with pytest.raises(ValidationError) as excinfo:
        form.validate()
    assert excinfo.value.details == {"fields": ["category", "rating"]}

    assert session.submit_form(form) is False
    assert gateway.calls == []
    assert session.message == "Please pick a category and rating from the list"


def test_set_theme_rejects_unknown_values(tmp_path, gateway):
    session = CatalogSession(gateway, preferences=PreferenceStore(tmp_path / "p.json"))

    assert session.set_theme("dark") == "dark"
    with pytest.raises(ValueError):
        session.set_theme("sepia")
    assert session.theme == "dark"
