"""Tests for the editing session: history recording, selection and import.

Usage
-----
Run ``pytest tests/test_editor.py -v``. Sessions use the frozen-clock
``engine`` fixture and an in-memory store.
"""

from __future__ import annotations

import collections.abc as cabc
import logging
import typing as typ

import pytest

from sitecraft.components import SectionPreset
from sitecraft.document import StructuredDataError, export_document
from sitecraft.editor import EditorSession, parse_property_text
from sitecraft.store import MemoryDocumentStore

if typ.TYPE_CHECKING:
    from pathlib import Path

    from sitecraft.components import ComponentTable
    from sitecraft.document import Site
    from sitecraft.mutations import MutationEngine

KeysOf = cabc.Callable[..., list[str]]


@pytest.fixture
def session(
    sample_site: Site, engine: MutationEngine, library: ComponentTable
) -> EditorSession:
    """Return a session on the sample document."""
    return EditorSession(sample_site, engine=engine, library=library)


def _section_props(session: EditorSession, key: str) -> object:
    page = session.document.find_page("home")
    assert page is not None, "expected the home page"
    section = page.find_section(key)
    assert section is not None, f"expected section {key!r}"
    return section.props


def test_only_effective_edits_are_recorded(session: EditorSession) -> None:
    assert not session.remove_section("home", "missing"), "expected a no-op"
    assert not session.move_section("home", "a", "a"), "expected a no-op"
    assert not session.can_undo, "expected no-ops to stay out of history"
    assert session.remove_section("home", "a"), "expected an effective edit"
    assert session.can_undo, "expected the edit recorded"
    assert len(session.history) == 2, "expected exactly one new snapshot"


def test_move_and_undo_scenario(session: EditorSession, keys_of: KeysOf) -> None:
    session.move_section("home", "c", "a")
    assert keys_of(session.document) == ["c", "a", "b"], "expected c moved first"
    session.remove_section("home", "b")
    assert keys_of(session.document) == ["c", "a"], "expected b removed"
    session.undo()
    assert keys_of(session.document) == ["c", "a", "b"], "expected b restored"
    session.undo()
    assert keys_of(session.document) == ["a", "b", "c"], "expected the origin order"
    session.redo()
    assert keys_of(session.document) == ["c", "a", "b"], "expected redo to reapply"


def test_add_page_selects_new_page(session: EditorSession) -> None:
    page_id = session.add_page()
    assert page_id is not None, "expected the new page id"
    assert session.selected_page_id == page_id, "expected the new page selected"
    assert session.add_page(parent_id="missing") is None, "expected a no-op"


def test_add_section_accepts_names_and_presets(
    session: EditorSession, keys_of: KeysOf
) -> None:
    session.presets["promo"] = SectionPreset("promo", "Badge", props={"children": "New"})
    promo = session.add_section("home", "promo", index=0)
    assert session.add_section("home", "RichText"), "expected component name"
    spinner = session.add_section("home", SectionPreset("x", "Spinner"))
    keys = keys_of(session.document)
    assert promo == keys[0], f"expected the inserted key returned, got {promo!r}"
    assert spinner == keys[-1], f"expected the appended key returned, got {spinner!r}"
    assert session.add_section("missing", "Badge") is None, "expected a no-op"
    assert keys[0].startswith("Badge-"), f"expected promo preset first, got {keys}"
    assert _section_props(session, keys[0]) == {"children": "New"}, "expected preset props"
    assert _section_props(session, keys[4]) == {"content": ""}, "expected library defaults"
    with pytest.raises(TypeError):
        session.add_section("home", 42)  # type: ignore[arg-type]


def test_selection_cleared_when_target_disappears(session: EditorSession) -> None:
    assert session.select_page("home"), "expected home selectable"
    assert session.select_section("b"), "expected b selectable"
    session.remove_section("home", "b")
    assert session.selected_section_key is None, "expected section selection cleared"
    assert session.selected_page_id == "home", "expected the page to stay selected"
    session.delete_page("home")
    assert session.selected_page_id is None, "expected page selection cleared"


def test_selection_reconciled_after_undo(session: EditorSession) -> None:
    session.add_section("home", "Badge")
    page = session.document.find_page("home")
    assert page is not None, "expected the home page"
    new_key = page.sections[-1].key
    session.select_page("home")
    session.select_section(new_key)
    session.undo()
    assert session.selected_section_key is None, "expected selection cleared by undo"


def test_selecting_missing_targets_fails(session: EditorSession) -> None:
    assert not session.select_page("missing"), "expected unknown page rejected"
    assert not session.select_section("a"), "expected no section without a page"
    session.select_page("home")
    assert not session.select_section("missing"), "expected unknown key rejected"
    session.select_section("a")
    session.select_page("about")
    assert session.selected_section_key is None, "expected page change to clear section"


def test_props_text_edits(session: EditorSession) -> None:
    result = session.edit_section_props_text("home", "a", '{"children": "Hi"}')
    assert result, "expected valid JSON accepted"
    assert result.changed, "expected the edit applied"
    assert _section_props(session, "a") == {"children": "Hi"}, "expected props replaced"
    bad = session.edit_section_props_text("home", "a", '{"children": ')
    assert not bad.ok, "expected malformed JSON rejected"
    assert bad.error is not None, "expected an error message"
    assert "Invalid JSON" in bad.error, f"unexpected error {bad.error!r}"
    assert _section_props(session, "a") == {"children": "Hi"}, "expected props retained"
    session.edit_section_props_text("home", "a", "   ")
    assert _section_props(session, "a") == {}, "expected empty text to mean {}"
    undo_depth = len(session.history)
    missing = session.edit_section_props_text("home", "absent", '{"children": "Hi"}')
    assert missing.ok, "expected valid JSON accepted"
    assert not missing.changed, "expected a missing section reported as unchanged"
    assert len(session.history) == undo_depth, "expected nothing recorded"


def test_style_text_edit_requires_object(session: EditorSession) -> None:
    result = session.edit_section_style_text("home", "a", "[1, 2]")
    assert not result, "expected a JSON array rejected"
    assert result.error is not None, "expected an error message"
    assert "Expected a JSON object" in result.error, f"unexpected error {result.error!r}"


def test_parse_property_text() -> None:
    assert parse_property_text("") == {}, "expected empty text to mean {}"
    assert parse_property_text('{"a": [1, true]}') == {"a": [1, True]}, "expected parse"
    with pytest.raises(StructuredDataError):
        parse_property_text("nope")


def test_failed_import_leaves_session_untouched(
    session: EditorSession, tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    path = tmp_path / "broken.json"
    path.write_text('{"site": {"pages": "oops"}}', encoding="utf-8")
    before = session.document
    with caplog.at_level(logging.WARNING, logger="sitecraft.editor"):
        result = session.import_document(path)
    assert not result.ok, "expected the import rejected"
    assert session.document is before, "expected the document untouched"
    assert not session.can_undo, "expected nothing recorded"
    assert "rejected" in caplog.text, "expected a warning"
    missing = session.import_document(tmp_path / "absent.json")
    assert not missing.ok, "expected a missing file rejected"
    undecodable = tmp_path / "bad.json"
    undecodable.write_bytes(b"\xff\xfe\x00garbage")
    result = session.import_document(undecodable)
    assert not result.ok, "expected a non-UTF-8 file rejected"
    assert result.error is not None, "expected an error message"
    assert "not valid UTF-8" in result.error, f"unexpected error {result.error!r}"
    assert session.document is before, "expected the document untouched"


def test_import_can_be_undone(
    session: EditorSession, tmp_path: Path, engine: MutationEngine, sample_site: Site
) -> None:
    other = engine.delete_page(sample_site, "home")
    path = export_document(other, tmp_path / "other.yaml")
    session.select_page("home")
    assert session.import_document(path), "expected a valid import"
    assert session.document == other, "expected the imported document current"
    assert session.selected_page_id is None, "expected stale selection cleared"
    session.undo()
    assert session.document == sample_site, "expected undo to restore the old document"


def test_export_writes_current_document(session: EditorSession, tmp_path: Path) -> None:
    session.set_global_field("brand", "Exported")
    path = session.export_document(tmp_path / "out.json")
    assert '"brand":"Exported"' in path.read_text(encoding="utf-8").replace(" ", ""), (
        "expected the current brand in the export"
    )


def test_open_loads_from_store(
    sample_site: Site, engine: MutationEngine, library: ComponentTable
) -> None:
    store = MemoryDocumentStore(sample_site)
    session = EditorSession.open(store, engine=engine, library=library)
    assert session.document == sample_site, "expected the stored document"
    session.set_page_field("home", "name", "Start")
    assert store.saves == 1, "expected the edit persisted"
    session.undo()
    assert store.saves == 2, "expected the undo persisted"
    assert store.load() == sample_site, "expected the store to hold the undone state"


def test_history_limit_is_applied(
    sample_site: Site, engine: MutationEngine, library: ComponentTable
) -> None:
    session = EditorSession(sample_site, engine=engine, library=library, history_limit=2)
    session.set_page_field("home", "name", "One")
    session.set_page_field("home", "name", "Two")
    session.undo()
    assert not session.can_undo, "expected the oldest snapshot evicted"


def test_project_page(session: EditorSession) -> None:
    units = session.project_page("home")
    assert [unit.region for unit in units][0] == "header", "expected header first"
    assert [unit.key for unit in units if unit.region == "section"] == ["a", "b", "c"], (
        "expected sections in document order"
    )
    assert session.project_page("missing") == [], "expected no units for a missing page"


def test_routes(session: EditorSession) -> None:
    match = session.routes().match("/docs")
    assert match is not None, "expected the nested page routed"
    assert match.page_id == "docs", "expected the docs page"
