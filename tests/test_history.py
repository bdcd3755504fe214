"""Unit tests for the snapshot history.

Usage
-----
Run ``pytest tests/test_history.py -v``. The persistence collaborator is a
``pytest-mock`` double, so no files are written.
"""

from __future__ import annotations

import logging
import typing as typ

import pytest

from sitecraft.history import HistoryManager

if typ.TYPE_CHECKING:
    from pytest_mock import MockerFixture

    from sitecraft.document import Site
    from sitecraft.mutations import MutationEngine


def _names(site: Site) -> list[str]:
    return [page.name for page in site.pages]


def test_undo_then_redo_restores_each_snapshot(
    engine: MutationEngine, sample_site: Site
) -> None:
    history = HistoryManager(sample_site)
    first = history.record(engine.add_page(sample_site))
    second = history.record(engine.add_page(first))
    assert history.undo() == first, "expected undo to land on the previous snapshot"
    assert history.undo() == sample_site, "expected undo to reach the origin"
    assert history.redo() == first, "expected redo to step forward"
    assert history.redo() == second, "expected redo to reach the newest snapshot"


def test_recording_after_undo_discards_redo_branch(
    engine: MutationEngine, sample_site: Site
) -> None:
    history = HistoryManager(sample_site)
    s1 = history.record(engine.set_page_field(sample_site, "home", "name", "One"))
    history.record(engine.set_page_field(s1, "home", "name", "Two"))
    history.undo()
    history.undo()
    s3 = history.record(engine.set_page_field(sample_site, "home", "name", "Three"))
    assert len(history) == 2, f"expected [s0, s3], got {len(history)} snapshots"
    assert not history.can_redo, "expected the abandoned branch to be unreachable"
    assert history.redo() == s3, "expected redo at the end to be a no-op"
    assert history.undo() == sample_site, "expected s3 to follow s0 directly"


def test_ends_are_no_ops(sample_site: Site) -> None:
    history = HistoryManager(sample_site)
    assert not history.can_undo, "expected nothing to undo initially"
    assert not history.can_redo, "expected nothing to redo initially"
    assert history.undo() == sample_site, "expected undo at s0 to keep s0"
    assert history.redo() == sample_site, "expected redo at s0 to keep s0"
    assert history.cursor == 0, "expected the cursor to stay put"


def test_snapshots_are_isolated_from_callers(sample_site: Site) -> None:
    history = HistoryManager(sample_site)
    sample_site.pages[0].name = "Mutated"
    current = history.current
    assert current.pages[0].name == "Home", "expected the recorded copy unaffected"
    current.pages[0].name = "Changed again"
    assert history.current.pages[0].name == "Home", (
        "expected returned documents to be independent copies"
    )


def test_limit_evicts_oldest_snapshots(engine: MutationEngine, sample_site: Site) -> None:
    history = HistoryManager(sample_site, limit=2)
    site = sample_site
    for _ in range(3):
        site = history.record(engine.add_page(site))
    assert len(history) == 2, f"expected two retained snapshots, got {len(history)}"
    assert history.cursor == 1, f"expected cursor on newest, got {history.cursor}"
    oldest = history.undo()
    assert len(oldest.pages) == 4, "expected the origin snapshots to be evicted"
    assert not history.can_undo, "expected no undo past the retained window"


def test_limit_must_be_positive(sample_site: Site) -> None:
    with pytest.raises(ValueError, match="at least 1"):
        HistoryManager(sample_site, limit=0)


def test_store_receives_every_landing(
    mocker: MockerFixture, engine: MutationEngine, sample_site: Site
) -> None:
    store = mocker.Mock()
    history = HistoryManager(sample_site, store=store)
    updated = history.record(engine.add_page(sample_site))
    history.undo()
    history.redo()
    saved = [call.args[0] for call in store.save.call_args_list]
    assert saved == [updated, sample_site, updated], (
        "expected record, undo and redo each to persist the current document"
    )


def test_store_failures_are_logged(
    mocker: MockerFixture,
    engine: MutationEngine,
    sample_site: Site,
    caplog: pytest.LogCaptureFixture,
) -> None:
    store = mocker.Mock()
    store.save.side_effect = OSError("disk full")
    history = HistoryManager(sample_site, store=store)
    with caplog.at_level(logging.ERROR, logger="sitecraft.history"):
        updated = history.record(engine.add_page(sample_site))
    assert len(updated.pages) == 3, "expected the edit to stand despite the failure"
    assert history.can_undo, "expected the snapshot to be recorded"
    assert "saving the current document failed" in caplog.text, (
        "expected the save failure to be logged"
    )


def test_reset_starts_a_new_history(engine: MutationEngine, sample_site: Site) -> None:
    history = HistoryManager(sample_site)
    history.record(engine.add_page(sample_site))
    other = engine.delete_page(sample_site, "about")
    assert history.reset(other) == other, "expected reset to land on the new document"
    assert len(history) == 1, "expected earlier snapshots to be discarded"
    assert _names(history.current) == ["Home"], "expected the new document current"
