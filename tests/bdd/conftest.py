"""Shared pytest-bdd steps for the editing scenarios.

Every scenario edits one in-memory document through an
:class:`~sitecraft.editor.EditorSession` kept in ``scenario_state``. Section
keys in the feature files double as the sections' text content so the
expected order can be read straight from the scenario.
"""

from __future__ import annotations

import typing as typ

import pytest
from pytest_bdd import given, parsers, then

from sitecraft.document import Page, Section, Site
from sitecraft.editor import EditorSession

if typ.TYPE_CHECKING:
    from sitecraft.components import ComponentTable
    from sitecraft.mutations import MutationEngine

ScenarioState = dict[str, typ.Any]


def split_keys(text: str) -> list[str]:
    """Return the section keys listed in a comma-separated step argument."""
    return [part.strip() for part in text.split(",") if part.strip()]


def session_of(scenario_state: ScenarioState) -> EditorSession:
    return typ.cast("EditorSession", scenario_state["session"])


@pytest.fixture
def scenario_state() -> ScenarioState:
    """Share mutable scenario data across pytest-bdd steps.

    Returns
    -------
    ScenarioState
        Mutable dictionary used to exchange state between ``given``, ``when``,
        and ``then`` steps.
    """
    return {}


@given(parsers.parse('a page "{page_id}" with sections "{keys}"'))
def given_page_with_sections(
    page_id: str,
    keys: str,
    scenario_state: ScenarioState,
    engine: MutationEngine,
    library: ComponentTable,
) -> None:
    """Open a session on a document holding one page with text sections.

    Parameters
    ----------
    page_id : str
        Id (and path) of the page to create.
    keys : str
        Comma-separated section keys, in page order.
    scenario_state : ScenarioState
        Receives the session under ``"session"``.
    engine : MutationEngine
        Frozen-clock mutation engine from the shared fixtures.
    library : ComponentTable
        Built-in component library.
    """
    sections = [
        Section(key=key, component="Typography", props={"children": key})
        for key in split_keys(keys)
    ]
    site = Site(pages=[Page(id=page_id, path=f"/{page_id}", name=page_id, sections=sections)])
    scenario_state["session"] = EditorSession(site, engine=engine, library=library)


@given(parsers.parse('an empty page "{page_id}"'))
def given_empty_page(page_id: str, scenario_state: ScenarioState) -> None:
    """Add an empty page to the open document without recording history."""
    session = session_of(scenario_state)
    site = session.document
    site.pages.append(Page(id=page_id, path=f"/{page_id}", name=page_id))
    scenario_state["session"] = EditorSession(
        site, engine=session.engine, library=session.library
    )


@then(parsers.parse('the page "{page_id}" lists sections "{keys}"'))
def then_page_lists_sections(page_id: str, keys: str, scenario_state: ScenarioState) -> None:
    """Assert the section keys of ``page_id`` match ``keys`` in order."""
    page = session_of(scenario_state).document.find_page(page_id)
    assert page is not None, f"expected page {page_id!r}"
    actual = [section.key for section in page.sections]
    assert actual == split_keys(keys), f"expected {keys}, got {actual}"
