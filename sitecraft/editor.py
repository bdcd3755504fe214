"""Editing session tying the mutation engine, history, clipboard and store.

:class:`EditorSession` is the handle an editing surface (the CLI, a web view,
a test) holds for one open document. It owns the current document, records
every effective edit in the :class:`~sitecraft.history.HistoryManager`, keeps
the selection consistent with the document and reports malformed user input
as an :class:`EditResult` instead of raising.

Example
-------
>>> from sitecraft.document import blank_site
>>> from sitecraft.editor import EditorSession
>>> session = EditorSession(blank_site())  # doctest: +SKIP
>>> page_id = session.add_page()  # doctest: +SKIP
>>> session.add_section(page_id, "Typography")  # doctest: +SKIP
'Typography-1700000000000-0'
>>> session.undo().pages[0].sections  # doctest: +SKIP
[]
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import typing as typ

import msgspec
from msgspec import json as msgspec_json

from sitecraft.clipboard import Clipboard
from sitecraft.components import (
    SectionPreset,
    default_library,
    preset_for_component,
)
from sitecraft.document import (
    DocumentError,
    StructuredDataError,
    export_document,
    import_document,
)
from sitecraft.history import HistoryManager
from sitecraft.logging import get_logger
from sitecraft.mutations import MutationEngine
from sitecraft.projector import project
from sitecraft.routing import RouteTable

if typ.TYPE_CHECKING:
    from pathlib import Path

    from sitecraft.components import ComponentLibrary
    from sitecraft.document import Page, Section, Site
    from sitecraft.projector import RenderUnit
    from sitecraft.store import DocumentStore

logger = get_logger("editor")


@dc.dataclass(slots=True, frozen=True)
class EditResult:
    """Outcome of an edit that parses user-supplied text.

    ``ok`` is false when the input was rejected. ``changed`` is false when the
    input parsed but the target page or section does not exist.
    """

    ok: bool
    error: str | None = None
    changed: bool = False

    def __bool__(self) -> bool:
        return self.ok


class EditorSession:
    """One open document with undo history, clipboard and selection."""

    def __init__(
        self,
        document: Site,
        *,
        library: ComponentLibrary | None = None,
        store: DocumentStore | None = None,
        engine: MutationEngine | None = None,
        clipboard: Clipboard | None = None,
        history_limit: int | None = None,
        presets: cabc.Mapping[str, SectionPreset] | None = None,
    ) -> None:
        """Start a session on ``document``.

        Parameters
        ----------
        document : Site
            Document to edit; becomes the first history snapshot.
        library : ComponentLibrary, optional
            Component library used for presets and projection. Defaults to
            the built-in library.
        store : DocumentStore, optional
            Persistence collaborator saving the current document after every
            recorded edit, undo and redo.
        engine : MutationEngine, optional
            Engine performing the edits; inject one with a fixed clock in tests.
        clipboard : Clipboard, optional
            Clipboard shared with other sessions, if any.
        history_limit : int, optional
            Maximum number of retained snapshots; unbounded by default.
        presets : Mapping[str, SectionPreset], optional
            Named presets available to :meth:`add_section`.
        """
        self.library = library if library is not None else default_library()
        self.store = store
        self.engine = engine or MutationEngine()
        self.clipboard = clipboard or Clipboard()
        self.presets: dict[str, SectionPreset] = dict(presets or {})
        self.history = HistoryManager(document, store=store, limit=history_limit)
        self._document = self.history.current
        self.selected_page_id: str | None = None
        self.selected_section_key: str | None = None

    @classmethod
    def open(cls, store: DocumentStore, **options: typ.Any) -> EditorSession:  # noqa: ANN401
        """Load the document from ``store`` and start a session on it."""
        return cls(store.load(), store=store, **options)

    @property
    def document(self) -> Site:
        return self._document

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    # History ---------------------------------------------------------------

    def undo(self) -> Site:
        self._document = self.history.undo()
        self._reconcile_selection()
        return self._document

    def redo(self) -> Site:
        self._document = self.history.redo()
        self._reconcile_selection()
        return self._document

    def _apply(self, updated: Site) -> bool:
        """Record ``updated`` unless the engine reported a no-op."""
        if updated is self._document:
            return False
        self._document = self.history.record(updated)
        self._reconcile_selection()
        return True

    # Pages -----------------------------------------------------------------

    def add_page(self, *, parent_id: str | None = None) -> str | None:
        """Add a page, select it and return its id (``None`` on a no-op)."""
        before = self._document.page_ids()
        if not self._apply(self.engine.add_page(self._document, parent_id=parent_id)):
            return None
        new_ids = self._document.page_ids() - before
        page_id = next(iter(new_ids))
        self.select_page(page_id)
        return page_id

    def delete_page(self, page_id: str) -> bool:
        return self._apply(self.engine.delete_page(self._document, page_id))

    def duplicate_page(self, page_id: str) -> bool:
        return self._apply(self.engine.duplicate_page(self._document, page_id))

    def set_page_field(self, page_id: str, field: str, value: str | None) -> bool:
        return self._apply(
            self.engine.set_page_field(self._document, page_id, field, value)
        )

    def set_global_field(self, field: str, value: object) -> bool:
        return self._apply(self.engine.set_global_field(self._document, field, value))

    # Sections --------------------------------------------------------------

    def add_section(
        self,
        page_id: str,
        component: str | SectionPreset,
        *,
        index: int | None = None,
    ) -> str | None:
        """Add a section from a preset, a named preset or a component name.

        Returns the generated section key, or ``None`` when the page is missing.
        """
        match component:
            case SectionPreset() as preset:
                pass
            case str() as name if name in self.presets:
                preset = self.presets[name]
            case str() as name:
                preset = preset_for_component(self.library, name)
            case _:
                msg = f"Expected a component name or preset, got {component!r}."
                raise TypeError(msg)
        page = self._document.find_page(page_id)
        before = {section.key for section in page.sections} if page else set()
        if not self._apply(
            self.engine.add_section(self._document, page_id, preset, index=index)
        ):
            return None
        page = typ.cast("Page", self._document.find_page(page_id))
        return next(s.key for s in page.sections if s.key not in before)

    def remove_section(self, page_id: str, key: str) -> bool:
        return self._apply(self.engine.remove_section(self._document, page_id, key))

    def move_section(self, page_id: str, from_key: str, to_key: str) -> bool:
        return self._apply(
            self.engine.move_section(self._document, page_id, from_key, to_key)
        )

    def set_section_props(
        self, page_id: str, key: str, value: cabc.Mapping[str, object] | None
    ) -> bool:
        return self._apply(
            self.engine.set_section_props(self._document, page_id, key, value)
        )

    def set_section_style(
        self, page_id: str, key: str, value: cabc.Mapping[str, object] | None
    ) -> bool:
        return self._apply(
            self.engine.set_section_style(self._document, page_id, key, value)
        )

    def edit_section_props_text(self, page_id: str, key: str, text: str) -> EditResult:
        """Parse ``text`` as a JSON object and use it as the section props.

        Empty text means ``{}``. Malformed text leaves the document untouched
        and is reported through the returned :class:`EditResult`.
        """
        return self._edit_section_text(page_id, key, text, "props")

    def edit_section_style_text(self, page_id: str, key: str, text: str) -> EditResult:
        """Parse ``text`` as a JSON object and use it as the section style."""
        return self._edit_section_text(page_id, key, text, "style")

    def _edit_section_text(
        self,
        page_id: str,
        key: str,
        text: str,
        attribute: typ.Literal["props", "style"],
    ) -> EditResult:
        try:
            value = parse_property_text(text)
        except StructuredDataError as exc:
            return EditResult(ok=False, error=str(exc))
        if attribute == "props":
            changed = self.set_section_props(page_id, key, value)
        else:
            changed = self.set_section_style(page_id, key, value)
        return EditResult(ok=True, changed=changed)

    # Clipboard -------------------------------------------------------------

    def copy_section(self, page_id: str, key: str) -> bool:
        section = self._find_section(page_id, key)
        if section is None:
            return False
        self.clipboard.copy(section)
        return True

    def cut_section(self, page_id: str, key: str) -> bool:
        """Move a section into the clipboard and remove it from its page."""
        section = self._find_section(page_id, key)
        if section is None:
            return False
        self.clipboard.cut(section)
        return self.remove_section(page_id, key)

    def paste_section(self, page_id: str, *, index: int | None = None) -> bool:
        """Insert the clipboard section into a page under a fresh key."""
        entry = self.clipboard.peek()
        if entry is None:
            return False
        pasted = self._apply(
            self.engine.insert_section(self._document, page_id, entry.section, index=index)
        )
        if pasted:
            self.clipboard.pasted()
        return pasted

    def _find_section(self, page_id: str, key: str) -> Section | None:
        page = self._document.find_page(page_id)
        return page.find_section(key) if page is not None else None

    # Selection -------------------------------------------------------------

    def select_page(self, page_id: str | None) -> bool:
        if page_id is not None and self._document.find_page(page_id) is None:
            return False
        if page_id != self.selected_page_id:
            self.selected_section_key = None
        self.selected_page_id = page_id
        return True

    def select_section(self, key: str | None) -> bool:
        if key is None:
            self.selected_section_key = None
            return True
        if self.selected_page_id is None:
            return False
        if self._find_section(self.selected_page_id, key) is None:
            return False
        self.selected_section_key = key
        return True

    def _reconcile_selection(self) -> None:
        if self.selected_page_id is None:
            return
        page = self._document.find_page(self.selected_page_id)
        if page is None:
            self.selected_page_id = None
            self.selected_section_key = None
        elif (
            self.selected_section_key is not None
            and page.find_section(self.selected_section_key) is None
        ):
            self.selected_section_key = None

    # Import / export -------------------------------------------------------

    def import_document(self, path: Path) -> EditResult:
        """Replace the document with the one stored at ``path``.

        The import is recorded in history so it can be undone. When the file
        is missing or malformed nothing changes.
        """
        try:
            imported = import_document(path)
        except (OSError, DocumentError) as exc:
            logger.warning("Import of '%s' rejected: %s", path, exc)
            return EditResult(ok=False, error=str(exc))
        self._document = self.history.record(imported)
        self._reconcile_selection()
        logger.info("Imported document from '%s'", path)
        return EditResult(ok=True, changed=True)

    def export_document(self, path: Path) -> Path:
        """Write the current document to ``path`` (format chosen by suffix)."""
        return export_document(self._document, path)

    # Rendering -------------------------------------------------------------

    def project_page(self, page_id: str) -> list[RenderUnit]:
        """Return the render units for a page, or ``[]`` when it is missing."""
        page = self._document.find_page(page_id)
        if page is None:
            return []
        return project(page, self._document.global_config, self.library)

    def routes(self) -> RouteTable:
        return RouteTable(self._document.pages)


def parse_property_text(text: str) -> dict[str, typ.Any]:
    """Parse the text of a props or style editor into a mapping.

    Raises
    ------
    StructuredDataError
        If ``text`` is not valid JSON or does not hold a JSON object.
    """
    if not text.strip():
        return {}
    try:
        value = msgspec_json.decode(text)
    except msgspec.DecodeError as exc:
        msg = f"Invalid JSON: {exc}"
        raise StructuredDataError(msg) from exc
    if not isinstance(value, dict):
        msg = f"Expected a JSON object, got {type(value).__name__}."
        raise StructuredDataError(msg)
    return value


__all__ = ["EditResult", "EditorSession", "parse_property_text"]
