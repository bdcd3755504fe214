"""Structural edits over the site document.

:class:`MutationEngine` is the only code path that changes a document. Each
operation takes the current :class:`~sitecraft.document.Site` plus one edit
intent and returns a complete replacement document; the input is never
modified, so it stays valid as an undo snapshot. When an operation references
a page or section that does not exist it returns the input object itself,
which lets callers detect the no-op with an identity check.

Example
-------
>>> from sitecraft.document import blank_site
>>> from sitecraft.mutations import MutationEngine
>>> engine = MutationEngine()
>>> site = engine.add_page(blank_site())
>>> [page.path for page in site.pages]
['/page-1']
"""

from __future__ import annotations

import collections.abc as cabc
import copy
import datetime as dt
import typing as typ

from sitecraft.document import (
    DocumentError,
    LayoutSlot,
    Page,
    PageMetadata,
    SeoConfig,
    Section,
    Site,
    Theme,
    UnknownFieldError,
    check_property_map,
    utc_now,
)
from sitecraft.document.helpers import epoch_millis

if typ.TYPE_CHECKING:
    from sitecraft.components.presets import SectionPreset

Clock = cabc.Callable[[], dt.datetime]

PAGE_FIELDS: tuple[str, ...] = ("name", "path", "layout", "seo.title", "seo.description")
GLOBAL_FIELDS: tuple[str, ...] = (
    "brand",
    "theme",
    "layout.header.component",
    "layout.header.props",
    "layout.footer.component",
    "layout.footer.props",
)
DEFAULT_PAGE_LAYOUT = "default"


class MutationEngine:
    """Produce new documents from an old document plus one edit intent."""

    def __init__(self, *, clock: Clock = utc_now) -> None:
        """Initialise the engine.

        Parameters
        ----------
        clock : Callable[[], datetime], optional
            Source of "now" for page timestamps, generated page ids and
            section keys. Defaults to the current UTC time.
        """
        self._clock = clock

    # Pages -----------------------------------------------------------------

    def add_page(self, site: Site, *, parent_id: str | None = None) -> Site:
        """Append a new, empty page.

        The page receives a fresh id, the name ``Page N`` and the path
        ``/page-N`` where N is the size of the target list plus one. With
        ``parent_id`` the page becomes the last child of that page, and the
        call is a no-op when the parent is missing.
        """
        updated = copy.deepcopy(site)
        if parent_id is None:
            siblings = updated.pages
        else:
            parent = updated.find_page(parent_id)
            if parent is None:
                return site
            siblings = parent.children
        now = self._clock()
        number = len(siblings) + 1
        siblings.append(
            Page(
                id=self._new_page_id(updated, now),
                path=f"/page-{number}",
                name=f"Page {number}",
                sections=[],
                layout=DEFAULT_PAGE_LAYOUT,
                seo=SeoConfig(title="", description=""),
                metadata=PageMetadata(created_at=now),
            )
        )
        return updated

    def delete_page(self, site: Site, page_id: str) -> Site:
        """Remove the page (and its children) from its containing list."""
        updated = copy.deepcopy(site)
        location = _locate_page(updated, page_id)
        if location is None:
            return site
        siblings, index = location
        del siblings[index]
        return updated

    def duplicate_page(self, site: Site, page_id: str) -> Site:
        """Insert a deep copy of a page right after the original.

        The copy gets a new id, ``" copy"`` appended to its name and path,
        ``createdAt`` reset to now and ``updatedAt`` cleared. Child pages in
        the copy also get fresh ids so ids stay unique across the tree.
        """
        updated = copy.deepcopy(site)
        location = _locate_page(updated, page_id)
        if location is None:
            return site
        siblings, index = location
        now = self._clock()
        clone = copy.deepcopy(siblings[index])
        clone.name = f"{clone.name} copy"
        clone.path = f"{clone.path} copy"
        clone.metadata = PageMetadata(created_at=now)
        used_ids = updated.page_ids()
        for page in _walk(clone):
            page.id = self._new_page_id(updated, now, used=used_ids)
            used_ids.add(page.id)
        siblings.insert(index + 1, clone)
        return updated

    # Sections --------------------------------------------------------------

    def add_section(
        self,
        site: Site,
        page_id: str,
        preset: SectionPreset,
        *,
        index: int | None = None,
    ) -> Site:
        """Add a section built from ``preset`` to a page.

        The section is appended, or inserted at ``index`` when given (clamped
        to the list bounds). Its key is generated from the component name,
        the current time and its position.
        """
        section = Section(
            key="",
            component=preset.component,
            props=copy.deepcopy(preset.props),
            style=copy.deepcopy(preset.style),
        )
        return self.insert_section(site, page_id, section, index=index)

    def insert_section(
        self,
        site: Site,
        page_id: str,
        section: Section,
        *,
        index: int | None = None,
    ) -> Site:
        """Insert a copy of ``section`` under a freshly generated key."""
        updated = copy.deepcopy(site)
        page = updated.find_page(page_id)
        if page is None:
            return site
        now = self._clock()
        payload = copy.deepcopy(section)
        payload.key = self.new_section_key(page, payload.component, now=now)
        if index is None:
            page.sections.append(payload)
        else:
            position = max(0, min(index, len(page.sections)))
            page.sections.insert(position, payload)
        self._touch(page, now)
        return updated

    def remove_section(self, site: Site, page_id: str, key: str) -> Site:
        """Remove the first section on the page whose key matches."""
        page = site.find_page(page_id)
        if page is None or page.section_index(key) < 0:
            return site
        updated = copy.deepcopy(site)
        page = typ.cast("Page", updated.find_page(page_id))
        del page.sections[page.section_index(key)]
        self._touch(page, self._clock())
        return updated

    def move_section(self, site: Site, page_id: str, from_key: str, to_key: str) -> Site:
        """Move the ``from_key`` section to where ``to_key`` currently sits.

        The target index is taken from the list before the moved section is
        removed, so dropping an item onto a later sibling places it after
        that sibling and dropping onto an earlier one places it before.
        """
        if from_key == to_key:
            return site
        page = site.find_page(page_id)
        if page is None:
            return site
        old_index = page.section_index(from_key)
        new_index = page.section_index(to_key)
        if old_index < 0 or new_index < 0:
            return site
        updated = copy.deepcopy(site)
        page = typ.cast("Page", updated.find_page(page_id))
        moved = page.sections.pop(old_index)
        page.sections.insert(new_index, moved)
        self._touch(page, self._clock())
        return updated

    def set_section_props(
        self,
        site: Site,
        page_id: str,
        key: str,
        value: cabc.Mapping[str, object] | None,
    ) -> Site:
        """Replace a section's props wholesale.

        Raises
        ------
        StructuredDataError
            If ``value`` is not a mapping of structured data. The document is
            not copied or changed in that case.
        """
        return self._replace_section_map(site, page_id, key, "props", value)

    def set_section_style(
        self,
        site: Site,
        page_id: str,
        key: str,
        value: cabc.Mapping[str, object] | None,
    ) -> Site:
        """Replace a section's style wholesale; see :meth:`set_section_props`."""
        return self._replace_section_map(site, page_id, key, "style", value)

    def _replace_section_map(
        self,
        site: Site,
        page_id: str,
        key: str,
        attribute: typ.Literal["props", "style"],
        value: cabc.Mapping[str, object] | None,
    ) -> Site:
        checked = None if value is None else check_property_map(value, where=attribute)
        page = site.find_page(page_id)
        if page is None or page.find_section(key) is None:
            return site
        updated = copy.deepcopy(site)
        page = typ.cast("Page", updated.find_page(page_id))
        section = typ.cast("Section", page.find_section(key))
        setattr(section, attribute, copy.deepcopy(checked))
        self._touch(page, self._clock())
        return updated

    # Fields ----------------------------------------------------------------

    def set_page_field(
        self, site: Site, page_id: str, field: str, value: str | None
    ) -> Site:
        """Replace one scalar page field.

        ``field`` is one of ``name``, ``path``, ``layout``, ``seo.title`` or
        ``seo.description``. ``name`` and ``path`` require a string; the
        others accept ``None`` to clear the value.

        Raises
        ------
        UnknownFieldError
            If ``field`` is not an editable page field.
        DocumentError
            If ``name`` or ``path`` is given a non-string value.
        """
        if field not in PAGE_FIELDS:
            choices = ", ".join(PAGE_FIELDS)
            msg = f"Unknown page field '{field}'. Editable fields: {choices}"
            raise UnknownFieldError(msg)
        if field in {"name", "path"} and not isinstance(value, str):
            msg = f"Page {field} must be a string."
            raise DocumentError(msg)
        if value is not None and not isinstance(value, str):
            msg = f"Page {field} must be a string or None."
            raise DocumentError(msg)
        if site.find_page(page_id) is None:
            return site
        updated = copy.deepcopy(site)
        page = typ.cast("Page", updated.find_page(page_id))
        match field:
            case "name":
                page.name = typ.cast("str", value)
            case "path":
                page.path = typ.cast("str", value)
            case "layout":
                page.layout = value
            case "seo.title":
                page.seo = page.seo or SeoConfig()
                page.seo.title = value
            case "seo.description":
                page.seo = page.seo or SeoConfig()
                page.seo.description = value
        self._touch(page, self._clock())
        return updated

    def set_global_field(self, site: Site, field: str, value: object) -> Site:
        """Replace one site-wide field.

        ``brand`` takes a string and ``theme`` one of ``light``/``dark``.
        ``layout.<region>.component`` sets the slot component; an empty value
        removes the slot together with its props. ``layout.<region>.props``
        replaces the slot props and is a no-op when the slot is absent.

        Raises
        ------
        UnknownFieldError
            If ``field`` is not editable or ``theme`` is not a known theme.
        StructuredDataError
            If slot props are not a mapping of structured data.
        """
        if field not in GLOBAL_FIELDS:
            choices = ", ".join(GLOBAL_FIELDS)
            msg = f"Unknown global field '{field}'. Editable fields: {choices}"
            raise UnknownFieldError(msg)
        match field.split("."):
            case ["brand"]:
                if not isinstance(value, str):
                    msg = "Global brand must be a string."
                    raise DocumentError(msg)
                updated = copy.deepcopy(site)
                updated.global_config.brand = value
            case ["theme"]:
                try:
                    theme = Theme(value)
                except ValueError as exc:
                    msg = f"Unknown theme {value!r}; expected 'light' or 'dark'."
                    raise UnknownFieldError(msg) from exc
                updated = copy.deepcopy(site)
                updated.global_config.theme = theme
            case ["layout", region, "component"]:
                updated = self._set_slot_component(site, region, value)
            case ["layout", region, "props"]:
                updated = self._set_slot_props(site, region, value)
            case _:  # pragma: no cover - guarded by GLOBAL_FIELDS
                msg = f"Unknown global field '{field}'."
                raise UnknownFieldError(msg)
        return updated

    def _set_slot_component(self, site: Site, region: str, value: object) -> Site:
        if value is not None and not isinstance(value, str):
            msg = f"Layout {region} component must be a string or None."
            raise DocumentError(msg)
        component = (value or "").strip()
        current = site.global_config.layout.slot(region)
        if not component and current is None:
            return site
        updated = copy.deepcopy(site)
        layout = updated.global_config.layout
        slot = layout.slot(region)
        if not component:
            new_slot = None
        elif slot is None:
            new_slot = LayoutSlot(component=component)
        else:
            slot.component = component
            new_slot = slot
        setattr(layout, region, new_slot)
        return updated

    def _set_slot_props(self, site: Site, region: str, value: object) -> Site:
        checked = None if value is None else check_property_map(value, where=region)
        if site.global_config.layout.slot(region) is None:
            return site
        updated = copy.deepcopy(site)
        slot = typ.cast("LayoutSlot", updated.global_config.layout.slot(region))
        slot.props = copy.deepcopy(checked)
        return updated

    # Identity helpers ------------------------------------------------------

    def new_section_key(
        self, page: Page, component: str, *, now: dt.datetime | None = None
    ) -> str:
        """Return ``<component>-<epoch-ms>-<index>`` unique within ``page``."""
        millis = epoch_millis(now or self._clock())
        existing = {section.key for section in page.sections}
        index = len(page.sections)
        key = f"{component}-{millis}-{index}"
        while key in existing:
            index += 1
            key = f"{component}-{millis}-{index}"
        return key

    def _new_page_id(
        self, site: Site, now: dt.datetime, *, used: set[str] | None = None
    ) -> str:
        """Return ``page-<epoch-ms>``, suffixed until no page uses it."""
        taken = used if used is not None else site.page_ids()
        base = f"page-{epoch_millis(now)}"
        candidate = base
        counter = 1
        while candidate in taken:
            candidate = f"{base}-{counter}"
            counter += 1
        return candidate

    @staticmethod
    def _touch(page: Page, now: dt.datetime) -> None:
        if page.metadata is None:
            page.metadata = PageMetadata()
        page.metadata.updated_at = now


def _locate_page(site: Site, page_id: str) -> tuple[list[Page], int] | None:
    """Return the list containing ``page_id`` and the page's index in it."""
    stack: list[list[Page]] = [site.pages]
    while stack:
        siblings = stack.pop()
        for index, page in enumerate(siblings):
            if page.id == page_id:
                return siblings, index
            if page.children:
                stack.append(page.children)
    return None


def _walk(page: Page) -> typ.Iterator[Page]:
    """Yield ``page`` and all of its descendants."""
    yield page
    for child in page.children:
        yield from _walk(child)


__all__ = [
    "GLOBAL_FIELDS",
    "PAGE_FIELDS",
    "Clock",
    "MutationEngine",
]
