"""Typed dataclasses describing the editable site document."""

from __future__ import annotations

import dataclasses as dc
import datetime as dt  # noqa: TC003 - used for runtime type metadata
import enum
import typing as typ

JsonScalar = str | int | float | bool | None
JsonValue: typ.TypeAlias = (
    JsonScalar | list["JsonValue"] | dict[str, "JsonValue"]
)
PropertyMap: typ.TypeAlias = dict[str, JsonValue]


class DocumentError(ValueError):
    """Raised when a site document is malformed or does not match its shape."""


class StructuredDataError(DocumentError):
    """Raised when props or style data is not closed structured data."""


class UnknownFieldError(ValueError):
    """Raised when a field edit names a field that cannot be edited."""


class Theme(enum.StrEnum):
    """Site-wide colour scheme."""

    LIGHT = "light"
    DARK = "dark"


@dc.dataclass(slots=True)
class LayoutSlot:
    """Component rendered in a global region such as the header or footer."""

    component: str
    props: PropertyMap | None = None


@dc.dataclass(slots=True)
class LayoutConfig:
    """Optional header and footer slots shared by every page."""

    header: LayoutSlot | None = None
    footer: LayoutSlot | None = None

    def slot(self, region: str) -> LayoutSlot | None:
        """Return the slot for ``region`` (``"header"`` or ``"footer"``)."""
        match region:
            case "header":
                return self.header
            case "footer":
                return self.footer
            case _:
                msg = f"Unknown layout region '{region}'."
                raise UnknownFieldError(msg)


@dc.dataclass(slots=True)
class GlobalConfig:
    """Site-wide configuration: brand, theme and layout slots."""

    brand: str = "My Website"
    theme: Theme = Theme.LIGHT
    layout: LayoutConfig = dc.field(default_factory=LayoutConfig)


@dc.dataclass(slots=True)
class SeoConfig:
    """Search metadata for a page."""

    title: str | None = None
    description: str | None = None


@dc.dataclass(slots=True)
class PageMetadata:
    """Creation and modification timestamps for a page."""

    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None


@dc.dataclass(slots=True)
class Section:
    """One configured component instance placed on a page.

    Attributes
    ----------
    key : str
        Identity of the section within its page. Used for lookup, reordering
        and selection; not guaranteed to be unique across pages.
    component : str
        Component name looked up in the component library.
    props : dict or None
        Opaque structured properties handed to the component.
    style : dict or None
        Opaque style overrides layered over the computed layout.
    """

    key: str
    component: str
    props: PropertyMap | None = None
    style: PropertyMap | None = None


@dc.dataclass(slots=True)
class Page:
    """A routed page holding an ordered list of sections and child pages."""

    id: str
    path: str
    name: str
    sections: list[Section] = dc.field(default_factory=list)
    layout: str | None = None
    seo: SeoConfig | None = None
    metadata: PageMetadata | None = None
    children: list[Page] = dc.field(default_factory=list)

    def find_section(self, key: str) -> Section | None:
        """Return the first section whose key matches, if any."""
        return next((section for section in self.sections if section.key == key), None)

    def section_index(self, key: str) -> int:
        """Return the index of the first section keyed ``key`` or ``-1``."""
        for index, section in enumerate(self.sections):
            if section.key == key:
                return index
        return -1


@dc.dataclass(slots=True)
class Site:
    """Root of the document: global configuration and the page tree."""

    global_config: GlobalConfig = dc.field(default_factory=GlobalConfig)
    pages: list[Page] = dc.field(default_factory=list)

    def iter_pages(self) -> typ.Iterator[Page]:
        """Yield every page in the tree, parents before their children."""
        stack = list(reversed(self.pages))
        while stack:
            page = stack.pop()
            yield page
            stack.extend(reversed(page.children))

    def find_page(self, page_id: str) -> Page | None:
        """Return the page with ``page_id`` anywhere in the tree."""
        return next((page for page in self.iter_pages() if page.id == page_id), None)

    def page_ids(self) -> set[str]:
        """Return every page id used in the tree."""
        return {page.id for page in self.iter_pages()}


__all__ = [
    "DocumentError",
    "GlobalConfig",
    "JsonScalar",
    "JsonValue",
    "LayoutConfig",
    "LayoutSlot",
    "Page",
    "PageMetadata",
    "PropertyMap",
    "SeoConfig",
    "Section",
    "Site",
    "StructuredDataError",
    "Theme",
    "UnknownFieldError",
]
