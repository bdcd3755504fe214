"""Flatten the page tree into routes and match request paths against them.

A child page's effective route is its path appended to its parent's route,
unless the child path starts with ``/``, in which case it is absolute. Page
paths are not required to be unique; when two pages share a route the first
one in depth-first document order wins.

Examples
--------
>>> from sitecraft.routing import join_route
>>> join_route("/", "overview")
'/overview'
>>> join_route("/docs", "/about")
'/about'
"""

from __future__ import annotations

import collections as cx
import dataclasses as dc
import re
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from sitecraft.document import Page

_SLASH_RUN = re.compile(r"/{2,}")


@dc.dataclass(slots=True)
class RouteEntry:
    """A page with its absolute route."""

    page_id: str
    path: str
    page: Page


def join_route(parent_path: str, child_path: str) -> str:
    """Return the absolute route of ``child_path`` below ``parent_path``."""
    if child_path.startswith("/"):
        return child_path
    base = "" if parent_path == "/" else parent_path
    return _SLASH_RUN.sub("/", f"{base}/{child_path}")


def flatten_pages(pages: cabc.Sequence[Page], parent_path: str = "") -> list[RouteEntry]:
    """Return every page with its absolute route, parents before children."""
    entries: list[RouteEntry] = []
    for page in pages:
        path = join_route(parent_path, page.path)
        entries.append(RouteEntry(page_id=page.id, path=path, page=page))
        if page.children:
            entries.extend(flatten_pages(page.children, path))
    return entries


def normalize_request_path(path: str) -> str:
    """Collapse slash runs and drop a trailing slash (except for ``/``)."""
    cleaned = _SLASH_RUN.sub("/", "/" + path.strip().lstrip("/"))
    if len(cleaned) > 1:
        cleaned = cleaned.rstrip("/")
    return cleaned


def duplicate_paths(pages: cabc.Sequence[Page]) -> dict[str, list[str]]:
    """Return routes claimed by more than one page, mapped to their page ids."""
    claims: dict[str, list[str]] = cx.defaultdict(list)
    for entry in flatten_pages(pages):
        claims[normalize_request_path(entry.path)].append(entry.page_id)
    return {path: ids for path, ids in claims.items() if len(ids) > 1}


class RouteTable:
    """Match request paths to pages; first route in document order wins."""

    def __init__(self, pages: cabc.Sequence[Page]) -> None:
        self.entries = flatten_pages(pages)
        self._by_path: dict[str, RouteEntry] = {}
        for entry in self.entries:
            self._by_path.setdefault(normalize_request_path(entry.path), entry)

    def match(self, path: str) -> RouteEntry | None:
        """Return the entry routed at ``path`` or ``None``."""
        return self._by_path.get(normalize_request_path(path))

    def __iter__(self) -> typ.Iterator[RouteEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


__all__ = [
    "RouteEntry",
    "RouteTable",
    "duplicate_paths",
    "flatten_pages",
    "join_route",
    "normalize_request_path",
]
