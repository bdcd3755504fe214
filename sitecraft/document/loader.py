"""Convert site documents to and from the interchange format.

The interchange format is a nested mapping whose field names match the
document model exactly::

    site:
      global: {brand, theme, layout: {header?, footer?}}
      pages: [{id, path, name, layout?, seo?, metadata?, sections, children?}]

:func:`site_from_mapping` validates the shape and builds a fresh
:class:`~sitecraft.document.Site`; :func:`site_to_mapping` produces the
canonical mapping. JSON text is handled with ``msgspec`` and YAML text with
``ruamel.yaml``; :func:`import_document` and :func:`export_document` choose
between them from the file suffix.

Examples
--------
>>> from sitecraft.document import Site, site_from_mapping, site_to_mapping
>>> payload = site_to_mapping(Site())
>>> site_from_mapping(payload) == Site()
True
"""

from __future__ import annotations

import datetime as dt
import io
import typing as typ

import msgspec
import msgspec.json as msgspec_json
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .helpers import (
    _format_timestamp,
    _parse_timestamp,
    check_property_map,
)
from .models import (
    DocumentError,
    GlobalConfig,
    LayoutConfig,
    LayoutSlot,
    Page,
    PageMetadata,
    PropertyMap,
    SeoConfig,
    Section,
    Site,
    StructuredDataError,
    Theme,
)

if typ.TYPE_CHECKING:
    from pathlib import Path

DocumentFormat = typ.Literal["json", "yaml"]
YAML_SUFFIXES = frozenset({".yaml", ".yml"})


def site_from_mapping(data: object) -> Site:
    """Build a :class:`Site` from its interchange mapping.

    Parameters
    ----------
    data : object
        Either the wrapped ``{"site": {...}}`` form or a bare mapping with
        ``global`` and ``pages`` keys.

    Returns
    -------
    Site
        A freshly built document that shares no objects with ``data``.

    Raises
    ------
    DocumentError
        If the payload does not match the document shape, page ids repeat
        anywhere in the tree, or section keys repeat within a page.
    """
    match data:
        case {"site": dict() as body}:
            pass
        case {"site": _}:
            msg = "Document 'site' entry must be a mapping."
            raise DocumentError(msg)
        case dict() as body:
            pass
        case _:
            msg = "Top-level document structure must be a mapping."
            raise DocumentError(msg)

    global_config = _build_global_config(body.get("global"))
    pages_raw = body.get("pages", [])
    if not isinstance(pages_raw, list):
        msg = "Document 'pages' must be a list."
        raise DocumentError(msg)
    seen_ids: set[str] = set()
    pages = [_build_page(entry, seen_ids, where="pages") for entry in pages_raw]
    return Site(global_config=global_config, pages=pages)


def _build_global_config(payload: object) -> GlobalConfig:
    """Build the site-wide configuration block."""
    match payload:
        case None:
            return GlobalConfig()
        case dict() as data:
            pass
        case _:
            msg = "Document 'global' entry must be a mapping."
            raise DocumentError(msg)
    brand = data.get("brand", GlobalConfig().brand)
    if not isinstance(brand, str):
        msg = "Global 'brand' must be a string."
        raise DocumentError(msg)
    theme = _build_theme(data.get("theme", Theme.LIGHT.value))
    layout_raw = data.get("layout") or {}
    if not isinstance(layout_raw, dict):
        msg = "Global 'layout' must be a mapping."
        raise DocumentError(msg)
    layout = LayoutConfig(
        header=_build_slot(layout_raw.get("header"), "header"),
        footer=_build_slot(layout_raw.get("footer"), "footer"),
    )
    return GlobalConfig(brand=brand, theme=theme, layout=layout)


def _build_theme(value: object) -> Theme:
    """Return the theme enum for ``value`` or raise a DocumentError."""
    try:
        return Theme(value)
    except ValueError as exc:
        choices = ", ".join(theme.value for theme in Theme)
        msg = f"Global 'theme' must be one of {choices}; got {value!r}."
        raise DocumentError(msg) from exc


def _build_slot(payload: object, region: str) -> LayoutSlot | None:
    """Build a header or footer slot; a slot without a component is absent."""
    match payload:
        case None:
            return None
        case {"component": str() as component, **rest}:
            pass
        case dict():
            msg = f"Layout {region} requires a string 'component'."
            raise DocumentError(msg)
        case _:
            msg = f"Layout {region} must be a mapping."
            raise DocumentError(msg)
    if not component.strip():
        return None
    props = _build_property_map(rest.get("props"), where=f"layout.{region}.props")
    return LayoutSlot(component=component, props=props)


def _build_page(entry: object, seen_ids: set[str], *, where: str) -> Page:
    """Build one page and its children, recording ids in ``seen_ids``."""
    match entry:
        case {
            "id": str() as page_id,
            "path": str() as path,
            "name": str() as name,
            **rest,
        }:
            pass
        case dict():
            msg = f"Entries in {where} require string 'id', 'path', and 'name'."
            raise DocumentError(msg)
        case _:
            msg = f"Entries in {where} must be mappings."
            raise DocumentError(msg)
    if page_id in seen_ids:
        msg = f"Duplicate page id '{page_id}'."
        raise DocumentError(msg)
    seen_ids.add(page_id)

    sections_raw = rest.get("sections", [])
    if not isinstance(sections_raw, list):
        msg = f"Page '{page_id}' sections must be a list."
        raise DocumentError(msg)
    sections = [_build_section(item, page_id) for item in sections_raw]
    keys = [section.key for section in sections]
    if len(keys) != len(set(keys)):
        msg = f"Page '{page_id}' has duplicate section keys."
        raise DocumentError(msg)

    children_raw = rest.get("children") or []
    if not isinstance(children_raw, list):
        msg = f"Page '{page_id}' children must be a list."
        raise DocumentError(msg)
    children = [
        _build_page(child, seen_ids, where=f"children of '{page_id}'")
        for child in children_raw
    ]

    layout = rest.get("layout")
    if layout is not None and not isinstance(layout, str):
        msg = f"Page '{page_id}' layout must be a string."
        raise DocumentError(msg)

    return Page(
        id=page_id,
        path=path,
        name=name,
        sections=sections,
        layout=layout,
        seo=_build_seo(rest.get("seo"), page_id),
        metadata=_build_metadata(rest.get("metadata"), page_id),
        children=children,
    )


def _build_seo(payload: object, page_id: str) -> SeoConfig | None:
    """Build page search metadata."""
    match payload:
        case None:
            return None
        case dict() as data:
            title = data.get("title")
            description = data.get("description")
        case _:
            msg = f"Page '{page_id}' seo must be a mapping."
            raise DocumentError(msg)
    for label, value in (("title", title), ("description", description)):
        if value is not None and not isinstance(value, str):
            msg = f"Page '{page_id}' seo {label} must be a string."
            raise DocumentError(msg)
    return SeoConfig(title=title, description=description)


def _build_metadata(payload: object, page_id: str) -> PageMetadata | None:
    """Build page timestamps, ignoring values that do not parse."""
    match payload:
        case None:
            return None
        case dict() as data:
            pass
        case _:
            msg = f"Page '{page_id}' metadata must be a mapping."
            raise DocumentError(msg)
    return PageMetadata(
        created_at=_parse_timestamp(data.get("createdAt")),
        updated_at=_parse_timestamp(data.get("updatedAt")),
    )


def _build_section(entry: object, page_id: str) -> Section:
    """Build one section entry."""
    match entry:
        case {"key": str() as key, "component": str() as component, **rest}:
            pass
        case _:
            msg = f"Sections on page '{page_id}' require string 'key' and 'component'."
            raise DocumentError(msg)
    return Section(
        key=key,
        component=component,
        props=_build_property_map(rest.get("props"), where=f"{key}.props"),
        style=_build_property_map(rest.get("style"), where=f"{key}.style"),
    )


def _build_property_map(value: object, *, where: str) -> PropertyMap | None:
    """Validate an optional props/style mapping."""
    if value is None:
        return None
    return check_property_map(value, where=where)


def site_to_mapping(site: Site) -> dict[str, typ.Any]:
    """Return the canonical interchange mapping for ``site``.

    Optional fields are omitted when unset and ``children`` is omitted when a
    page has none, so exporting an imported export reproduces it exactly.
    """
    global_config = site.global_config
    layout: dict[str, typ.Any] = {}
    for region in ("header", "footer"):
        slot = global_config.layout.slot(region)
        if slot is not None:
            layout[region] = _slot_to_mapping(slot)
    return {
        "site": {
            "global": {
                "brand": global_config.brand,
                "theme": global_config.theme.value,
                "layout": layout,
            },
            "pages": [_page_to_mapping(page) for page in site.pages],
        }
    }


def _slot_to_mapping(slot: LayoutSlot) -> dict[str, typ.Any]:
    data: dict[str, typ.Any] = {"component": slot.component}
    if slot.props is not None:
        data["props"] = slot.props
    return data


def _page_to_mapping(page: Page) -> dict[str, typ.Any]:
    data: dict[str, typ.Any] = {"id": page.id, "path": page.path, "name": page.name}
    if page.layout is not None:
        data["layout"] = page.layout
    if page.seo is not None:
        seo: dict[str, str] = {}
        if page.seo.title is not None:
            seo["title"] = page.seo.title
        if page.seo.description is not None:
            seo["description"] = page.seo.description
        data["seo"] = seo
    if page.metadata is not None:
        metadata: dict[str, str] = {}
        if page.metadata.created_at is not None:
            metadata["createdAt"] = _format_timestamp(page.metadata.created_at)
        if page.metadata.updated_at is not None:
            metadata["updatedAt"] = _format_timestamp(page.metadata.updated_at)
        data["metadata"] = metadata
    data["sections"] = [_section_to_mapping(section) for section in page.sections]
    if page.children:
        data["children"] = [_page_to_mapping(child) for child in page.children]
    return data


def _section_to_mapping(section: Section) -> dict[str, typ.Any]:
    data: dict[str, typ.Any] = {"key": section.key, "component": section.component}
    if section.props is not None:
        data["props"] = section.props
    if section.style is not None:
        data["style"] = section.style
    return data


def format_for_path(path: Path) -> DocumentFormat:
    """Return the interchange format implied by ``path``'s suffix."""
    return "yaml" if path.suffix.lower() in YAML_SUFFIXES else "json"


def dumps_document(site: Site, *, fmt: DocumentFormat = "json") -> str:
    """Serialize ``site`` to JSON or YAML text."""
    payload = site_to_mapping(site)
    if fmt == "yaml":
        buffer = io.StringIO()
        _build_yaml().dump(payload, buffer)
        return buffer.getvalue()
    encoded = msgspec_json.format(msgspec_json.encode(payload), indent=2)
    return encoded.decode("utf-8") + "\n"


def loads_document(text: str | bytes, *, fmt: DocumentFormat = "json") -> Site:
    """Parse JSON or YAML text into a :class:`Site`.

    Raises
    ------
    DocumentError
        If the text does not parse or the parsed data has the wrong shape.
    """
    if fmt == "yaml":
        loader = YAML(typ="safe")
        loader.version = (1, 2)
        try:
            raw = loader.load(text)
        except YAMLError as exc:
            msg = f"Document is not valid YAML: {exc}"
            raise DocumentError(msg) from exc
        raw = _normalize_yaml_scalars(raw)
    else:
        try:
            raw = msgspec_json.decode(text)
        except msgspec.DecodeError as exc:
            msg = f"Document is not valid JSON: {exc}"
            raise DocumentError(msg) from exc
    try:
        return site_from_mapping(raw)
    except StructuredDataError as exc:
        msg = f"Document contains invalid structured data: {exc}"
        raise DocumentError(msg) from exc


def import_document(path: Path) -> Site:
    """Load a document file, choosing JSON or YAML from the suffix.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    DocumentError
        If the file content is not a valid document.
    """
    if not path.exists():
        msg = f"Document file '{path}' not found."
        raise FileNotFoundError(msg)
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        msg = f"Document file '{path}' is not valid UTF-8: {exc}"
        raise DocumentError(msg) from exc
    return loads_document(text, fmt=format_for_path(path))


def export_document(site: Site, path: Path) -> Path:
    """Write ``site`` to ``path`` in the format implied by its suffix."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps_document(site, fmt=format_for_path(path)), encoding="utf-8")
    return path


def _build_yaml() -> YAML:
    yaml = YAML()
    yaml.default_flow_style = False
    yaml.width = 120
    yaml.indent(mapping=2, sequence=4, offset=2)
    return yaml


def _normalize_yaml_scalars(value: object) -> object:
    """Replace YAML-resolved dates with ISO strings so the data stays portable."""
    match value:
        case dt.datetime():
            return _format_timestamp(value)
        case dt.date():
            return value.isoformat()
        case list():
            return [_normalize_yaml_scalars(item) for item in value]
        case dict():
            return {key: _normalize_yaml_scalars(item) for key, item in value.items()}
        case _:
            return value


__all__ = [
    "DocumentFormat",
    "dumps_document",
    "export_document",
    "format_for_path",
    "import_document",
    "loads_document",
    "site_from_mapping",
    "site_to_mapping",
]
