"""Project a page into the ordered units a renderer draws.

:func:`project` is a pure function of a page, the site-wide configuration and
a component library. It resolves every section in document order, prepends
the header slot and appends the footer slot when they are configured, and
never reorders, filters or deduplicates sections.

Props are opaque, so a handler may fail on props of an unexpected shape.
:func:`render_unit` logs such failures and draws an error block in place of
the section so the rest of the page still renders.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from html import escape

from sitecraft.components.registry import ResolvedComponent, resolve_component
from sitecraft.logging import get_logger

if typ.TYPE_CHECKING:
    from sitecraft.components.registry import ComponentLibrary, Handler, Resolution
    from sitecraft.document import GlobalConfig, Page, PropertyMap

logger = get_logger("projector")

Region = typ.Literal["header", "section", "footer"]
PLACEHOLDER_CLASS = "sc-missing-component"
RENDER_ERROR_CLASS = "sc-render-error"


@dc.dataclass(slots=True)
class RenderUnit:
    """One renderable unit: a resolved handler or a placeholder.

    Attributes
    ----------
    region : {"header", "section", "footer"}
        Where the unit sits on the page.
    key : str or None
        Section key for section units; ``None`` for layout slots.
    component : str
        Requested component name.
    handler : Handler or None
        Render handler, or ``None`` when the component is unknown.
    props : dict
        Fully merged props handed to the handler.
    """

    region: Region
    key: str | None
    component: str
    handler: Handler | None
    props: PropertyMap

    @property
    def resolved(self) -> bool:
        return self.handler is not None


def project(
    page: Page, global_config: GlobalConfig, library: ComponentLibrary
) -> list[RenderUnit]:
    """Return the render units for ``page`` in drawing order."""
    units: list[RenderUnit] = []
    header = _slot_unit("header", global_config, library)
    if header is not None:
        units.append(header)
    for section in page.sections:
        resolution = resolve_component(
            library, section.component, section.props, section.style
        )
        units.append(
            RenderUnit(
                region="section",
                key=section.key,
                component=section.component,
                handler=_handler_of(resolution),
                props=resolution.props,
            )
        )
    footer = _slot_unit("footer", global_config, library)
    if footer is not None:
        units.append(footer)
    return units


def _slot_unit(
    region: typ.Literal["header", "footer"],
    global_config: GlobalConfig,
    library: ComponentLibrary,
) -> RenderUnit | None:
    slot = global_config.layout.slot(region)
    if slot is None:
        return None
    resolution = resolve_component(
        library, slot.component, slot.props, extra={"brand": global_config.brand}
    )
    return RenderUnit(
        region=region,
        key=None,
        component=slot.component,
        handler=_handler_of(resolution),
        props=resolution.props,
    )


def _handler_of(resolution: Resolution) -> Handler | None:
    match resolution:
        case ResolvedComponent(handler=handler):
            return handler
        case _:
            return None


def render_unit(unit: RenderUnit) -> str:
    """Render ``unit`` to markup, drawing a visible placeholder when unresolved.

    A handler that raises is logged and replaced by an error block.
    """
    if unit.handler is None:
        return placeholder_markup(unit.component)
    try:
        return unit.handler(unit.props)
    except Exception:  # noqa: BLE001
        logger.exception(
            "Component '%s' failed to render section '%s'",
            unit.component,
            unit.key or unit.region,
        )
        return error_markup(unit.component)


def placeholder_markup(component: str) -> str:
    """Return the placeholder drawn in place of an unknown component."""
    name = escape(component, quote=True)
    return (
        f'<div class="{PLACEHOLDER_CLASS}" data-component="{name}">'
        f'Component "{escape(component)}" not found</div>'
    )


def error_markup(component: str) -> str:
    """Return the block drawn in place of a section whose handler failed."""
    name = escape(component, quote=True)
    return (
        f'<div class="{RENDER_ERROR_CLASS}" data-component="{name}">'
        f'Component "{escape(component)}" failed to render</div>'
    )


__all__ = [
    "PLACEHOLDER_CLASS",
    "RENDER_ERROR_CLASS",
    "Region",
    "RenderUnit",
    "error_markup",
    "placeholder_markup",
    "project",
    "render_unit",
]
