"""Resolve section component names into render handlers and final props.

The resolver only relies on two capabilities of a component library: looking
up a handler by exact name and returning that component's default props. Any
object implementing :class:`ComponentLibrary` can back it; :class:`ComponentTable`
is the mapping-backed implementation used by the built-in library and tests.

An unknown component name is an ordinary state while a document is being
edited, so :func:`resolve_component` reports it as an
:class:`UnresolvedComponent` instead of raising.
"""

from __future__ import annotations

import collections.abc as cabc
import copy
import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    from sitecraft.document import JsonValue, PropertyMap

Handler = cabc.Callable[[cabc.Mapping[str, "JsonValue"]], str]
ComponentCategory = typ.Literal["basic", "layout", "form", "display", "navigation"]


@dc.dataclass(slots=True, frozen=True)
class ComponentMetadata:
    """Human-readable palette entry for a component."""

    name: str
    display_name: str
    category: ComponentCategory = "basic"
    description: str = ""


@dc.dataclass(slots=True)
class ComponentSpec:
    """Handler, default props and palette metadata for one component."""

    handler: Handler
    defaults: PropertyMap = dc.field(default_factory=dict)
    metadata: ComponentMetadata | None = None


@typ.runtime_checkable
class ComponentLibrary(typ.Protocol):
    """Capabilities the resolver needs from a component library."""

    def resolve(self, name: str) -> Handler | None:
        """Return the handler registered under ``name``, if any."""
        ...

    def defaults_for(self, name: str) -> PropertyMap:
        """Return the default props for ``name`` (empty when unknown)."""
        ...

    def catalog(self) -> list[ComponentMetadata]:
        """Return palette metadata for every registered component."""
        ...


class ComponentTable:
    """Component library backed by a plain name-to-spec mapping."""

    def __init__(self, specs: cabc.Mapping[str, ComponentSpec] | None = None) -> None:
        self._specs: dict[str, ComponentSpec] = dict(specs or {})

    def register(
        self,
        name: str,
        handler: Handler,
        *,
        defaults: PropertyMap | None = None,
        metadata: ComponentMetadata | None = None,
    ) -> None:
        """Add or replace the component registered under ``name``."""
        self._specs[name] = ComponentSpec(
            handler=handler,
            defaults=dict(defaults or {}),
            metadata=metadata or ComponentMetadata(name=name, display_name=name),
        )

    def resolve(self, name: str) -> Handler | None:
        spec = self._specs.get(name)
        return spec.handler if spec else None

    def defaults_for(self, name: str) -> PropertyMap:
        spec = self._specs.get(name)
        return copy.deepcopy(spec.defaults) if spec else {}

    def catalog(self) -> list[ComponentMetadata]:
        return [
            spec.metadata or ComponentMetadata(name=name, display_name=name)
            for name, spec in self._specs.items()
        ]

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    def __len__(self) -> int:
        return len(self._specs)


@dc.dataclass(slots=True)
class ResolvedComponent:
    """A component found in the library, with its merged props."""

    name: str
    handler: Handler
    props: PropertyMap

    @property
    def resolved(self) -> bool:
        return True


@dc.dataclass(slots=True)
class UnresolvedComponent:
    """A component name missing from the library; rendered as a placeholder."""

    name: str
    props: PropertyMap

    @property
    def resolved(self) -> bool:
        return False


Resolution = ResolvedComponent | UnresolvedComponent


def resolve_component(
    library: ComponentLibrary,
    name: str,
    props: PropertyMap | None = None,
    style: PropertyMap | None = None,
    *,
    extra: PropertyMap | None = None,
) -> Resolution:
    """Resolve ``name`` and merge its props.

    Parameters
    ----------
    library : ComponentLibrary
        Library used for handler lookup and default props.
    name : str
        Component name, matched exactly.
    props : dict, optional
        Section or slot props.
    style : dict, optional
        Style overrides; passed through as the ``style`` prop when present.
    extra : dict, optional
        Implicit props layered between the defaults and ``props`` (for
        example the site brand handed to header and footer slots).

    Returns
    -------
    ResolvedComponent or UnresolvedComponent
        Later layers win on key collisions: defaults, ``extra``, ``props``,
        then ``{"style": style}``. The merge is shallow and never aliases the
        caller's mappings.
    """
    merged: PropertyMap = {}
    handler = library.resolve(name)
    if handler is not None:
        merged.update(library.defaults_for(name))
    merged.update(extra or {})
    merged.update(props or {})
    if style is not None:
        merged["style"] = style
    merged = copy.deepcopy(merged)
    if handler is None:
        return UnresolvedComponent(name=name, props=merged)
    return ResolvedComponent(name=name, handler=handler, props=merged)


__all__ = [
    "ComponentCategory",
    "ComponentLibrary",
    "ComponentMetadata",
    "ComponentSpec",
    "ComponentTable",
    "Handler",
    "Resolution",
    "ResolvedComponent",
    "UnresolvedComponent",
    "resolve_component",
]
