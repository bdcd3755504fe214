"""Section presets: named, pre-filled templates for new sections.

Presets come from two places. Every component in a library yields a basic
preset carrying its default props (the palette entry), and teams can ship a
YAML file of richer presets::

    presets:
      pricing-hero:
        label: Pricing hero
        component: HeroBanner
        props: {heading: Pricing}
        style: {background: "#fff"}
"""

from __future__ import annotations

import copy
import dataclasses as dc
import typing as typ

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from sitecraft.document import DocumentError, PropertyMap, check_property_map

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .registry import ComponentLibrary


class PresetError(DocumentError):
    """Raised when a presets file is missing entries or malformed."""


@dc.dataclass(slots=True)
class SectionPreset:
    """Template used by the add-section operation."""

    name: str
    component: str
    props: PropertyMap | None = None
    style: PropertyMap | None = None
    label: str | None = None
    description: str = ""

    @property
    def display_name(self) -> str:
        return self.label or self.name


def preset_for_component(library: ComponentLibrary, component: str) -> SectionPreset:
    """Return the palette preset for ``component`` using its default props.

    Unknown components still yield a preset; the section will render as a
    placeholder until the component is available.
    """
    metadata = next(
        (entry for entry in library.catalog() if entry.name == component), None
    )
    return SectionPreset(
        name=component,
        component=component,
        props=library.defaults_for(component),
        label=metadata.display_name if metadata else component,
        description=metadata.description if metadata else "",
    )


def palette_presets(library: ComponentLibrary) -> list[SectionPreset]:
    """Return one preset per component in ``library``, in catalog order."""
    return [preset_for_component(library, entry.name) for entry in library.catalog()]


def load_presets(path: Path) -> dict[str, SectionPreset]:
    """Load named presets from a YAML file.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    PresetError
        If the file does not parse or an entry lacks a component.
    """
    if not path.exists():
        msg = f"Presets file '{path}' not found."
        raise FileNotFoundError(msg)
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        with path.open("r", encoding="utf-8") as handle:
            loaded = loader.load(handle) or {}
    except YAMLError as exc:
        msg = f"Presets file '{path}' is not valid YAML: {exc}"
        raise PresetError(msg) from exc
    match loaded:
        case {"presets": dict() as entries}:
            pass
        case _:
            msg = "Presets file must contain a 'presets' mapping."
            raise PresetError(msg)

    presets: dict[str, SectionPreset] = {}
    for name, payload in entries.items():
        match payload:
            case {"component": str() as component, **rest} if component.strip():
                pass
            case _:
                msg = f"Preset '{name}' requires a 'component'."
                raise PresetError(msg)
        presets[str(name)] = SectionPreset(
            name=str(name),
            component=component,
            props=_optional_map(rest.get("props"), f"{name}.props"),
            style=_optional_map(rest.get("style"), f"{name}.style"),
            label=rest.get("label"),
            description=str(rest.get("description", "")),
        )
    return presets


def _optional_map(value: object, where: str) -> PropertyMap | None:
    if value is None:
        return None
    return copy.deepcopy(check_property_map(value, where=where))


__all__ = [
    "PresetError",
    "SectionPreset",
    "load_presets",
    "palette_presets",
    "preset_for_component",
]
