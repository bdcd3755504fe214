"""Component registry, built-in component library and section presets."""

from __future__ import annotations

from .library import (
    BUILTIN_COMPONENTS,
    MacroRenderer,
    build_library,
    code_stylesheet,
    default_library,
    inline_style,
)
from .presets import (
    PresetError,
    SectionPreset,
    load_presets,
    palette_presets,
    preset_for_component,
)
from .registry import (
    ComponentLibrary,
    ComponentMetadata,
    ComponentSpec,
    ComponentTable,
    Handler,
    Resolution,
    ResolvedComponent,
    UnresolvedComponent,
    resolve_component,
)

__all__ = [
    "BUILTIN_COMPONENTS",
    "ComponentLibrary",
    "ComponentMetadata",
    "ComponentSpec",
    "ComponentTable",
    "Handler",
    "MacroRenderer",
    "PresetError",
    "Resolution",
    "ResolvedComponent",
    "SectionPreset",
    "UnresolvedComponent",
    "build_library",
    "code_stylesheet",
    "default_library",
    "inline_style",
    "load_presets",
    "palette_presets",
    "preset_for_component",
    "resolve_component",
]
