"""Built-in component library rendered from Jinja2 macros.

Every built-in component is a macro in ``templates/components.jinja`` that
receives the merged props mapping and returns markup. The macro names are the
snake_case forms of the component names (``HeroBanner`` is ``hero_banner``).

Four filters are available to the macros:

``markdown``
    Render a markdown string to HTML (used by ``RichText``).
``highlight``
    Syntax-highlight source code with Pygments (used by ``CodeBlock``).
``inline_style``
    Turn a ``style`` mapping with camelCase keys into an inline CSS string.
``sequence``
    Return a list prop as a list, or an empty list for any other value, so
    loops tolerate props of the wrong type.
"""

from __future__ import annotations

import collections.abc as cabc
import re
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader
from markdown import Markdown
from markupsafe import Markup
from pygments import highlight
from pygments.formatters.html import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from sitecraft.components.registry import ComponentMetadata, ComponentTable

if typ.TYPE_CHECKING:
    from sitecraft.components.registry import Handler
    from sitecraft.document import JsonValue, PropertyMap

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"
COMPONENTS_TEMPLATE = "components.jinja"
DEFAULT_PYGMENTS_STYLE = "monokai"

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_UNITLESS_PROPERTIES = frozenset(
    {"flex", "flexGrow", "flexShrink", "fontWeight", "lineHeight", "opacity", "order", "zIndex"}
)

BUILTIN_COMPONENTS: tuple[tuple[ComponentMetadata, PropertyMap], ...] = (
    (
        ComponentMetadata("Button", "Button", "basic", "Interactive button component"),
        {"children": "Click me", "variant": "primary", "size": "md"},
    ),
    (
        ComponentMetadata("Typography", "Text / Heading", "basic", "Text and heading component"),
        {"children": "Sample text", "variant": "body1"},
    ),
    (
        ComponentMetadata("Card", "Card", "display", "Card container component"),
        {"title": "Card Title", "children": "Card content goes here", "shadow": True},
    ),
    (
        ComponentMetadata("Input", "Input Field", "form", "Form input component"),
        {"placeholder": "Enter text...", "type": "text"},
    ),
    (ComponentMetadata("Row", "Row", "layout", "Horizontal layout container"), {}),
    (ComponentMetadata("Col", "Column", "layout", "Vertical layout container"), {}),
    (ComponentMetadata("Container", "Container", "layout", "Page container component"), {}),
    (ComponentMetadata("Avatar", "Avatar", "display", "User avatar component"), {}),
    (ComponentMetadata("Badge", "Badge", "display", "Badge component"), {"children": "Badge"}),
    (ComponentMetadata("BadgeGroup", "Badge Group", "display", "Row of badges"), {"items": []}),
    (ComponentMetadata("Spinner", "Spinner", "display", "Loading spinner"), {}),
    (ComponentMetadata("Navbar", "Navbar", "navigation", "Navigation bar component"), {}),
    (ComponentMetadata("Accordion", "Accordion", "display", "Accordion component"), {}),
    (ComponentMetadata("Tabs", "Tabs", "display", "Tabs component"), {}),
    (ComponentMetadata("List", "List", "display", "List component"), {"items": []}),
    (ComponentMetadata("ListItem", "List Item", "display", "List item component"), {}),
    (ComponentMetadata("Pagination", "Pagination", "navigation", "Pagination component"), {}),
    (ComponentMetadata("Modal", "Modal", "display", "Modal dialog component"), {}),
    (ComponentMetadata("Tooltip", "Tooltip", "display", "Tooltip component"), {}),
    (
        ComponentMetadata("Header", "Header", "navigation", "Site header with brand and call to action"),
        {"brand": "Site Builder"},
    ),
    (
        ComponentMetadata("Footer", "Footer", "navigation", "Site footer with links"),
        {"brand": "Site Builder", "links": []},
    ),
    (
        ComponentMetadata("HeroBanner", "Hero Banner", "display", "Headline block with call to action"),
        {"heading": "Your headline here", "subheading": ""},
    ),
    (
        ComponentMetadata("FeatureGrid", "Feature Grid", "display", "Grid of feature cards"),
        {"title": "", "items": []},
    ),
    (
        ComponentMetadata("RichText", "Rich Text", "basic", "Markdown content block"),
        {"content": ""},
    ),
    (
        ComponentMetadata("CodeBlock", "Code Block", "display", "Syntax-highlighted code sample"),
        {"code": "", "language": "text"},
    ),
    (
        ComponentMetadata("ContactForm", "Contact Form", "form", "Form with configurable fields"),
        {"title": "", "submitLabel": "Submit", "fields": []},
    ),
    (
        ComponentMetadata("ButtonGroup", "Button Group", "basic", "Heading with a row of link buttons"),
        {"alignment": "center", "buttons": []},
    ),
    (
        ComponentMetadata("StatsGrid", "Stats Grid", "display", "Grid of headline numbers"),
        {"items": []},
    ),
    (
        ComponentMetadata("TestimonialList", "Testimonials", "display", "Customer quotes"),
        {"testimonials": []},
    ),
)


def macro_name(component: str) -> str:
    """Return the macro name for ``component`` (``HeroBanner`` -> ``hero_banner``)."""
    return _CAMEL_BOUNDARY.sub("_", component).lower()


def css_property(name: str) -> str:
    """Return the CSS property for a camelCase style key."""
    return _CAMEL_BOUNDARY.sub("-", name).lower()


def inline_style(style: JsonValue | None) -> str:
    """Render a style mapping as an inline CSS declaration list.

    Numbers receive a ``px`` unit except for unitless properties such as
    ``opacity``. Nested mappings, lists, booleans and ``None`` values are
    skipped; components that understand them read them directly.

    Examples
    --------
    >>> inline_style({"textAlign": "center", "marginTop": 8, "opacity": 0.5})
    'text-align: center; margin-top: 8px; opacity: 0.5'
    """
    if not isinstance(style, cabc.Mapping):
        return ""
    declarations: list[str] = []
    for key, value in style.items():
        match value:
            case bool() | None:
                continue
            case int() | float() if key not in _UNITLESS_PROPERTIES:
                text = f"{value}px"
            case int() | float() | str():
                text = str(value)
            case _:
                continue
        declarations.append(f"{css_property(key)}: {text}")
    return "; ".join(declarations)


def as_sequence(value: JsonValue | None) -> list[JsonValue]:
    """Return ``value`` as a list when it is a non-string sequence, else ``[]``."""
    if isinstance(value, cabc.Sequence) and not isinstance(value, str | bytes):
        return list(value)
    return []


def code_stylesheet(pygments_style: str = DEFAULT_PYGMENTS_STYLE) -> str:
    """Return the Pygments CSS used by highlighted ``CodeBlock`` sections."""
    return HtmlFormatter(style=pygments_style, cssclass="codehilite").get_style_defs(
        ".codehilite"
    )


class MacroRenderer:
    """Render built-in components through the macros in ``components.jinja``."""

    def __init__(
        self,
        templates_dir: Path | None = None,
        *,
        pygments_style: str = DEFAULT_PYGMENTS_STYLE,
    ) -> None:
        """Configure the Jinja environment and load the component macros.

        Parameters
        ----------
        templates_dir : Path, optional
            Directory containing ``components.jinja``. Defaults to the
            templates shipped with the package.
        pygments_style : str, optional
            Pygments style used by the ``highlight`` filter. Defaults to
            ``"monokai"``.
        """
        self.templates_dir = templates_dir or TEMPLATES_DIR
        self.pygments_style = pygments_style
        self._formatter = HtmlFormatter(style=pygments_style, cssclass="codehilite")
        self.env = Environment(
            loader=FileSystemLoader(self.templates_dir),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["markdown"] = self.markdown
        self.env.filters["highlight"] = self.code_block
        self.env.filters["inline_style"] = inline_style
        self.env.filters["sequence"] = as_sequence
        self.macros = self.env.get_template(COMPONENTS_TEMPLATE).module

    def markdown(self, text: str) -> Markup:
        """Render markdown into HTML."""
        if not str(text).strip():
            return Markup("")
        md = Markdown(extensions=["fenced_code", "tables", "sane_lists"])
        return Markup(md.convert(str(text)))  # noqa: S704

    def code_block(self, code: str, language: str | None = None) -> Markup:
        """Highlight ``code``; unknown languages fall back to plain text."""
        lang = str(language) if language else "text"
        try:
            lexer = get_lexer_by_name(lang)
        except ClassNotFound:
            lexer = get_lexer_by_name("text")
        return Markup(highlight(str(code), lexer, self._formatter))  # noqa: S704

    def handler(self, component: str) -> Handler:
        """Return a render handler for the macro backing ``component``.

        Raises
        ------
        LookupError
            If the template defines no macro for ``component``.
        """
        macro = getattr(self.macros, macro_name(component), None)
        if not callable(macro):
            msg = f"No macro '{macro_name(component)}' for component '{component}'."
            raise LookupError(msg)

        def _render(props: cabc.Mapping[str, JsonValue]) -> str:
            return str(macro(props)).strip()

        return _render


def build_library(
    templates_dir: Path | None = None,
    *,
    pygments_style: str = DEFAULT_PYGMENTS_STYLE,
) -> ComponentTable:
    """Return a fresh component table holding every built-in component."""
    renderer = MacroRenderer(templates_dir, pygments_style=pygments_style)
    table = ComponentTable()
    for metadata, defaults in BUILTIN_COMPONENTS:
        table.register(
            metadata.name,
            renderer.handler(metadata.name),
            defaults=defaults,
            metadata=metadata,
        )
    return table


def default_library() -> ComponentTable:
    """Return the built-in library with the packaged templates."""
    return build_library()


__all__ = [
    "BUILTIN_COMPONENTS",
    "DEFAULT_PYGMENTS_STYLE",
    "TEMPLATES_DIR",
    "MacroRenderer",
    "as_sequence",
    "build_library",
    "code_stylesheet",
    "css_property",
    "default_library",
    "inline_style",
    "macro_name",
]
