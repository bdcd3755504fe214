"""Render site pages to static HTML files.

The exporter projects each routed page through the component library, wraps
the rendered units in ``site_page.jinja`` and writes one ``index.html`` per
route below the output directory (``/`` becomes ``index.html``, ``/pricing``
becomes ``pricing/index.html``).
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from jinja2 import Environment, FileSystemLoader
from markupsafe import Markup

from sitecraft.components.library import (
    DEFAULT_PYGMENTS_STYLE,
    TEMPLATES_DIR,
    code_stylesheet,
)
from sitecraft.logging import get_logger
from sitecraft.projector import project, render_unit
from sitecraft.routing import RouteTable, normalize_request_path

if typ.TYPE_CHECKING:
    from pathlib import Path

    from sitecraft.components.registry import ComponentLibrary
    from sitecraft.document import Page, Site
    from sitecraft.projector import RenderUnit

logger = get_logger("exporter")

PAGE_TEMPLATE = "site_page.jinja"


@dc.dataclass(slots=True)
class RenderedBlock:
    """Markup for one section, tagged with its key and component."""

    key: str | None
    component: str
    html: Markup


class HtmlExporter:
    """Build standalone HTML documents for the pages of a site."""

    def __init__(
        self,
        library: ComponentLibrary,
        templates_dir: Path | None = None,
        *,
        pygments_style: str = DEFAULT_PYGMENTS_STYLE,
    ) -> None:
        """Initialise the exporter.

        Parameters
        ----------
        library : ComponentLibrary
            Library resolving section components to render handlers.
        templates_dir : Path, optional
            Directory containing ``site_page.jinja``. Defaults to the
            templates shipped with the package.
        pygments_style : str, optional
            Pygments style embedded for pages containing code blocks.
        """
        self.library = library
        self.templates_dir = templates_dir or TEMPLATES_DIR
        self.pygments_style = pygments_style
        self.env = Environment(
            loader=FileSystemLoader(self.templates_dir),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.template = self.env.get_template(PAGE_TEMPLATE)

    def render_page(self, site: Site, page: Page) -> str:
        """Return the complete HTML document for ``page``."""
        units = project(page, site.global_config, self.library)
        header = _first_region(units, "header")
        footer = _first_region(units, "footer")
        sections = [
            RenderedBlock(
                key=unit.key,
                component=unit.component,
                html=Markup(render_unit(unit)),  # noqa: S704
            )
            for unit in units
            if unit.region == "section"
        ]
        seo = page.seo
        uses_code = any(
            unit.component == "CodeBlock" and unit.resolved for unit in units
        )
        code_css = code_stylesheet(self.pygments_style) if uses_code else None
        context = {
            "page": page,
            "title": (seo.title if seo else None) or page.name,
            "description": (seo.description if seo else None) or "",
            "theme": site.global_config.theme.value,
            "brand": site.global_config.brand,
            "header": Markup(render_unit(header)) if header else None,  # noqa: S704
            "footer": Markup(render_unit(footer)) if footer else None,  # noqa: S704
            "sections": sections,
            "code_css": Markup(code_css) if code_css else None,  # noqa: S704
        }
        html = self.template.render(**context)
        if not html.endswith("\n"):
            html += "\n"
        return html

    def run(self, site: Site, output_dir: Path) -> list[Path]:
        """Write every routed page below ``output_dir`` and return the paths.

        When several pages share a route, only the first one in document
        order is written.
        """
        written: list[Path] = []
        claimed: dict[str, str] = {}
        for entry in RouteTable(site.pages):
            route = normalize_request_path(entry.path)
            if route in claimed:
                logger.warning(
                    "Skipping page '%s': route '%s' already exported for page '%s'",
                    entry.page_id,
                    route,
                    claimed[route],
                )
                continue
            claimed[route] = entry.page_id
            output_path = output_path_for(output_dir, route)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(self.render_page(site, entry.page), encoding="utf-8")
            logger.debug("wrote %s", output_path)
            written.append(output_path)
        return written


def output_path_for(output_dir: Path, route: str) -> Path:
    """Return the ``index.html`` path for ``route`` below ``output_dir``.

    ``.`` and ``..`` segments are dropped so every file stays inside
    ``output_dir``.
    """
    parts = [
        part
        for part in normalize_request_path(route).split("/")
        if part and part not in {".", ".."}
    ]
    return output_dir.joinpath(*parts, "index.html")


def _first_region(units: list[RenderUnit], region: str) -> RenderUnit | None:
    return next((unit for unit in units if unit.region == region), None)


__all__ = ["HtmlExporter", "RenderedBlock", "output_path_for"]
