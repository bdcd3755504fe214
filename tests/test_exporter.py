"""Tests for the static HTML exporter.

Usage
-----
Run ``pytest tests/test_exporter.py -v``. Pages are written below pytest's
``tmp_path`` and parsed with BeautifulSoup.
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

import pytest
from bs4 import BeautifulSoup

from sitecraft.document import Page, Section
from sitecraft.exporter import HtmlExporter, output_path_for
from sitecraft.projector import PLACEHOLDER_CLASS

if typ.TYPE_CHECKING:
    from sitecraft.components import ComponentTable
    from sitecraft.document import Site


@pytest.fixture
def exporter(library: ComponentTable) -> HtmlExporter:
    """Return an exporter over the built-in library."""
    return HtmlExporter(library)


def _soup(path: Path) -> BeautifulSoup:
    return BeautifulSoup(path.read_text(encoding="utf-8"), "html.parser")


def test_run_writes_one_file_per_route(
    exporter: HtmlExporter, sample_site: Site, tmp_path: Path
) -> None:
    written = exporter.run(sample_site, tmp_path)
    relative = [path.relative_to(tmp_path).as_posix() for path in written]
    assert relative == ["index.html", "docs/index.html", "about/index.html"], (
        f"unexpected output files {relative}"
    )
    assert all(path.read_text(encoding="utf-8").endswith("\n") for path in written), (
        "expected each page to end with a newline"
    )


def test_page_document_structure(
    exporter: HtmlExporter, sample_site: Site, tmp_path: Path
) -> None:
    exporter.run(sample_site, tmp_path)
    soup = _soup(tmp_path / "index.html")
    assert soup.title is not None, "expected a title element"
    assert soup.title.get_text() == "Acme Home", "expected the SEO title"
    description = soup.find("meta", attrs={"name": "description"})
    assert description is not None, "expected a description meta tag"
    assert description["content"] == "Welcome", "expected the SEO description"
    body = soup.body
    assert body is not None, "expected a body"
    assert body["class"] == ["sc-theme-light"], "expected the theme class"
    assert body["data-page-id"] == "home", "expected the page id"
    keys = [div["data-section-key"] for div in soup.select("main .sc-section")]
    assert keys == ["a", "b", "c"], f"expected sections in order, got {keys}"
    assert soup.find("header", class_="sc-header") is not None, "expected the header"
    assert soup.find("footer", class_="sc-footer") is not None, "expected the footer"
    assert soup.find("style") is None, "expected no code stylesheet without code"


def test_title_falls_back_to_page_name(
    exporter: HtmlExporter, sample_site: Site, tmp_path: Path
) -> None:
    exporter.run(sample_site, tmp_path)
    soup = _soup(tmp_path / "about" / "index.html")
    assert soup.title is not None, "expected a title element"
    assert soup.title.get_text() == "About", "expected the page name as title"


def test_unknown_component_renders_placeholder(
    exporter: HtmlExporter, sample_site: Site
) -> None:
    page = Page(id="p", path="/p", name="P", sections=[Section("s", "Marquee3D")])
    soup = BeautifulSoup(exporter.render_page(sample_site, page), "html.parser")
    block = soup.find("div", class_=PLACEHOLDER_CLASS)
    assert block is not None, "expected the placeholder in the page"
    assert block["data-component"] == "Marquee3D", "expected the missing component name"


def test_mistyped_props_do_not_stop_the_export(
    exporter: HtmlExporter, sample_site: Site, tmp_path: Path
) -> None:
    page = Page(
        id="p",
        path="/",
        name="P",
        sections=[
            Section("grid", "FeatureGrid", {"items": 5}),
            Section("pages", "Pagination", {"total": "3"}),
        ],
    )
    sample_site.pages = [page]
    written = exporter.run(sample_site, tmp_path)
    assert written == [tmp_path / "index.html"], f"unexpected output files {written}"
    soup = _soup(written[0])
    assert soup.find("section", class_="sc-feature-grid") is not None, "expected the grid"
    links = [a.get_text() for a in soup.select(".sc-pagination a")]
    assert links == ["1", "2", "3"], f"unexpected pagination links {links}"


def test_code_block_embeds_stylesheet(exporter: HtmlExporter, sample_site: Site) -> None:
    page = Page(
        id="p",
        path="/p",
        name="P",
        sections=[Section("code", "CodeBlock", {"code": "x = 1", "language": "python"})],
    )
    soup = BeautifulSoup(exporter.render_page(sample_site, page), "html.parser")
    style = soup.find("style")
    assert style is not None, "expected the pygments stylesheet"
    assert ".codehilite" in style.get_text(), "expected codehilite rules"


def test_duplicate_routes_are_skipped(
    exporter: HtmlExporter,
    sample_site: Site,
    tmp_path: Path,
    caplog: pytest.LogCaptureFixture,
) -> None:
    sample_site.pages.append(Page(id="again", path="/about/", name="About again"))
    with caplog.at_level(logging.WARNING, logger="sitecraft.exporter"):
        written = exporter.run(sample_site, tmp_path)
    assert len(written) == 3, "expected the duplicate route skipped"
    assert "Skipping page 'again'" in caplog.text, "expected a warning"
    soup = _soup(tmp_path / "about" / "index.html")
    assert soup.title is not None, "expected a title element"
    assert soup.title.get_text() == "About", "expected the first page to win"


@pytest.mark.parametrize(
    ("route", "expected"),
    [
        ("/", "index.html"),
        ("/pricing", "pricing/index.html"),
        ("/docs/install/", "docs/install/index.html"),
        ("/../../etc", "etc/index.html"),
    ],
)
def test_output_path_for(route: str, expected: str) -> None:
    base = Path("public")
    assert output_path_for(base, route) == base / expected, (
        f"unexpected output path for {route!r}"
    )
