"""Shared fixtures for the sitecraft test suite.

Usage
-----
Fixtures here are discovered automatically by pytest. ``engine`` uses a fixed
clock so generated page ids and section keys are predictable, and
``sample_site`` builds a small document in memory so tests do not depend on
the packaged starter site.
"""

from __future__ import annotations

import collections.abc as cabc
import datetime as dt
import logging

import pytest

from sitecraft.components import ComponentTable, build_library
from sitecraft.document import (
    GlobalConfig,
    LayoutConfig,
    LayoutSlot,
    Page,
    PageMetadata,
    SeoConfig,
    Section,
    Site,
)
from sitecraft.mutations import MutationEngine

FIXED_NOW = dt.datetime(2024, 5, 1, 12, 0, tzinfo=dt.UTC)


def make_site() -> Site:
    """Return a small document: a home page with three sections and a child."""
    return Site(
        global_config=GlobalConfig(
            brand="Acme",
            layout=LayoutConfig(
                header=LayoutSlot(
                    component="Header",
                    props={"cta": {"label": "Book a demo", "href": "/contact"}},
                ),
                footer=LayoutSlot(component="Footer", props={"links": ["Privacy"]}),
            ),
        ),
        pages=[
            Page(
                id="home",
                path="/",
                name="Home",
                sections=[
                    Section(key="a", component="Typography", props={"children": "A"}),
                    Section(key="b", component="Button", props={"children": "B"}),
                    Section(key="c", component="Card", props={"title": "C"}),
                ],
                layout="default",
                seo=SeoConfig(title="Acme Home", description="Welcome"),
                metadata=PageMetadata(
                    created_at=dt.datetime(2024, 1, 1, 9, 0, tzinfo=dt.UTC)
                ),
                children=[Page(id="docs", path="docs", name="Docs")],
            ),
            Page(id="about", path="/about", name="About"),
        ],
    )


@pytest.fixture(autouse=True)
def reset_sitecraft_logger() -> cabc.Iterator[None]:
    """Drop handlers installed by CLI commands once each test finishes."""
    yield
    logger = logging.getLogger("sitecraft")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def sample_site() -> Site:
    """Return a fresh copy of the shared sample document."""
    return make_site()


@pytest.fixture
def fixed_now() -> dt.datetime:
    """Return the instant reported by the ``engine`` fixture's clock."""
    return FIXED_NOW


@pytest.fixture
def engine() -> MutationEngine:
    """Return a mutation engine whose clock is frozen at ``FIXED_NOW``."""
    return MutationEngine(clock=lambda: FIXED_NOW)


@pytest.fixture(scope="session")
def library() -> ComponentTable:
    """Return the built-in component library (templates compiled once)."""
    return build_library()


@pytest.fixture
def keys_of() -> cabc.Callable[..., list[str]]:
    """Return a helper listing the section keys of a page in order."""

    def _keys(site: Site, page_id: str = "home") -> list[str]:
        page = site.find_page(page_id)
        assert page is not None, f"expected page {page_id!r} in the document"
        return [section.key for section in page.sections]

    return _keys
