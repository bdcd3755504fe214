"""Built-in default document used when no stored document exists."""

from __future__ import annotations

from pathlib import Path

from .loader import import_document
from .models import Site

DEFAULT_DOCUMENT_PATH = Path(__file__).resolve().parents[1] / "data" / "default_site.yaml"


def default_site() -> Site:
    """Return a fresh copy of the packaged starter site."""
    return import_document(DEFAULT_DOCUMENT_PATH)


def blank_site(brand: str = "My Website") -> Site:
    """Return an empty site with no pages and no layout slots."""
    site = Site()
    site.global_config.brand = brand
    return site


__all__ = ["DEFAULT_DOCUMENT_PATH", "blank_site", "default_site"]
