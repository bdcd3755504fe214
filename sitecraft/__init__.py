"""Document model and editing tools for component-based websites.

A site is a tree of pages, each holding an ordered list of sections that name
a component from a library together with its props and style. This package
edits that tree through pure mutations with linear undo/redo, resolves
sections to render handlers and publishes pages as static HTML.

Exports
-------
- ``app``: Cyclopts application behind the ``sitecraft`` console script.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from sitecraft import main
>>> main()  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
