"""Cyclopts CLI entrypoint for editing and publishing sitecraft documents.

The ``sitecraft`` console script opens the stored site document (a local
JSON/YAML file or an HTTP endpoint, see :mod:`sitecraft.settings`), applies
one edit through an :class:`~sitecraft.editor.EditorSession` and saves the
result. ``render`` writes static HTML for every routed page.

Examples
--------
Create a starter document and add a section to its home page:

>>> from sitecraft.cli import app
>>> app.run(["init", "--document", "site.yaml"])  # doctest: +SKIP
>>> app.run(
...     ["add-section", "home", "RichText", "--document", "site.yaml"]
... )  # doctest: +SKIP
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .components import default_library, load_presets
from .document import blank_site, default_site, export_document
from .editor import EditorSession
from .exporter import HtmlExporter
from .logging import configure_logging, get_logger
from .routing import RouteTable, duplicate_paths
from .settings import DEFAULT_CONFIG_PATH, EditorSettings, load_settings
from .store import FileDocumentStore

logger = get_logger("cli")

app = App(name="sitecraft", config=cyclopts.config.Env("SITECRAFT_", command=False))  # type: ignore[unknown-argument]

DocumentOption = typ.Annotated[
    Path | None,
    Parameter(help="Site document file; overrides the configured store"),
]
ConfigOption = typ.Annotated[
    Path, Parameter(help="Path to the sitecraft settings file")
]
VerboseOption = typ.Annotated[bool, Parameter(help="Log debug output")]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _open_session(
    document: Path | None, config: Path, *, verbose: bool = False
) -> tuple[EditorSession, EditorSettings]:
    """Configure logging, read settings and open the stored document."""
    configure_logging(verbose=verbose)
    settings = load_settings(config)
    presets = load_presets(settings.presets_path) if settings.presets_path else {}
    session = EditorSession.open(
        settings.build_store(document=document),
        library=default_library(),
        history_limit=settings.history_limit,
        presets=presets,
    )
    return session, settings


def _report(changed: bool, description: str) -> None:
    if changed:
        print(description)
    else:
        print("nothing changed")


@app.command(help="Write a starter site document.")
def init(
    *,
    document: DocumentOption = None,
    config: ConfigOption = DEFAULT_CONFIG_PATH,
    blank: typ.Annotated[
        bool, Parameter(help="Start from an empty site instead of the sample site")
    ] = False,
    brand: typ.Annotated[str | None, Parameter(help="Brand shown in header and footer")] = None,
    force: typ.Annotated[bool, Parameter(help="Overwrite an existing document")] = False,
    verbose: VerboseOption = False,
) -> None:
    """Create the site document in the configured store.

    Raises
    ------
    ValueError
        If the document file already exists and ``force`` is not set.
    """
    configure_logging(verbose=verbose)
    store = load_settings(config).build_store(document=document)
    if isinstance(store, FileDocumentStore) and store.path.exists() and not force:
        msg = f"{_format_path(store.path)} already exists; pass --force to overwrite."
        raise ValueError(msg)
    site = blank_site() if blank else default_site()
    if brand:
        site.global_config.brand = brand
    if isinstance(store, FileDocumentStore):
        print(f"wrote {_format_path(export_document(site, store.path))}")
    else:
        store.save(site)
        print(f"saved {len(site.pages)} pages")


@app.command(help="List every page with its absolute route.")
def pages(
    *,
    document: DocumentOption = None,
    config: ConfigOption = DEFAULT_CONFIG_PATH,
    verbose: VerboseOption = False,
) -> None:
    """Print ``route  page-id  name`` for each page in document order."""
    session, _settings = _open_session(document, config, verbose=verbose)
    site = session.document
    for path, page_ids in duplicate_paths(site.pages).items():
        logger.warning("route %s is claimed by pages %s", path, ", ".join(page_ids))
    for entry in RouteTable(site.pages):
        print(f"{entry.path}\t{entry.page_id}\t{entry.page.name}")


@app.command(name="add-page", help="Append a new empty page.")
def add_page(
    *,
    parent: typ.Annotated[
        str | None, Parameter(help="Add the page as a child of this page id")
    ] = None,
    document: DocumentOption = None,
    config: ConfigOption = DEFAULT_CONFIG_PATH,
    verbose: VerboseOption = False,
) -> None:
    session, _settings = _open_session(document, config, verbose=verbose)
    page_id = session.add_page(parent_id=parent)
    if page_id is None:
        print("nothing changed")
        return
    page = session.document.find_page(page_id)
    print(f"added page {page_id} at {page.path if page else '?'}")


@app.command(name="add-section", help="Add a section from a component or preset.")
def add_section(
    page: typ.Annotated[str, Parameter(help="Target page id")],
    component: typ.Annotated[str, Parameter(help="Component name or preset name")],
    *,
    index: typ.Annotated[
        int | None, Parameter(help="Insert position; appends when omitted")
    ] = None,
    document: DocumentOption = None,
    config: ConfigOption = DEFAULT_CONFIG_PATH,
    verbose: VerboseOption = False,
) -> None:
    session, _settings = _open_session(document, config, verbose=verbose)
    key = session.add_section(page, component, index=index)
    _report(key is not None, f"added section {key} to {page}")


@app.command(name="move-section", help="Move a section onto another section's slot.")
def move_section(
    page: typ.Annotated[str, Parameter(help="Page id")],
    from_key: typ.Annotated[str, Parameter(help="Key of the section to move")],
    to_key: typ.Annotated[str, Parameter(help="Key of the section to move onto")],
    *,
    document: DocumentOption = None,
    config: ConfigOption = DEFAULT_CONFIG_PATH,
    verbose: VerboseOption = False,
) -> None:
    session, _settings = _open_session(document, config, verbose=verbose)
    _report(
        session.move_section(page, from_key, to_key),
        f"moved {from_key} to the position of {to_key}",
    )


@app.command(name="remove-section", help="Remove a section from a page.")
def remove_section(
    page: typ.Annotated[str, Parameter(help="Page id")],
    key: typ.Annotated[str, Parameter(help="Section key")],
    *,
    document: DocumentOption = None,
    config: ConfigOption = DEFAULT_CONFIG_PATH,
    verbose: VerboseOption = False,
) -> None:
    session, _settings = _open_session(document, config, verbose=verbose)
    _report(session.remove_section(page, key), f"removed {key} from {page}")


@app.command(name="set-props", help="Replace a section's props (or style) with JSON.")
def set_props(
    page: typ.Annotated[str, Parameter(help="Page id")],
    key: typ.Annotated[str, Parameter(help="Section key")],
    payload: typ.Annotated[str, Parameter(help="JSON object; empty text means {}")],
    *,
    style: typ.Annotated[bool, Parameter(help="Set the style instead of props")] = False,
    document: DocumentOption = None,
    config: ConfigOption = DEFAULT_CONFIG_PATH,
    verbose: VerboseOption = False,
) -> None:
    """Replace the props or style of one section.

    Raises
    ------
    ValueError
        If ``payload`` is not a JSON object.
    """
    session, _settings = _open_session(document, config, verbose=verbose)
    if style:
        result = session.edit_section_style_text(page, key, payload)
    else:
        result = session.edit_section_props_text(page, key, payload)
    if not result.ok:
        raise ValueError(result.error)
    _report(result.changed, f"updated {'style' if style else 'props'} of {key}")


@app.command(help="Render every routed page to static HTML.")
def render(
    *,
    output_dir: typ.Annotated[
        Path | None, Parameter(help="Override the output folder")
    ] = None,
    document: DocumentOption = None,
    config: ConfigOption = DEFAULT_CONFIG_PATH,
    verbose: VerboseOption = False,
) -> None:
    session, settings = _open_session(document, config, verbose=verbose)
    exporter = HtmlExporter(session.library, pygments_style=settings.pygments_style)
    for path in exporter.run(session.document, output_dir or settings.output_dir):
        print(f"wrote {_format_path(path)}")


@app.command(help="Write the site document to a JSON or YAML file.")
def export(
    path: typ.Annotated[Path, Parameter(help="Destination (.json, .yaml or .yml)")],
    *,
    document: DocumentOption = None,
    config: ConfigOption = DEFAULT_CONFIG_PATH,
    verbose: VerboseOption = False,
) -> None:
    session, _settings = _open_session(document, config, verbose=verbose)
    print(f"wrote {_format_path(session.export_document(path))}")


@app.command(name="import", help="Replace the site document with a JSON or YAML file.")
def import_(
    path: typ.Annotated[Path, Parameter(help="File to import")],
    *,
    document: DocumentOption = None,
    config: ConfigOption = DEFAULT_CONFIG_PATH,
    verbose: VerboseOption = False,
) -> None:
    """Import a document; nothing is saved when the file is rejected.

    Raises
    ------
    ValueError
        If the file is missing or malformed.
    """
    session, _settings = _open_session(document, config, verbose=verbose)
    result = session.import_document(path)
    if not result.ok:
        raise ValueError(result.error)
    print(f"imported {_format_path(path)}")


@app.command(help="List the components available to sections.")
def components() -> None:
    for entry in default_library().catalog():
        print(f"{entry.name}\t{entry.category}\t{entry.display_name}")


def main() -> None:
    """Invoke the Cyclopts application that powers the `sitecraft` command."""
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
