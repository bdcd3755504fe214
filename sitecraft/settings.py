"""Editor settings read from ``~/.config/sitecraft/config.toml``.

Example file::

    [store]
    path = "~/sites/acme.yaml"     # or: url = "https://example.com/site.json"
    timeout = 5.0

    [history]
    limit = 200

    [export]
    output_dir = "public"
    pygments_style = "friendly"

    [presets]
    path = "presets.yaml"

A missing file yields the defaults. The location can be overridden with the
``SITECRAFT_CONFIG_FILE`` environment variable.
"""

from __future__ import annotations

import dataclasses as dc
import os
import typing as typ
from pathlib import Path

import tomlkit
from tomlkit.exceptions import ParseError

from sitecraft.components.library import DEFAULT_PYGMENTS_STYLE
from sitecraft.store import DocumentStore, FileDocumentStore, HttpDocumentStore

if typ.TYPE_CHECKING:
    import requests

DEFAULT_CONFIG_PATH = Path(
    os.getenv(
        "SITECRAFT_CONFIG_FILE",
        Path.home() / ".config" / "sitecraft" / "config.toml",
    )
)
DEFAULT_DOCUMENT_FILE = Path("site.json")
DEFAULT_EXPORT_DIR = Path("public")


class SettingsError(ValueError):
    """Raised when the settings file is malformed."""


@dc.dataclass(slots=True)
class EditorSettings:
    """Resolved editor settings."""

    store_path: Path | None = None
    store_url: str | None = None
    store_token: str | None = None
    store_timeout: float = 10.0
    history_limit: int | None = None
    output_dir: Path = DEFAULT_EXPORT_DIR
    pygments_style: str = DEFAULT_PYGMENTS_STYLE
    presets_path: Path | None = None

    def build_store(
        self,
        *,
        document: Path | None = None,
        session: requests.Session | None = None,
    ) -> DocumentStore:
        """Return the store described by these settings.

        ``document`` overrides the configured store with a local file.
        Without any configuration the document lives in ``site.json`` in the
        working directory.
        """
        if document is not None:
            return FileDocumentStore(document)
        if self.store_url:
            return HttpDocumentStore(
                self.store_url,
                session=session,
                timeout=self.store_timeout,
                token=self.store_token,
            )
        return FileDocumentStore(self.store_path or DEFAULT_DOCUMENT_FILE)


def load_settings(path: Path = DEFAULT_CONFIG_PATH) -> EditorSettings:
    """Read settings from ``path``; a missing file yields the defaults.

    Raises
    ------
    SettingsError
        If the file is not valid TOML or a value has the wrong type.
    """
    if not path.exists():
        return EditorSettings()
    try:
        data = tomlkit.parse(path.read_text(encoding="utf-8")).unwrap()
    except ParseError as exc:
        msg = f"Unable to parse settings TOML at {path}: {exc}"
        raise SettingsError(msg) from exc

    store = _table(data, "store", path)
    history = _table(data, "history", path)
    export = _table(data, "export", path)
    presets = _table(data, "presets", path)

    store_path = _optional_path(store.get("path"), "store.path", path)
    store_url = _optional_str(store.get("url"), "store.url", path)
    if store_path is not None and store_url is not None:
        msg = f"Configure either store.path or store.url in {path}, not both."
        raise SettingsError(msg)

    settings = EditorSettings(
        store_path=store_path,
        store_url=store_url,
        store_token=_optional_str(store.get("token"), "store.token", path),
        history_limit=_history_limit(history.get("limit"), path),
        presets_path=_optional_path(presets.get("path"), "presets.path", path),
    )
    if "timeout" in store:
        settings.store_timeout = _positive_number(store["timeout"], "store.timeout", path)
    output_dir = _optional_path(export.get("output_dir"), "export.output_dir", path)
    if output_dir is not None:
        settings.output_dir = output_dir
    style = _optional_str(export.get("pygments_style"), "export.pygments_style", path)
    if style is not None:
        settings.pygments_style = style
    return settings


def _table(data: dict[str, typ.Any], name: str, path: Path) -> dict[str, typ.Any]:
    match data.get(name):
        case None:
            return {}
        case dict() as table:
            return table
        case _:
            msg = f"[{name}] in {path} must be a table."
            raise SettingsError(msg)


def _optional_str(value: object, key: str, path: Path) -> str | None:
    match value:
        case None:
            return None
        case str() as text if text.strip():
            return text.strip()
        case _:
            msg = f"{key} in {path} must be a non-empty string."
            raise SettingsError(msg)


def _optional_path(value: object, key: str, path: Path) -> Path | None:
    text = _optional_str(value, key, path)
    return Path(text).expanduser() if text is not None else None


def _history_limit(value: object, path: Path) -> int | None:
    match value:
        case None:
            return None
        case bool():
            pass
        case int() as limit if limit >= 1:
            return limit
    msg = f"history.limit in {path} must be a positive integer."
    raise SettingsError(msg)


def _positive_number(value: object, key: str, path: Path) -> float:
    match value:
        case bool():
            pass
        case int() | float() as number if number > 0:
            return float(number)
    msg = f"{key} in {path} must be a positive number."
    raise SettingsError(msg)


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_DOCUMENT_FILE",
    "DEFAULT_EXPORT_DIR",
    "EditorSettings",
    "SettingsError",
    "load_settings",
]
