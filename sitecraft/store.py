r"""Persistence collaborators for the site document.

A store loads the document at session start and saves the current document
after every recorded edit, undo and redo. Stores are best-effort:

* ``load`` falls back to the built-in default document when nothing has been
  stored yet or the stored data cannot be read, logging why.
* ``save`` logs failures instead of raising, so a broken disk or network
  never corrupts the in-memory session.
* A successful ``save`` notifies subscribers, which lets other readers in the
  same process (a preview server, for example) pick up the new document.

Example
-------
>>> from pathlib import Path
>>> from sitecraft.store import FileDocumentStore
>>> store = FileDocumentStore(Path("site.json"))  # doctest: +SKIP
>>> site = store.load()  # doctest: +SKIP
>>> store.save(site)  # doctest: +SKIP
"""

from __future__ import annotations

import collections.abc as cabc
import typing as typ
from http import HTTPStatus

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from sitecraft.document import (
    DocumentError,
    default_site,
    dumps_document,
    format_for_path,
    loads_document,
)
from sitecraft.logging import get_logger

if typ.TYPE_CHECKING:
    from pathlib import Path

    from sitecraft.document import Site

logger = get_logger("store")

ChangeListener = cabc.Callable[["Site"], None]
DefaultFactory = cabc.Callable[[], "Site"]


class StoreError(RuntimeError):
    """Raised inside a store when reading or writing the document fails."""


class DocumentStore:
    """Base class implementing the load/save contract and change notification.

    Subclasses implement :meth:`_read` and :meth:`_write`. :meth:`_read`
    returns ``None`` when nothing has been stored yet.
    """

    def __init__(self, *, default_factory: DefaultFactory = default_site) -> None:
        self._default_factory = default_factory
        self._listeners: list[ChangeListener] = []

    def load(self) -> Site:
        """Return the stored document, or the default document."""
        try:
            site = self._read()
        except (StoreError, DocumentError) as exc:
            logger.warning("Failed to load stored document; using default: %s", exc)
            return self._default_factory()
        if site is None:
            logger.debug("No stored document found; using default")
            return self._default_factory()
        return site

    def save(self, site: Site) -> None:
        """Persist ``site`` and notify subscribers; failures are logged."""
        try:
            self._write(site)
        except StoreError as exc:
            logger.error("Failed to save document: %s", exc)
            return
        self._notify(site)

    def subscribe(self, listener: ChangeListener) -> cabc.Callable[[], None]:
        """Call ``listener`` after every successful save.

        Returns
        -------
        Callable[[], None]
            Function that removes the subscription.
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self, site: Site) -> None:
        for listener in list(self._listeners):
            try:
                listener(site)
            except Exception:  # noqa: BLE001
                logger.exception("document change listener failed")

    def _read(self) -> Site | None:  # pragma: no cover - abstract
        raise NotImplementedError

    def _write(self, site: Site) -> None:  # pragma: no cover - abstract
        raise NotImplementedError


class MemoryDocumentStore(DocumentStore):
    """Keep the serialized document in memory."""

    def __init__(
        self, site: Site | None = None, *, default_factory: DefaultFactory = default_site
    ) -> None:
        super().__init__(default_factory=default_factory)
        self._payload: str | None = dumps_document(site) if site is not None else None
        self.saves = 0

    def _read(self) -> Site | None:
        if self._payload is None:
            return None
        return loads_document(self._payload)

    def _write(self, site: Site) -> None:
        self._payload = dumps_document(site)
        self.saves += 1


class FileDocumentStore(DocumentStore):
    """Store the document as a JSON or YAML file chosen by suffix."""

    def __init__(self, path: Path, *, default_factory: DefaultFactory = default_site) -> None:
        super().__init__(default_factory=default_factory)
        self.path = path

    def _read(self) -> Site | None:
        if not self.path.exists():
            return None
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            msg = f"Cannot read '{self.path}': {exc}"
            raise StoreError(msg) from exc
        return loads_document(text, fmt=format_for_path(self.path))

    def _write(self, site: Site) -> None:
        text = dumps_document(site, fmt=format_for_path(self.path))
        tmp_path = self.path.with_name(f".{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(text, encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as exc:
            msg = f"Cannot write '{self.path}': {exc}"
            raise StoreError(msg) from exc


class HttpDocumentStore(DocumentStore):
    """Load with ``GET`` and save with ``PUT`` against a JSON endpoint.

    A ``404`` on load means nothing has been stored yet.
    """

    def __init__(
        self,
        url: str,
        *,
        session: requests.Session | None = None,
        timeout: float = 10.0,
        token: str | None = None,
        default_factory: DefaultFactory = default_site,
    ) -> None:
        """Initialise the store.

        Parameters
        ----------
        url : str
            Endpoint holding the document.
        session : requests.Session, optional
            Preconfigured session to reuse connections. Defaults to
            :func:`retrying_session`.
        timeout : float, optional
            Per-request timeout in seconds. Defaults to ``10.0``.
        token : str, optional
            Bearer token added to every request when provided.
        default_factory : Callable[[], Site], optional
            Builds the fallback document.
        """
        super().__init__(default_factory=default_factory)
        self.url = url
        self._session = session or retrying_session()
        self.timeout = timeout
        self._headers = {
            "Accept": "application/json",
            "User-Agent": "sitecraft/0.1",
        }
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

    def _read(self) -> Site | None:
        try:
            response = self._session.get(
                self.url, headers=self._headers, timeout=self.timeout
            )
        except requests.RequestException as exc:
            msg = f"Failed to reach '{self.url}': {exc}"
            raise StoreError(msg) from exc
        if response.status_code == HTTPStatus.NOT_FOUND:
            return None
        if response.status_code >= HTTPStatus.BAD_REQUEST:
            msg = f"Loading '{self.url}' failed with status {response.status_code}"
            raise StoreError(msg)
        return loads_document(response.content)

    def _write(self, site: Site) -> None:
        headers = {**self._headers, "Content-Type": "application/json"}
        try:
            response = self._session.put(
                self.url,
                data=dumps_document(site).encode("utf-8"),
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            msg = f"Failed to reach '{self.url}': {exc}"
            raise StoreError(msg) from exc
        if response.status_code >= HTTPStatus.BAD_REQUEST:
            snippet = response.text[:200]
            msg = (
                f"Saving to '{self.url}' failed with status "
                f"{response.status_code}: {snippet}"
            )
            raise StoreError(msg)


def retrying_session() -> requests.Session:
    """Return a session that retries idempotent requests on transient errors.

    ``PUT`` is retried as well: each save replaces the whole document.
    """
    session = requests.Session()
    retry = Retry(
        total=5,
        read=5,
        connect=3,
        backoff_factor=0.5,
        status_forcelist=(500, 502, 503, 504),
        allowed_methods=("GET", "HEAD", "PUT"),
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


__all__ = [
    "ChangeListener",
    "DocumentStore",
    "FileDocumentStore",
    "HttpDocumentStore",
    "MemoryDocumentStore",
    "StoreError",
    "retrying_session",
]
