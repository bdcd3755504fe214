"""Linear undo/redo over document snapshots.

:class:`HistoryManager` keeps the snapshots ``[s0, s1, ..., sn]`` and a cursor
``c``. Recording after an undo truncates the sequence to ``[s0..sc]`` before
appending, so the abandoned redo branch becomes unreachable. Snapshots are
deep copies on the way in and on the way out; callers can freely mutate the
documents they receive.

Every record, undo and redo hands the snapshot it lands on to the optional
persistence collaborator. Save failures are logged and never reach the
caller: the in-memory history is the source of truth.
"""

from __future__ import annotations

import copy
import typing as typ

from sitecraft.logging import get_logger

if typ.TYPE_CHECKING:
    from sitecraft.document import Site

logger = get_logger("history")


class SnapshotSink(typ.Protocol):
    """Anything that accepts the current document for persistence."""

    def save(self, site: Site) -> None: ...


class HistoryManager:
    """Cursor-addressed sequence of document snapshots."""

    def __init__(
        self,
        initial: Site,
        *,
        store: SnapshotSink | None = None,
        limit: int | None = None,
    ) -> None:
        """Start a history whose first snapshot is ``initial``.

        Parameters
        ----------
        initial : Site
            Document at session start (``s0``).
        store : SnapshotSink, optional
            Persistence collaborator that receives the current snapshot after
            every record, undo and redo.
        limit : int, optional
            Maximum number of snapshots to retain. ``None`` (the default)
            keeps every snapshot for the life of the session; otherwise the
            oldest snapshots are evicted first.

        Raises
        ------
        ValueError
            If ``limit`` is smaller than 1.
        """
        if limit is not None and limit < 1:
            msg = f"History limit must be at least 1, got {limit}."
            raise ValueError(msg)
        self._snapshots: list[Site] = [copy.deepcopy(initial)]
        self._cursor = 0
        self._store = store
        self._limit = limit

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def limit(self) -> int | None:
        return self._limit

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._snapshots) - 1

    @property
    def current(self) -> Site:
        """Return an independent copy of the snapshot under the cursor."""
        return copy.deepcopy(self._snapshots[self._cursor])

    def __len__(self) -> int:
        return len(self._snapshots)

    def record(self, site: Site) -> Site:
        """Truncate any redo branch, append ``site`` and move the cursor to it."""
        del self._snapshots[self._cursor + 1 :]
        self._snapshots.append(copy.deepcopy(site))
        self._cursor = len(self._snapshots) - 1
        self._evict()
        logger.debug("recorded snapshot %d of %d", self._cursor, len(self._snapshots))
        return self._land()

    def undo(self) -> Site:
        """Step the cursor back one snapshot; a no-op at the first snapshot."""
        if not self.can_undo:
            return self.current
        self._cursor -= 1
        return self._land()

    def redo(self) -> Site:
        """Step the cursor forward one snapshot; a no-op at the last snapshot."""
        if not self.can_redo:
            return self.current
        self._cursor += 1
        return self._land()

    def reset(self, site: Site) -> Site:
        """Discard every snapshot and start over from ``site``."""
        self._snapshots = [copy.deepcopy(site)]
        self._cursor = 0
        return self._land()

    def _evict(self) -> None:
        if self._limit is None:
            return
        overflow = len(self._snapshots) - self._limit
        if overflow > 0:
            del self._snapshots[:overflow]
            self._cursor -= overflow

    def _land(self) -> Site:
        current = self.current
        self._persist(current)
        return current

    def _persist(self, site: Site) -> None:
        if self._store is None:
            return
        try:
            self._store.save(site)
        except Exception:  # noqa: BLE001
            logger.exception("saving the current document failed")


__all__ = ["HistoryManager", "SnapshotSink"]
