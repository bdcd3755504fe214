"""Single-entry clipboard for section copy, cut and paste.

The clipboard stores at most one section payload together with the mode it
was captured in. It is deliberately independent of the undo history: undoing
past a cut does not bring back whatever the clipboard held before it.
"""

from __future__ import annotations

import copy
import dataclasses as dc
import enum
import typing as typ

if typ.TYPE_CHECKING:
    from sitecraft.document import Section


class ClipboardMode(enum.StrEnum):
    """How the clipboard entry was captured."""

    COPY = "copy"
    CUT = "cut"


@dc.dataclass(slots=True, frozen=True)
class ClipboardEntry:
    """A captured section and its capture mode."""

    section: Section
    mode: ClipboardMode


class Clipboard:
    """Hold zero or one section payload."""

    def __init__(self) -> None:
        self._entry: ClipboardEntry | None = None

    @property
    def is_empty(self) -> bool:
        return self._entry is None

    @property
    def mode(self) -> ClipboardMode | None:
        return self._entry.mode if self._entry else None

    def peek(self) -> ClipboardEntry | None:
        """Return a copy of the current entry without consuming it."""
        if self._entry is None:
            return None
        return ClipboardEntry(copy.deepcopy(self._entry.section), self._entry.mode)

    def copy(self, section: Section) -> None:
        """Store a deep copy of ``section`` in copy mode, replacing any entry."""
        self._entry = ClipboardEntry(copy.deepcopy(section), ClipboardMode.COPY)

    def cut(self, section: Section) -> None:
        """Store a deep copy of ``section`` in cut mode, replacing any entry."""
        self._entry = ClipboardEntry(copy.deepcopy(section), ClipboardMode.CUT)

    def pasted(self) -> None:
        """Record a successful paste; a cut entry is consumed by it."""
        if self._entry is not None and self._entry.mode is ClipboardMode.CUT:
            self._entry = None

    def clear(self) -> None:
        self._entry = None


__all__ = ["Clipboard", "ClipboardEntry", "ClipboardMode"]
