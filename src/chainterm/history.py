"""History log — previously executed input lines and ``!`` references.

The history log remembers what the user typed so it can be listed,
searched and repeated.  Entries are stored oldest-first and shown to the
user with 1-based numbers.

Recording rules (applied by ``add``):
    - Blank lines are ignored.
    - A line identical to the most recent entry is not stored again;
      non-adjacent duplicates are kept.
    - ``history ...`` commands and ``!`` back-references are never
      stored, so repeating a command never records the repetition.
    - The log keeps at most ``max_size`` entries; the oldest are
      dropped first.

Back-references (resolved by ``expand_command``):

    ======== =====================================================
    ``!!``   the last entry
    ``!n``   entry number *n* (1-based)
    ``!-n``  the *n*-th entry from the end (``!-1`` is the last)
    ``!abc`` the most recent entry starting with ``abc``
    ======== =====================================================
"""

from __future__ import annotations

import json
import re
from collections import deque
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum

DEFAULT_MAX_HISTORY = 1000

_INDEX_REF = re.compile(r"^!(\d+)$")
_FROM_END_REF = re.compile(r"^!-(\d+)$")
_PREFIX_REF = re.compile(r"^!(.+)$")


class ReferenceKind(StrEnum):
    """The syntactic form of a history back-reference."""

    LAST = "last"
    INDEX = "index"
    FROM_END = "from_end"
    PREFIX = "prefix"


@dataclass(frozen=True)
class HistoryExpansion:
    """A resolved back-reference: the repeated line and what was typed."""

    expanded: str
    original: str


@dataclass(frozen=True)
class HistoryMatch:
    """A search hit: the entry's 1-based index and its text."""

    index: int
    command: str


def classify_reference(text: str) -> ReferenceKind | None:
    """Return which back-reference form *text* uses, or None.

    Classification is purely syntactic; it says nothing about whether
    the reference resolves against the current log.
    """
    stripped = text.strip()
    if stripped == "!!":
        return ReferenceKind.LAST
    if _INDEX_REF.match(stripped):
        return ReferenceKind.INDEX
    if _FROM_END_REF.match(stripped):
        return ReferenceKind.FROM_END
    if _PREFIX_REF.match(stripped):
        return ReferenceKind.PREFIX
    return None


class HistoryLog:
    """Size-bounded, ordered log of executed input lines."""

    def __init__(self, *, max_size: int = DEFAULT_MAX_HISTORY) -> None:
        """Create an empty history log.

        Args:
            max_size: Maximum number of entries kept.

        """
        self._max_size = max_size
        self._entries: deque[str] = deque(maxlen=max_size)

    @property
    def max_size(self) -> int:
        """Return the maximum number of entries kept."""
        return self._max_size

    def add(self, command: str) -> None:
        """Record *command*, subject to the recording rules."""
        stripped = command.strip()
        if not stripped:
            return
        if self._entries and self._entries[-1] == stripped:
            return
        if stripped.startswith(("history", "!")):
            return
        self._entries.append(stripped)

    # -- Retrieval ---------------------------------------------------------

    def get_all(self) -> list[str]:
        """Return a copy of every entry, oldest first."""
        return list(self._entries)

    def get_recent(self, count: int) -> list[str]:
        """Return the last *count* entries, oldest first."""
        if count <= 0:
            return []
        return list(self._entries)[-count:]

    def get_by_index(self, index: int) -> str | None:
        """Return entry number *index* (1-based), or None if out of range."""
        if index < 1 or index > len(self._entries):
            return None
        return self._entries[index - 1]

    def get_last(self) -> str | None:
        """Return the most recent entry, or None if the log is empty."""
        return self._entries[-1] if self._entries else None

    def get_from_end(self, index: int) -> str | None:
        """Return the *index*-th entry from the end (1 = last), or None."""
        if index < 1 or index > len(self._entries):
            return None
        return self._entries[-index]

    def search(self, text: str) -> list[HistoryMatch]:
        """Return entries containing *text* (case-insensitive), oldest first."""
        needle = text.lower()
        return [
            HistoryMatch(index=i, command=command)
            for i, command in enumerate(self._entries, start=1)
            if needle in command.lower()
        ]

    def size(self) -> int:
        """Return the number of entries."""
        return len(self._entries)

    def __len__(self) -> int:
        """Return the number of entries."""
        return len(self._entries)

    def clear(self) -> None:
        """Remove every entry."""
        self._entries.clear()

    # -- Back-references ---------------------------------------------------

    def expand_command(self, text: str) -> HistoryExpansion | None:
        """Resolve a ``!`` back-reference against the log.

        Args:
            text: The input line (e.g. ``!!``, ``!3``, ``!-2``, ``!wallet``).

        Returns:
            The expansion, or None if *text* is not a back-reference or
            the reference does not resolve.

        """
        original = text.strip()
        kind = classify_reference(original)
        expanded: str | None = None

        if kind is ReferenceKind.LAST:
            expanded = self.get_last()
        elif kind is ReferenceKind.INDEX:
            expanded = self.get_by_index(int(original[1:]))
        elif kind is ReferenceKind.FROM_END:
            expanded = self.get_from_end(int(original[2:]))
        elif kind is ReferenceKind.PREFIX:
            prefix = original[1:]
            expanded = next(
                (entry for entry in reversed(self._entries) if entry.startswith(prefix)),
                None,
            )

        if expanded is None:
            return None
        return HistoryExpansion(expanded=expanded, original=original)

    # -- Persistence -------------------------------------------------------

    def export(self) -> str:
        """Serialize the log as JSON with ``history``, ``timestamp`` and ``size``."""
        data = {
            "history": list(self._entries),
            "timestamp": datetime.now(UTC).isoformat(),
            "size": len(self._entries),
        }
        return json.dumps(data, indent=2)

    def import_json(self, text: str) -> bool:
        """Replace the log with the entries of an exported JSON document.

        Only the most recent ``max_size`` entries are kept.  Non-string
        entries are dropped.

        Returns:
            True on success; False if the document is malformed (the log
            is left untouched).

        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            return False

        history = data.get("history") if isinstance(data, dict) else None
        if not isinstance(history, list):
            return False

        self._entries = deque(
            (entry for entry in history if isinstance(entry, str)), maxlen=self._max_size
        )
        return True
