"""Output formatting — the text-layout capability offered to handlers.

Handlers return plain strings; how those strings are laid out is a
shared concern.  ``TextFormatter`` is the default formatter the session
hands to every handler through its context.  A host with richer output
(colour, HTML) can supply its own object with the same methods.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

_INDEX_WIDTH = 4


class Formatter(Protocol):
    """The formatting methods a handler may rely on."""

    def table(self, headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
        """Lay out *rows* under *headers* as aligned columns."""
        ...

    def key_values(self, pairs: Sequence[tuple[str, str]], *, indent: int = 0) -> str:
        """Lay out ``key: value`` lines with aligned values."""
        ...

    def numbered(self, items: Sequence[str], *, start: int = 1) -> str:
        """Lay out *items* with right-aligned line numbers."""
        ...


class TextFormatter:
    """Plain-text formatter using space-padded columns."""

    def table(self, headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
        """Lay out *rows* under *headers* as aligned columns.

        Column widths fit the widest cell; a dashed rule separates the
        header from the body.
        """
        widths = [len(h) for h in headers]
        for row in rows:
            for i, cell in enumerate(row):
                widths[i] = max(widths[i], len(cell))

        def _line(cells: Sequence[str]) -> str:
            return "  ".join(cell.ljust(widths[i]) for i, cell in enumerate(cells)).rstrip()

        lines = [_line(headers), "  ".join("-" * w for w in widths)]
        lines.extend(_line(row) for row in rows)
        return "\n".join(lines)

    def key_values(self, pairs: Sequence[tuple[str, str]], *, indent: int = 0) -> str:
        """Lay out ``key: value`` lines with aligned values."""
        if not pairs:
            return ""
        width = max(len(key) for key, _value in pairs) + 1
        pad = " " * indent
        return "\n".join(f"{pad}{key + ':':<{width}} {value}" for key, value in pairs)

    def numbered(self, items: Sequence[str], *, start: int = 1) -> str:
        """Lay out *items* with right-aligned line numbers (``   1  item``)."""
        return "\n".join(
            f"{index:>{_INDEX_WIDTH}}  {item}" for index, item in enumerate(items, start=start)
        )
