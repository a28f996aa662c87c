"""Context-aware tab completer for the terminal.

The completer separates **what to complete** (pure logic, fully
testable) from **how to wire it** (readline integration in the REPL).

The ``complete(text, state)`` method is the readline callback.  It
delegates to ``completions(text, line)`` which analyses the input
context and returns a list of candidate strings.
"""

from __future__ import annotations

import readline
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chainterm.session import Session

# Commands that accept subcommands as a second word.
_SUBCOMMANDS: dict[str, list[str]] = {
    "alias": ["list", "search", "clear", "export", "import", "help"],
    "history": ["clear", "search", "export", "import", "help"],
    "session": ["info", "export", "import", "reset"],
    "date": ["iso", "utc", "local", "time", "date"],
    "log": ["debug", "info", "warning", "error"],
}


class Completer:
    """Tab completer over a session's commands, aliases and history."""

    def __init__(self, session: Session) -> None:
        """Create a completer attached to a session.

        Args:
            session: The session whose router and alias table supply
                completion candidates.

        """
        self._session = session

    def complete(self, text: str, state: int) -> str | None:
        """Readline callback — return the *state*-th candidate for *text*."""
        line = readline.get_line_buffer()
        candidates = self.completions(text, line)
        if state < len(candidates):
            return candidates[state]
        return None

    def completions(self, text: str, line: str) -> list[str]:
        """Return completion candidates based on context.

        Args:
            text: The partial word under the cursor.
            line: The full input line so far.

        Returns:
            Sorted list of matching candidates.

        """
        words = line.lstrip().split()

        # No words yet, or still typing the first word → command completion
        if not words or (len(words) == 1 and not line.endswith(" ")):
            return self._session.get_suggestions(text)

        return self._complete_argument(words, text, line)

    def _complete_argument(self, words: list[str], text: str, line: str) -> list[str]:
        """Complete the second word based on the command in front of it."""
        router = self._session.router
        handler = router.lookup(words[0])
        if handler is None:
            return []
        cmd = handler.name

        # Only the word directly after the command is completed.
        typing_second = len(words) == 1 or (
            len(words) == 2 and not line.endswith(" ")  # noqa: PLR2004
        )
        if not typing_second:
            return []

        if cmd == "unalias":
            return self._session.aliases.suggestions(text)
        if cmd == "help":
            return [name for name in router.command_names if name.startswith(text.lower())]
        if cmd in _SUBCOMMANDS:
            return sorted(sub for sub in _SUBCOMMANDS[cmd] if sub.startswith(text.lower()))
        return []
