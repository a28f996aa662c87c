"""Interactive REPL (Read-Eval-Print Loop) for the terminal.

The REPL is the plain-console host for a session:

    1. **Read** — display a prompt and read user input.
    2. **Eval** — pass the line to ``session.dispatch()``.
    3. **Print** — display the result.
    4. **Loop** — repeat until ``exit`` or end of input.

Each line is dispatched to completion before the next prompt appears,
so the session never sees two dispatches at once.

The helper functions (``build_prompt``, ``format_banner``) are pure
and testable.  The ``run()`` function is the I/O entrypoint.
"""

from __future__ import annotations

import asyncio
import readline

from chainterm.completer import Completer
from chainterm.config import config_from_env
from chainterm.router import HostServices
from chainterm.session import Session

_BANNER_WIDTH = 38

# Words that end the REPL instead of being dispatched.
EXIT_WORDS = frozenset({"exit", "quit"})


class ConsoleTerminal:
    """Screen operations for an ANSI console."""

    def clear(self) -> None:
        """Clear the screen and home the cursor."""
        print("\033[2J\033[H", end="")  # noqa: T201


def format_banner(session: Session) -> str:
    """Format the startup banner for *session*."""
    border = "=" * _BANNER_WIDTH
    stats = session.stats()
    return (
        f"\n  {border}\n            chainterm v0.1.0\n     A blockchain command terminal\n"
        f"  {border}\n\n"
        f"  {stats.command_count} commands, {stats.alias_count} aliases, "
        f"{stats.history_size} history entries\n"
        "\nType 'help' for commands, 'exit' to quit.\n"
    )


def build_prompt(session: Session) -> str:
    """Build the prompt string, showing the next history number."""
    return f"[{session.history.size() + 1}] guest@chainterm $ "


def run() -> None:
    """Create a session and run the interactive REPL.

    This is the ``chainterm`` console entry point.  It handles:
    - Session creation from ``CHAINTERM_CONFIG``.
    - Tab completion via readline.
    - Graceful handling of Ctrl+C and Ctrl+D.
    """
    session = Session(config=config_from_env())
    services = HostServices(terminal=ConsoleTerminal())

    completer = Completer(session)
    readline.set_completer(completer.complete)
    readline.set_completer_delims(" \t")
    readline.parse_and_bind("tab: complete")

    print(format_banner(session))  # noqa: T201

    try:
        while True:
            try:
                line = input(build_prompt(session))
            except EOFError:
                # Ctrl+D ends input
                print()  # noqa: T201
                break

            if line.strip().lower() in EXIT_WORDS:
                break

            result = asyncio.run(session.dispatch(line, services))
            if result.output:
                print(result.output)  # noqa: T201

    except KeyboardInterrupt:
        # Ctrl+C
        print("\nInterrupted.")  # noqa: T201

    finally:
        session.save()
        print("Session saved.")  # noqa: T201
