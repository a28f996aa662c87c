"""The ``history`` command — list, search, clear, export and import history.

Repetition itself (``!!``, ``!n``, ``!-n``, ``!text``) is handled by the
router before any command runs; this command only inspects and manages
the log.
"""

from __future__ import annotations

from chainterm.history import HistoryLog
from chainterm.router import CommandContext, CommandHandler, CommandResult

_HELP = """\
Command History Help:

BASIC USAGE:
  history               - Show the most recent commands
  history <count>       - Show the last N commands
  history clear         - Clear all history
  history search <text> - Search for commands
  history export        - Export history as JSON
  history import <json> - Import history from JSON

COMMAND REPETITION:
  !!         - Repeat last command
  !<number>  - Repeat command by index (e.g. !15)
  !-<number> - Repeat command from end (e.g. !-2 for 2nd last)
  !<text>    - Repeat last command starting with text

NOTES:
  - Consecutive duplicates are stored once
  - history commands and ! references are never stored
  - Up to {max_size} commands are kept"""

_USAGE = """\
Available commands:
  history [count]       - Show recent commands
  history clear         - Clear history
  history search <text> - Search commands
  history export        - Export history
  history import <json> - Import history
  history help          - Show detailed help"""


class HistoryCommands:
    """The ``history`` command, bound to one session's history log."""

    def __init__(self, history: HistoryLog, *, page_size: int = 20) -> None:
        """Bind to *history*; a bare ``history`` shows *page_size* entries."""
        self._history = history
        self._page_size = page_size

    def handlers(self) -> list[CommandHandler]:
        """Return the handler records for registration."""
        return [
            CommandHandler(
                name="history",
                description="Show command history and support command repetition",
                execute=self._cmd_history,
                usage="history [count|clear|search <text>|export|import <json>|help]",
                aliases=("hist",),
            ),
        ]

    def _cmd_history(self, context: CommandContext) -> CommandResult:
        """Dispatch to a history subcommand."""
        args = context.args
        if not args:
            return self._show_recent(context, self._page_size, page=True)

        sub = args[0].lower()
        rest = " ".join(args[1:])
        if sub == "clear":
            self._history.clear()
            return CommandResult(output="Command history cleared successfully.")
        if sub == "search":
            return self._search(rest)
        if sub == "export":
            return CommandResult(
                output=(
                    f"Command History Export:\n\n{self._history.export()}\n\n"
                    'Save this data to import later with "history import <json>"'
                )
            )
        if sub == "import":
            return self._import(rest)
        if sub == "help":
            return CommandResult(output=_HELP.format(max_size=self._history.max_size))
        if sub.isdigit() and int(sub) > 0:
            return self._show_recent(context, int(sub), page=False)
        return CommandResult(output=f"Unknown history command: {sub}\n\n{_USAGE}", success=False)

    def _show_recent(self, context: CommandContext, count: int, *, page: bool) -> CommandResult:
        """List the last *count* entries with their 1-based numbers."""
        recent = self._history.get_recent(count)
        total = self._history.size()
        if not recent:
            return CommandResult(
                output=(
                    "No command history available.\n\n"
                    "Use !! to repeat the last command, or !<number> to repeat by index."
                )
            )

        listing = context.formatter.numbered(recent, start=total - len(recent) + 1)
        if page:
            header = f"Command History (showing last {len(recent)} of {total} commands):"
            footer = (
                "Quick Commands:\n"
                "  !!        - Repeat last command\n"
                f"  !{total:<8}- Repeat command #{total}\n"
                '  !wallet   - Repeat last command starting with "wallet"'
            )
        else:
            header = f"Command History (last {len(recent)} commands):"
            footer = f"Total commands in history: {total}"
        return CommandResult(output=f"{header}\n\n{listing}\n\n{footer}")

    def _search(self, text: str) -> CommandResult:
        """List entries containing *text*."""
        if not text:
            return CommandResult(
                output="Usage: history search <text>\n\nExamples:\n  history search wallet",
                success=False,
            )
        matches = self._history.search(text)
        if not matches:
            return CommandResult(output=f'No commands found containing: "{text}"')
        listing = "\n".join(f"{m.index:>4}  {m.command}" for m in matches)
        return CommandResult(
            output=(
                f'Search results for "{text}" ({len(matches)} found):\n\n{listing}\n\n'
                "Use !<number> to repeat any of these commands"
            )
        )

    def _import(self, text: str) -> CommandResult:
        """Replace the log with an exported JSON document."""
        if not text:
            return CommandResult(
                output=(
                    "Usage: history import <json_data>\n\n"
                    "Example:\n"
                    """  history import '{"history":["command1","command2"]}'"""
                ),
                success=False,
            )
        if not self._history.import_json(text):
            return CommandResult(
                output=(
                    "Failed to import history. Invalid JSON format.\n\n"
                    'Expected format: {"history": ["command1", "command2", ...]}'
                ),
                success=False,
            )
        return CommandResult(
            output=(
                "Command history imported successfully.\n"
                f"Total commands: {self._history.size()}"
            )
        )

