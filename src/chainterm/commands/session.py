"""Session management commands: ``session`` and ``log``."""

from __future__ import annotations

from typing import TYPE_CHECKING

from chainterm.logging import LogLevel
from chainterm.router import CommandContext, CommandHandler, CommandResult

if TYPE_CHECKING:
    from chainterm.session import Session

_USAGE = """\
Terminal Session Commands:
  session info          - Show session statistics
  session export        - Export aliases and history as JSON
  session import <json> - Import aliases and history from JSON
  session reset         - Clear aliases, history and the session log"""

# How many log entries ``log`` shows when no count is given.
_DEFAULT_LOG_LINES = 50


class SessionCommands:
    """Commands that act on the session as a whole."""

    def __init__(self, session: Session) -> None:
        """Bind to *session*."""
        self._session = session

    def handlers(self) -> list[CommandHandler]:
        """Return the handler records for registration."""
        return [
            CommandHandler(
                name="session",
                description="Manage terminal session data (history, aliases)",
                execute=self._cmd_session,
                usage="session <info|export|import|reset>",
                aliases=("sess",),
            ),
            CommandHandler(
                name="log",
                description="Show the session log",
                execute=self._cmd_log,
                usage="log [debug|info|warning|error] [count]",
            ),
        ]

    def _cmd_session(self, context: CommandContext) -> CommandResult:
        """Dispatch to a session subcommand."""
        if not context.args:
            return CommandResult(output=f"{_USAGE}\n\n{self._info(context)}")

        sub = context.args[0].lower()
        if sub == "info":
            return CommandResult(output=self._info(context))
        if sub == "export":
            return CommandResult(output=f"Session Export:\n\n{self._session.export()}")
        if sub == "import":
            return self._import(" ".join(context.args[1:]))
        if sub == "reset":
            self._session.reset()
            return CommandResult(output="Session reset to defaults.")
        return CommandResult(output=f"Unknown session command: {sub}\n\n{_USAGE}", success=False)

    def _info(self, context: CommandContext) -> str:
        stats = self._session.stats()
        config = self._session.config
        pairs = [
            ("Command History", f"{stats.history_size}/{config.max_history} commands"),
            ("Aliases", f"{stats.alias_count}/{config.max_aliases} shortcuts"),
            ("Commands", f"{stats.command_count} registered"),
            ("Log Entries", str(stats.log_count)),
        ]
        return "Current Session Stats:\n" + context.formatter.key_values(pairs, indent=2)

    def _import(self, text: str) -> CommandResult:
        if not text:
            return CommandResult(output="Usage: session import <json_data>", success=False)
        result = self._session.import_json(text)
        if result.aliases_imported == 0 and not result.history_imported:
            errors = "\n".join(f"  - {err}" for err in result.errors) or "  - nothing to import"
            return CommandResult(
                output=f"Failed to import session.\n\nErrors:\n{errors}", success=False
            )
        lines = [f"Imported {result.aliases_imported} aliases."]
        if result.history_imported:
            lines.append(f"Imported history ({self._session.history.size()} commands).")
        lines.extend(f"Warning: {err}" for err in result.errors)
        return CommandResult(output="\n".join(lines))

    def _cmd_log(self, context: CommandContext) -> CommandResult:
        """Show recent session log entries, optionally filtered by level."""
        min_level: LogLevel | None = None
        count = _DEFAULT_LOG_LINES
        for arg in context.args:
            if arg.isdigit():
                count = int(arg)
            elif arg.upper() in LogLevel.__members__:
                min_level = LogLevel[arg.upper()]
            else:
                return CommandResult(
                    output=f"Unknown log level: {arg}. Use debug, info, warning or error.",
                    success=False,
                )

        entries = self._session.logger.filter(min_level=min_level)[-count:] if count else []
        if not entries:
            return CommandResult(output="No log entries.")
        return CommandResult(output="\n".join(str(e) for e in entries))
