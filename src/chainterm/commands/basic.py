"""Basic terminal commands: help, clear, echo, date, whoami, pwd."""

from __future__ import annotations

from datetime import UTC, datetime
from email.utils import format_datetime
from typing import TYPE_CHECKING

from chainterm.router import CommandContext, CommandHandler, CommandResult

if TYPE_CHECKING:
    from chainterm.router import CommandRouter

# Output formats accepted by ``date``.
_DATE_FORMATS = ("iso", "utc", "local", "time", "date")


class BasicCommands:
    """Commands that only need the router's registry (or nothing at all)."""

    def __init__(self, router: CommandRouter) -> None:
        """Attach to *router* so ``help`` can list its commands."""
        self._router = router

    def handlers(self) -> list[CommandHandler]:
        """Return the handler records for registration."""
        return [
            CommandHandler(
                name="help",
                description="Show available commands and their descriptions",
                execute=self._cmd_help,
                usage="help [command]",
                aliases=("h", "?"),
            ),
            CommandHandler(
                name="clear",
                description="Clear the terminal screen",
                execute=self._cmd_clear,
                usage="clear",
                aliases=("cls",),
            ),
            CommandHandler(
                name="echo",
                description="Display a line of text",
                execute=self._cmd_echo,
                usage="echo [text...]",
            ),
            CommandHandler(
                name="date",
                description="Display the current date and time",
                execute=self._cmd_date,
                usage="date [iso|utc|local|time|date]",
            ),
            CommandHandler(
                name="whoami",
                description="Display the current user",
                execute=self._cmd_whoami,
                usage="whoami",
            ),
            CommandHandler(
                name="pwd",
                description="Print the current working directory",
                execute=self._cmd_pwd,
                usage="pwd",
            ),
        ]

    def _cmd_help(self, context: CommandContext) -> CommandResult:
        """List commands, or describe one command in detail."""
        if context.args:
            name = context.args[0].lower()
            handler = self._router.lookup(name)
            if handler is None:
                return CommandResult(output=f"Command not found: {name}", success=False)
            lines = [f"{handler.name} - {handler.description}"]
            if handler.usage:
                lines.append(f"Usage: {handler.usage}")
            if handler.aliases:
                lines.append(f"Aliases: {', '.join(handler.aliases)}")
            return CommandResult(output="\n".join(lines))

        commands = self._router.commands
        width = max(len(cmd.name) for cmd in commands) + 2
        listing = "\n".join(f"  {cmd.name:<{width}} {cmd.description}" for cmd in commands)
        return CommandResult(
            output=(
                f"Available commands:\n{listing}\n\n"
                'Type "help <command>" for detailed information about a specific command.'
            )
        )

    @staticmethod
    def _cmd_clear(context: CommandContext) -> CommandResult:
        """Ask the hosting terminal to clear its screen."""
        if context.services.terminal is not None:
            context.services.terminal.clear()
        return CommandResult()

    @staticmethod
    def _cmd_echo(context: CommandContext) -> CommandResult:
        r"""Join the arguments with spaces; a literal ``\n`` becomes a newline."""
        return CommandResult(output=" ".join(context.args).replace("\\n", "\n"))

    @staticmethod
    def _cmd_date(context: CommandContext) -> CommandResult:
        """Show the current time in the requested format."""
        now = datetime.now(UTC)
        local = now.astimezone()
        fmt = context.args[0].lower() if context.args else "local"

        if fmt == "iso":
            return CommandResult(output=now.isoformat(timespec="milliseconds"))
        if fmt == "utc":
            return CommandResult(output=format_datetime(now, usegmt=True))
        if fmt == "local":
            return CommandResult(output=local.strftime("%Y-%m-%d %H:%M:%S"))
        if fmt == "time":
            return CommandResult(output=local.strftime("%H:%M:%S"))
        if fmt == "date":
            return CommandResult(output=local.strftime("%Y-%m-%d"))
        return CommandResult(
            output=f"Unknown format: {fmt}. Available formats: {', '.join(_DATE_FORMATS)}",
            success=False,
        )

    @staticmethod
    def _cmd_whoami(_context: CommandContext) -> CommandResult:
        """Show the current user."""
        return CommandResult(output="guest")

    @staticmethod
    def _cmd_pwd(_context: CommandContext) -> CommandResult:
        """Show the working directory."""
        return CommandResult(output="/home/user")
