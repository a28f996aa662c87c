"""The ``alias`` and ``unalias`` commands.

These are the only way a user changes the alias table.  Both commands
go through the table's public operations, so every rule (name format,
reserved names, capacity, cycle rejection) is enforced in one place;
the commands just explain failures in words.

Two definition styles are accepted::

    alias bal wallet balance
    alias greet="call 0xABC.greet()"
"""

from __future__ import annotations

from chainterm.aliases import AliasTable
from chainterm.router import CommandContext, CommandHandler, CommandResult

_OVERVIEW = """\
Alias Commands:
  alias <name> <command>  - Create an alias
  alias <name>=<command>  - Create an alias
  alias list              - List all aliases
  alias search <text>     - Search aliases
  alias clear             - Clear all aliases
  alias export            - Export aliases as JSON
  alias import <json>     - Import aliases from JSON

Examples:
  alias greet call 0xABC.greet()
  alias bal wallet balance"""

_HELP = """\
Alias Command Help:

OVERVIEW:
  Aliases create shortcuts for frequently used commands.
  They are saved with your session and restored next time.

BASIC USAGE:
  alias <name> <command>  - Create an alias
  alias                   - List all aliases
  unalias <name>          - Remove an alias

MANAGEMENT:
  alias list              - List all aliases with numbers
  alias search <text>     - Search aliases by name or command
  alias clear             - Remove all aliases
  alias export            - Export aliases as JSON
  alias import <json>     - Import aliases from JSON

ARGUMENT PASSING:
  alias transfer call 0xToken.transfer
  transfer 0x123 1000     # runs: call 0xToken.transfer 0x123 1000

RULES:
  - Names start with a letter or underscore
  - Names contain only letters, digits and underscores
  - At most {max_length} characters per name
  - At most {max_aliases} aliases
  - Reserved command names cannot be aliased
  - Aliases that would expand into themselves are rejected"""

_USAGE = """\
Usage: alias <name> <command>

Examples:
  alias greet call 0xABC.greet()
  alias bal wallet balance

Use "alias help" for detailed information."""


class AliasCommands:
    """The ``alias`` and ``unalias`` commands bound to one alias table."""

    def __init__(self, aliases: AliasTable, *, max_aliases: int, max_name_length: int) -> None:
        """Bind to *aliases*; the limits are only used in messages."""
        self._aliases = aliases
        self._max_aliases = max_aliases
        self._max_name_length = max_name_length

    def handlers(self) -> list[CommandHandler]:
        """Return the handler records for registration."""
        return [
            CommandHandler(
                name="alias",
                description="Create and manage command aliases",
                execute=self._cmd_alias,
                usage="alias [name] [command] | alias list | alias clear",
            ),
            CommandHandler(
                name="unalias",
                description="Remove command aliases",
                execute=self._cmd_unalias,
                usage="unalias <name> | unalias -a",
            ),
        ]

    # -- alias -------------------------------------------------------------

    def _cmd_alias(self, context: CommandContext) -> CommandResult:
        """Dispatch to an alias subcommand, or define an alias."""
        args = context.args
        if not args:
            return self._list(context, numbered=False)

        if "=" in args[0]:
            name, _, command = args[0].partition("=")
            command = " ".join([command, *args[1:]]).strip()
            return self._define(name, command)

        sub = args[0].lower()
        rest = " ".join(args[1:])
        if sub == "list":
            return self._list(context, numbered=True)
        if sub == "search":
            return self._search(context, rest)
        if sub == "clear":
            count = self._aliases.size()
            self._aliases.clear()
            return CommandResult(output=f"Cleared {count} aliases successfully.")
        if sub == "export":
            return CommandResult(
                output=(
                    f"Alias Export Data:\n\n{self._aliases.export()}\n\n"
                    'Save this data to import later with "alias import <json>"'
                )
            )
        if sub == "import":
            return self._import(rest)
        if sub == "help":
            return CommandResult(
                output=_HELP.format(
                    max_length=self._max_name_length, max_aliases=self._max_aliases
                )
            )
        if len(args) < 2:  # noqa: PLR2004
            return CommandResult(output=_USAGE, success=False)
        return self._define(args[0], rest)

    def _list(self, context: CommandContext, *, numbered: bool) -> CommandResult:
        """Show every alias as a table."""
        entries = self._aliases.get_all()
        if not entries:
            return CommandResult(output=f"No aliases defined.\n\n{_OVERVIEW}")

        if numbered:
            headers = ["#", "Name", "Command"]
            rows = [[str(i), e.name, e.command] for i, e in enumerate(entries, start=1)]
            title = f"All Aliases ({len(entries)}/{self._max_aliases}):"
        else:
            headers = ["Name", "Command"]
            rows = [[e.name, e.command] for e in entries]
            title = f"Current Aliases ({len(entries)}):"
        table = context.formatter.table(headers, rows)
        return CommandResult(
            output=(
                f"{title}\n{table}\n\n"
                'Use "alias <name> <command>" to create new aliases\n'
                'Use "unalias <name>" to remove aliases'
            )
        )

    def _search(self, context: CommandContext, text: str) -> CommandResult:
        """Show aliases whose name or command contains *text*."""
        if not text:
            return CommandResult(
                output="Usage: alias search <text>\n\nExamples:\n  alias search wallet",
                success=False,
            )
        results = self._aliases.search(text)
        if not results:
            return CommandResult(output=f'No aliases found containing: "{text}"')
        rows = [[str(i), e.name, e.command] for i, e in enumerate(results, start=1)]
        table = context.formatter.table(["#", "Name", "Command"], rows)
        return CommandResult(
            output=f'Search results for "{text}" ({len(results)} found):\n{table}'
        )

    def _import(self, text: str) -> CommandResult:
        """Merge aliases from an exported JSON document."""
        if not text:
            return CommandResult(
                output=(
                    "Usage: alias import <json_data>\n\n"
                    "Example:\n"
                    """  alias import '{"aliases":{"greet":"call 0xABC.greet()"}}'"""
                ),
                success=False,
            )
        result = self._aliases.import_json(text)
        errors = "\n".join(f"  - {err}" for err in result.errors)
        if not result.success:
            return CommandResult(
                output=f"Failed to import aliases.\n\nErrors:\n{errors}", success=False
            )

        output = f"Successfully imported {result.imported} aliases!"
        if result.errors:
            output += f"\n\nWarnings:\n{errors}"
        output += f"\n\nTotal aliases: {self._aliases.size()}"
        return CommandResult(output=output)

    def _define(self, name: str, command: str) -> CommandResult:
        """Create or update ``name → command``, explaining any refusal."""
        if not command:
            return CommandResult(output=_USAGE, success=False)

        reason = self._aliases.validate_name(name)
        if reason is not None:
            return CommandResult(
                output=f'Invalid alias name "{name}": {reason}.', success=False
            )
        if self._aliases.would_create_cycle(name, command):
            return CommandResult(
                output=(
                    f'Cannot create recursive alias: "{name}"\n\n'
                    "An alias cannot expand back into itself, directly or through "
                    "other aliases."
                ),
                success=False,
            )

        existed = self._aliases.has(name)
        if not self._aliases.set(name, command):
            return CommandResult(
                output=(
                    f"Maximum aliases limit reached ({self._max_aliases}).\n\n"
                    "Remove some aliases first with unalias <name> or alias clear."
                ),
                success=False,
            )

        action = "Updated" if existed else "Created"
        return CommandResult(
            output=(
                f'{action} alias "{name}"!\n\n'
                f"Alias: {name}\n"
                f"Command: {command}\n\n"
                f"Total aliases: {self._aliases.size()}/{self._max_aliases}"
            )
        )

    # -- unalias -----------------------------------------------------------

    def _cmd_unalias(self, context: CommandContext) -> CommandResult:
        """Remove one alias, or all of them with ``-a``."""
        if not context.args:
            return CommandResult(
                output=(
                    "Usage: unalias <alias_name>\n\n"
                    "Examples:\n"
                    '  unalias greet  - Remove the "greet" alias\n'
                    "  unalias -a     - Remove all aliases"
                ),
                success=False,
            )

        name = context.args[0]
        if name in ("-a", "--all"):
            count = self._aliases.size()
            if count == 0:
                return CommandResult(output="No aliases to remove.")
            self._aliases.clear()
            return CommandResult(output=f"Removed all {count} aliases successfully.")

        command = self._aliases.get(name)
        if command is None:
            output = f'Alias "{name}" does not exist.'
            suggestions = self._aliases.suggestions(name[:3])[:5]
            if suggestions:
                output += "\n\nDid you mean one of these?\n" + "\n".join(
                    f"  - {s}" for s in suggestions
                )
            return CommandResult(output=output, success=False)

        self._aliases.remove(name)
        return CommandResult(
            output=(
                f'Removed alias "{name}" successfully!\n\n'
                f"Removed: {name} → {command}\n"
                f"Remaining aliases: {self._aliases.size()}"
            )
        )
