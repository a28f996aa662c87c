"""Command router — the dispatcher at the heart of the interpreter.

The router turns one raw input line into one ``CommandResult``.  Each
call to ``dispatch`` walks the same pipeline:

    1. **Trim** — a blank line succeeds with no output and no side effects.
    2. **Alias expansion** — the first word is looked up in the alias table.
    3. **History expansion** — ``!!``, ``!n``, ``!-n`` and ``!text`` are
       resolved against the history log.  A reference that does not
       resolve fails here; it never falls through to a command lookup.
    4. **Tokenize and resolve** — the first token, lower-cased, is looked
       up among built-in aliases and then registered command names.
    5. **Execute** — the handler runs with the remaining tokens.  Any
       exception it raises is caught and turned into a failed result.
    6. **Record** — the line as the user typed it (not the expanded form)
       is appended to history, unless the command was not found.
    7. **Annotate** — notes such as ``Alias expanded: bal → wallet
       balance`` are prepended to the output.

Design choices:
    - **Results, not exceptions.**  Handlers report failure by returning
      ``CommandResult(success=False)``.  The router's single
      ``try``/``except`` around handler execution is a safety net.
    - **Handlers may be sync or async.**  Handlers that talk to a
      network await inside ``execute``; everything else in the pipeline
      is synchronous, so expansion and table updates never interleave.
    - **No internal locking.**  Callers serialize ``dispatch`` calls;
      the web app and the REPL each run one dispatch at a time.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Protocol, TypeAlias

from chainterm.aliases import AliasTable
from chainterm.formatting import Formatter, TextFormatter
from chainterm.history import HistoryLog, ReferenceKind, classify_reference
from chainterm.logging import Logger
from chainterm.tokenizer import tokenize

_SOURCE = "router"
_DEFAULT_SUGGESTION_DEPTH = 10


class ErrorKind(StrEnum):
    """Why a dispatch failed at the interpreter level."""

    NO_HISTORY = "NO_HISTORY"
    INVALID_HISTORY_INDEX = "INVALID_HISTORY_INDEX"
    NO_MATCHING_HISTORY = "NO_MATCHING_HISTORY"
    COMMAND_NOT_FOUND = "COMMAND_NOT_FOUND"
    EXECUTION_ERROR = "EXECUTION_ERROR"


@dataclass(frozen=True)
class CommandResult:
    """The outcome of running one command.

    Attributes:
        output: Text to show the user (may be empty).
        success: False if the command failed.
        error: The interpreter-level error kind, if any.  Handlers
            reporting their own failures usually leave this unset.

    """

    output: str = ""
    success: bool = True
    error: ErrorKind | None = None


class TerminalHost(Protocol):
    """Screen operations a hosting UI can offer to handlers."""

    def clear(self) -> None:
        """Clear the visible terminal output."""
        ...


@dataclass(frozen=True)
class HostServices:
    """Optional capabilities the host passes through to every handler.

    Attributes:
        formatter: Lays out tables and lists.
        terminal: The hosting screen, when there is one.

    """

    formatter: Formatter = field(default_factory=TextFormatter)
    terminal: TerminalHost | None = None


@dataclass(frozen=True)
class CommandContext:
    """Everything a handler receives for one invocation.

    Attributes:
        args: Positional arguments (tokens after the command name).
        raw_input: The line that was tokenized, after expansion.
        history: Read-only snapshot of the history log, oldest first.
        services: Host-provided capabilities.

    """

    args: list[str]
    raw_input: str
    history: tuple[str, ...] = ()
    services: HostServices = field(default_factory=HostServices)

    @property
    def formatter(self) -> Formatter:
        """Return the host's output formatter."""
        return self.services.formatter


# A handler body: takes a context, returns a result (directly or awaited).
Execute: TypeAlias = Callable[[CommandContext], CommandResult | Awaitable[CommandResult]]


@dataclass(frozen=True)
class CommandHandler:
    """A named command registered with the router.

    Attributes:
        name: The command name (matched case-insensitively).
        description: One-line summary for ``help``.
        execute: The handler body.
        usage: Synopsis shown by ``help <command>``.
        aliases: Built-in alternative names for this command.

    """

    name: str
    description: str
    execute: Execute
    usage: str = ""
    aliases: tuple[str, ...] = ()


class CommandRouter:
    """Expand, resolve and execute input lines for one session."""

    def __init__(
        self,
        *,
        aliases: AliasTable,
        history: HistoryLog,
        logger: Logger | None = None,
        suggestion_history_depth: int = _DEFAULT_SUGGESTION_DEPTH,
    ) -> None:
        """Create a router over a session's alias table and history log.

        Args:
            aliases: User-defined aliases, expanded before dispatch.
            history: The history log, read for ``!`` references and
                appended to after each command.
            logger: Session log for interpreter events.
            suggestion_history_depth: How many recent history entries
                ``get_suggestions`` offers as ``!n`` tokens.

        """
        self._aliases = aliases
        self._history = history
        self._logger = logger or Logger()
        self._suggestion_depth = suggestion_history_depth
        self._handlers: dict[str, CommandHandler] = {}
        self._builtin_aliases: dict[str, str] = {}

    # -- Registry ----------------------------------------------------------

    def register(self, handler: CommandHandler) -> None:
        """Register *handler* under its name and built-in aliases.

        A later registration replaces an earlier one with the same name.
        A command name also shadows any built-in alias spelled the same.
        """
        name = handler.name.lower()
        self._handlers[name] = handler
        self._builtin_aliases.pop(name, None)
        for alias in handler.aliases:
            self._builtin_aliases[alias.lower()] = name

    def lookup(self, name: str) -> CommandHandler | None:
        """Return the handler for a command name or built-in alias."""
        normalized = name.lower()
        actual = self._builtin_aliases.get(normalized, normalized)
        return self._handlers.get(actual)

    @property
    def commands(self) -> list[CommandHandler]:
        """Return all registered handlers, sorted by name."""
        return [self._handlers[name] for name in sorted(self._handlers)]

    @property
    def command_names(self) -> list[str]:
        """Return all registered command names, sorted."""
        return sorted(self._handlers)

    @property
    def builtin_aliases(self) -> dict[str, str]:
        """Return a copy of the built-in alias → command name map."""
        return dict(self._builtin_aliases)

    # -- Dispatch ----------------------------------------------------------

    async def dispatch(
        self, raw_input: str, services: HostServices | None = None
    ) -> CommandResult:
        """Expand, execute and record one input line.

        Args:
            raw_input: The line exactly as the user typed it.
            services: Host capabilities passed through to the handler.

        Returns:
            The command's result, annotated with any expansion notes.
            This method never raises for a bad command or a failing
            handler; those become failed results.

        """
        trimmed = raw_input.strip()
        if not trimmed:
            return CommandResult()

        alias_expanded = self._aliases.expand(trimmed)
        alias_used = alias_expanded != trimmed
        if alias_used:
            self._logger.debug(f"alias expanded: {trimmed} → {alias_expanded}", source=_SOURCE)

        expansion = self._history.expand_command(alias_expanded)
        if expansion is not None:
            self._logger.debug(
                f"history expanded: {expansion.original} → {expansion.expanded}", source=_SOURCE
            )
            result = await self._execute(expansion.expanded, services)
            note = f"Repeating: {expansion.expanded}"
            if alias_used:
                note = f"Alias expanded: {trimmed} → {alias_expanded}\n{note}"
            output = f"{note}\n\n{result.output}" if result.output else note
            return replace(result, output=output)

        kind = classify_reference(alias_expanded)
        if kind is not None:
            return self._unresolved_reference(alias_expanded, kind)

        result = await self._execute(alias_expanded, services)

        if result.error is not ErrorKind.COMMAND_NOT_FOUND:
            self._history.add(trimmed)

        if alias_used and result.output:
            result = replace(
                result, output=f"Alias expanded: {trimmed} → {alias_expanded}\n\n{result.output}"
            )
        return result

    async def _execute(self, line: str, services: HostServices | None) -> CommandResult:
        """Tokenize, resolve and run *line* without touching history."""
        tokens = tokenize(line)
        command_name = tokens[0] if tokens else ""
        handler = self.lookup(command_name)
        if handler is None:
            self._logger.warning(f"command not found: {command_name}", source=_SOURCE)
            return CommandResult(
                output=f'Command not found: {command_name}. Type "help" for available commands.',
                success=False,
                error=ErrorKind.COMMAND_NOT_FOUND,
            )

        context = CommandContext(
            args=tokens[1:],
            raw_input=line,
            history=tuple(self._history.get_all()),
            services=services or HostServices(),
        )
        self._logger.info(f"exec {handler.name}: {line}", source=_SOURCE)
        try:
            outcome = handler.execute(context)
            if inspect.isawaitable(outcome):
                outcome = await outcome
        except Exception as e:  # noqa: BLE001
            self._logger.error(f"{handler.name} raised {type(e).__name__}: {e}", source=_SOURCE)
            return CommandResult(
                output=f"Error executing command: {e}",
                success=False,
                error=ErrorKind.EXECUTION_ERROR,
            )
        return outcome

    def _unresolved_reference(self, text: str, kind: ReferenceKind) -> CommandResult:
        """Build the failure result for a back-reference that did not resolve."""
        self._logger.warning(f"unresolved history reference: {text}", source=_SOURCE)
        hint = 'Use "history" to see available commands.'

        if kind is ReferenceKind.LAST:
            return CommandResult(
                output=f"No previous command to repeat.\n{hint}",
                success=False,
                error=ErrorKind.NO_HISTORY,
            )
        if kind is ReferenceKind.INDEX:
            return CommandResult(
                output=f"No command found at index {text[1:]}.\n{hint}",
                success=False,
                error=ErrorKind.INVALID_HISTORY_INDEX,
            )
        if kind is ReferenceKind.FROM_END:
            return CommandResult(
                output=f"No command found at position {text[2:]} from end.\n{hint}",
                success=False,
                error=ErrorKind.INVALID_HISTORY_INDEX,
            )

        prefix = text[1:]
        return CommandResult(
            output=(
                f'No previous command found starting with "{prefix}".\n'
                f'Use "history search {prefix}" to find matching commands.'
            ),
            success=False,
            error=ErrorKind.NO_MATCHING_HISTORY,
        )

    # -- Completion --------------------------------------------------------

    def get_suggestions(self, partial: str) -> list[str]:
        """Return completion candidates starting with *partial*.

        Candidates are command names, built-in aliases, user alias names,
        ``!!`` and ``!n`` for the most recent history entries.  Matching
        is case-insensitive; the result is sorted and free of duplicates.
        """
        needle = partial.lower()
        candidates: set[str] = set(self._handlers)
        candidates.update(self._builtin_aliases)
        candidates.update(self._aliases.names())
        candidates.update(self._history_tokens())
        return sorted(c for c in candidates if c.lower().startswith(needle))

    def _history_tokens(self) -> Sequence[str]:
        """Return ``!!`` plus ``!n`` for each recent history entry."""
        recent = self._history.get_recent(self._suggestion_depth)
        first = self._history.size() - len(recent) + 1
        return ["!!", *(f"!{first + i}" for i in range(len(recent)))]
