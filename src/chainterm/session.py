"""Terminal session — one user's aliases, history, log and router.

A session is the unit of isolation.  Each browser tab, REPL or test
builds its own ``Session``, and every table it uses hangs off that
instance; there is no module-level state to leak between sessions.

On construction the session:

    1. Creates an empty alias table, history log and session log.
    2. Loads saved aliases and history from its key-value store.
       Corrupt data is logged, deleted, and replaced by an empty table;
       a bad save never stops a session from starting.
    3. Builds a router and registers the built-in commands.

After each ``dispatch`` the tables are written back to the store.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import UTC, datetime

from chainterm.aliases import AliasTable
from chainterm.commands import register_builtin_commands
from chainterm.config import TerminalConfig
from chainterm.history import HistoryLog
from chainterm.logging import Logger
from chainterm.router import CommandResult, CommandRouter, HostServices
from chainterm.storage import JsonFileStore, KeyValueStore, MemoryStore

ALIASES_KEY = "terminal-aliases"
HISTORY_KEY = "terminal-history"

_SOURCE = "session"


@dataclass(frozen=True)
class SessionStats:
    """A snapshot of session sizes for status displays."""

    history_size: int
    alias_count: int
    command_count: int
    log_count: int


@dataclass(frozen=True)
class SessionImportResult:
    """Outcome of importing a whole-session JSON document."""

    aliases_imported: int
    history_imported: bool
    errors: tuple[str, ...] = ()


def _holds(text: str, key: str, kind: type) -> bool:
    """Return True if *text* is a JSON object whose *key* is a *kind*."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return False
    return isinstance(data, dict) and isinstance(data.get(key), kind)


class Session:
    """Everything one terminal user interacts with."""

    def __init__(
        self,
        *,
        config: TerminalConfig | None = None,
        store: KeyValueStore | None = None,
    ) -> None:
        """Create a session, loading any saved state from *store*.

        Args:
            config: Session limits; defaults when omitted.
            store: Where aliases and history are persisted.  When
                omitted, a ``JsonFileStore`` is used if the config names
                a storage path, otherwise a ``MemoryStore``.

        """
        self._config = config or TerminalConfig()
        if store is None:
            path = self._config.storage_path
            store = JsonFileStore(path) if path is not None else MemoryStore()
        self._store = store
        self._logger = Logger()
        self._aliases = AliasTable(config=self._config)
        self._history = HistoryLog(max_size=self._config.max_history)
        self._load()

        self._router = CommandRouter(
            aliases=self._aliases,
            history=self._history,
            logger=self._logger,
            suggestion_history_depth=self._config.suggestion_history_depth,
        )
        register_builtin_commands(self._router, session=self)
        self._logger.info(
            f"session started ({self._aliases.size()} aliases, "
            f"{self._history.size()} history entries)",
            source=_SOURCE,
        )

    @property
    def config(self) -> TerminalConfig:
        """Return the session configuration."""
        return self._config

    @property
    def aliases(self) -> AliasTable:
        """Return the session's alias table."""
        return self._aliases

    @property
    def history(self) -> HistoryLog:
        """Return the session's history log."""
        return self._history

    @property
    def logger(self) -> Logger:
        """Return the session log."""
        return self._logger

    @property
    def router(self) -> CommandRouter:
        """Return the session's command router."""
        return self._router

    @property
    def store(self) -> KeyValueStore:
        """Return the backing key-value store."""
        return self._store

    async def dispatch(
        self, raw_input: str, services: HostServices | None = None
    ) -> CommandResult:
        """Dispatch *raw_input* through the router, then save the tables."""
        result = await self._router.dispatch(raw_input, services)
        self.save()
        return result

    def get_suggestions(self, partial: str) -> list[str]:
        """Return completion candidates for *partial*."""
        return self._router.get_suggestions(partial)

    def stats(self) -> SessionStats:
        """Return current table sizes."""
        return SessionStats(
            history_size=self._history.size(),
            alias_count=self._aliases.size(),
            command_count=len(self._router.command_names),
            log_count=len(self._logger),
        )

    # -- Persistence -------------------------------------------------------

    def save(self) -> None:
        """Write the alias table and history log to the store.

        A store that cannot be written is logged, not raised: the
        session keeps working from memory.
        """
        try:
            self._store.set(ALIASES_KEY, self._aliases.export())
            self._store.set(HISTORY_KEY, self._history.export())
        except OSError as e:
            self._logger.warning(f"session not saved: {e}", source=_SOURCE)

    def reset(self) -> None:
        """Clear aliases, history and the session log, then save."""
        self._aliases.clear()
        self._history.clear()
        self._logger.clear()
        self._logger.info("session reset", source=_SOURCE)
        self.save()

    def export(self) -> str:
        """Serialize aliases and history together as one JSON document."""
        data = {
            "aliases": {entry.name: entry.command for entry in self._aliases.get_all()},
            "history": self._history.get_all(),
            "timestamp": datetime.now(UTC).isoformat(),
        }
        return json.dumps(data, indent=2)

    def import_json(self, text: str) -> SessionImportResult:
        """Import a document produced by ``export``.

        Aliases are merged into the table; history, when present,
        replaces the log.  Either part may be absent.
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            return SessionImportResult(0, False, (f"JSON parse error: {e}",))
        if not isinstance(data, dict):
            return SessionImportResult(0, False, ("Invalid format: expected a JSON object",))

        errors: list[str] = []
        imported = 0
        if "aliases" in data:
            alias_result = self._aliases.import_json(json.dumps({"aliases": data["aliases"]}))
            imported = alias_result.imported
            errors.extend(alias_result.errors)

        history_ok = False
        if "history" in data:
            history_ok = self._history.import_json(json.dumps({"history": data["history"]}))
            if not history_ok:
                errors.append("Invalid format: history must be a list")

        return SessionImportResult(imported, history_ok, tuple(errors))

    def _load(self) -> None:
        """Restore aliases and history from the store."""
        text = self._store.get(ALIASES_KEY)
        if text is not None:
            if _holds(text, "aliases", dict):
                result = self._aliases.import_json(text)
                for error in result.errors:
                    self._logger.warning(f"alias not restored: {error}", source=_SOURCE)
            else:
                self._discard(ALIASES_KEY)

        text = self._store.get(HISTORY_KEY)
        if text is not None and not self._history.import_json(text):
            self._discard(HISTORY_KEY)

    def _discard(self, key: str) -> None:
        self._logger.warning(f"corrupt {key} data discarded", source=_SOURCE)
        try:
            self._store.delete(key)
        except OSError as e:
            self._logger.warning(f"{key} not removed: {e}", source=_SOURCE)
