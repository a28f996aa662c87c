"""Tests for the terminal session.

A session owns its alias table, history log and log, loads them from a
key-value store on start-up and writes them back after each command.
"""

import asyncio
import json
from pathlib import Path

from chainterm.config import TerminalConfig
from chainterm.logging import LogLevel
from chainterm.router import CommandResult
from chainterm.session import ALIASES_KEY, HISTORY_KEY, Session
from chainterm.storage import JsonFileStore, MemoryStore


def _run(session: Session, line: str) -> CommandResult:
    """Dispatch one line through *session*."""
    return asyncio.run(session.dispatch(line))


class TestIsolation:
    """Verify that sessions share nothing."""

    def test_separate_tables(self) -> None:
        """Aliases and history in one session are invisible to another."""
        first = Session()
        second = Session()
        _run(first, "alias bal wallet balance")
        _run(first, "echo hi")
        assert second.aliases.size() == 0
        assert second.history.size() == 0

    def test_builtins_registered(self) -> None:
        """Every session starts with the built-in commands."""
        names = Session().router.command_names
        for name in ("alias", "clear", "date", "echo", "help", "history", "log"):
            assert name in names


class TestPersistence:
    """Verify loading and saving through the store."""

    def test_saved_after_dispatch(self) -> None:
        """Each dispatch writes both tables to the store."""
        store = MemoryStore()
        session = Session(store=store)
        _run(session, "alias bal wallet balance")
        aliases_doc = store.get(ALIASES_KEY)
        history_doc = store.get(HISTORY_KEY)
        assert aliases_doc is not None
        assert history_doc is not None
        assert json.loads(aliases_doc)["aliases"] == {"bal": "wallet balance"}
        assert json.loads(history_doc)["history"] == ["alias bal wallet balance"]

    def test_restored_on_start(self) -> None:
        """A new session over the same store sees the saved state."""
        store = MemoryStore()
        _run(Session(store=store), "alias bal wallet balance")
        restored = Session(store=store)
        assert restored.aliases.get("bal") == "wallet balance"
        assert restored.history.get_all() == ["alias bal wallet balance"]

    def test_corrupt_aliases_discarded(self) -> None:
        """Corrupt alias data is logged and removed from the store."""
        store = MemoryStore({ALIASES_KEY: "{broken"})
        session = Session(store=store)
        assert session.aliases.size() == 0
        assert store.get(ALIASES_KEY) is None
        warnings = session.logger.filter(min_level=LogLevel.WARNING)
        assert any(ALIASES_KEY in entry.message for entry in warnings)

    def test_corrupt_history_discarded(self) -> None:
        """Corrupt history data is removed from the store."""
        store = MemoryStore({HISTORY_KEY: json.dumps({"history": 42})})
        session = Session(store=store)
        assert session.history.size() == 0
        assert store.get(HISTORY_KEY) is None

    def test_invalid_saved_alias_skipped(self) -> None:
        """A saved alias that breaks a rule is skipped with a warning."""
        doc = json.dumps({"aliases": {"ok": "echo ok", "help": "echo no"}})
        session = Session(store=MemoryStore({ALIASES_KEY: doc}))
        assert session.aliases.names() == ["ok"]
        assert session.logger.filter(min_level=LogLevel.WARNING)

    def test_history_limit_applies_on_load(self) -> None:
        """Restored history is truncated to the configured limit."""
        doc = json.dumps({"history": ["a", "b", "c"]})
        session = Session(
            config=TerminalConfig(max_history=2), store=MemoryStore({HISTORY_KEY: doc})
        )
        assert session.history.get_all() == ["b", "c"]

    def test_file_store_from_config(self, tmp_path: Path) -> None:
        """A storage path in the config selects a file-backed store."""
        path = tmp_path / "session.json"
        session = Session(config=TerminalConfig(storage_path=path))
        assert isinstance(session.store, JsonFileStore)
        _run(session, "echo saved")
        again = Session(config=TerminalConfig(storage_path=path))
        assert again.history.get_all() == ["echo saved"]


class _ReadOnlyStore(MemoryStore):
    """A store whose writes always fail."""

    def set(self, key: str, value: str) -> None:
        msg = f"cannot write {key}"
        raise OSError(msg)


class TestSaveFailures:
    """Verify that a store that cannot be written never breaks dispatch."""

    def test_dispatch_returns_result(self) -> None:
        """The command result is returned and the failure is logged."""
        session = Session(store=_ReadOnlyStore())
        result = _run(session, "echo hi")
        assert result.output == "hi"
        assert session.history.get_all() == ["echo hi"]
        warnings = session.logger.filter(min_level=LogLevel.WARNING, source="session")
        assert any("not saved" in entry.message for entry in warnings)

    def test_unwritable_file_store(self, tmp_path: Path) -> None:
        """A file store under a non-directory path fails quietly."""
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        path = blocker / "sub" / "session.json"
        session = Session(config=TerminalConfig(storage_path=path))
        assert _run(session, "alias bal wallet balance").success
        assert session.aliases.get("bal") == "wallet balance"

    def test_reset_does_not_raise(self) -> None:
        """reset also tolerates a failing store."""
        session = Session(store=_ReadOnlyStore())
        session.reset()
        assert session.history.size() == 0


class TestSessionOperations:
    """Verify stats, reset, export and import."""

    def test_stats(self) -> None:
        """stats reports table sizes."""
        session = Session()
        _run(session, "alias bal wallet balance")
        stats = session.stats()
        assert stats.alias_count == 1
        assert stats.history_size == 1
        assert stats.command_count == len(session.router.command_names)
        assert stats.log_count > 0

    def test_reset(self) -> None:
        """reset clears the tables and saves the empty state."""
        store = MemoryStore()
        session = Session(store=store)
        _run(session, "alias bal wallet balance")
        session.reset()
        assert session.aliases.size() == 0
        assert session.history.size() == 0
        assert Session(store=store).aliases.size() == 0

    def test_export_document(self) -> None:
        """export holds aliases, history and a timestamp."""
        session = Session()
        _run(session, "alias bal wallet balance")
        data = json.loads(session.export())
        assert data["aliases"] == {"bal": "wallet balance"}
        assert data["history"] == ["alias bal wallet balance"]
        assert "timestamp" in data

    def test_import_partial(self) -> None:
        """A document with only aliases leaves history alone."""
        session = Session()
        _run(session, "echo keep")
        result = session.import_json(json.dumps({"aliases": {"g": "echo hi"}}))
        assert result.aliases_imported == 1
        assert not result.history_imported
        assert session.history.get_all() == ["echo keep"]

    def test_import_bad_history(self) -> None:
        """A non-list history is reported as an error."""
        result = Session().import_json(json.dumps({"history": "nope"}))
        assert not result.history_imported
        assert result.errors

    def test_import_malformed(self) -> None:
        """Malformed JSON is reported, not raised."""
        result = Session().import_json("{nope")
        assert result.aliases_imported == 0
        assert "JSON parse error" in result.errors[0]

    def test_import_not_object(self) -> None:
        """A non-object document is refused."""
        result = Session().import_json("[]")
        assert "Invalid format" in result.errors[0]

    def test_suggestions(self) -> None:
        """Session suggestions include commands and aliases."""
        session = Session()
        _run(session, "alias hist_all history")
        assert session.get_suggestions("hist") == ["hist", "hist_all", "history"]
