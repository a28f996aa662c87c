"""Tests for the history log.

The history log records executed lines, suppresses consecutive
duplicates and history commands, keeps a bounded number of entries,
and resolves ``!`` back-references.
"""

import json

from chainterm.history import (
    HistoryExpansion,
    HistoryLog,
    HistoryMatch,
    ReferenceKind,
    classify_reference,
)


def _log(*commands: str) -> HistoryLog:
    """Create a history log holding *commands*."""
    history = HistoryLog()
    for command in commands:
        history.add(command)
    return history


class TestAdd:
    """Verify the recording rules."""

    def test_consecutive_duplicates_suppressed(self) -> None:
        """Adding the same line twice in a row stores it once."""
        history = _log("a", "a")
        assert history.size() == 1

    def test_non_consecutive_duplicates_kept(self) -> None:
        """Duplicates separated by another entry are all kept."""
        history = _log("a", "b", "a")
        assert history.size() == 3

    def test_blank_ignored(self) -> None:
        """Empty and whitespace-only lines are not stored."""
        history = _log("", "   ")
        assert history.size() == 0

    def test_whitespace_trimmed(self) -> None:
        """Entries are stored trimmed."""
        history = _log("  wallet status  ")
        assert history.get_all() == ["wallet status"]

    def test_history_commands_ignored(self) -> None:
        """history commands and back-references are never stored."""
        history = _log("history", "history search x", "!!", "!3", "!wallet")
        assert history.size() == 0

    def test_bounded_size(self) -> None:
        """The oldest entries are evicted beyond the limit."""
        history = HistoryLog(max_size=3)
        for i in range(5):
            history.add(f"echo {i}")
        assert history.get_all() == ["echo 2", "echo 3", "echo 4"]

    def test_default_limit(self) -> None:
        """The default limit is 1000 entries."""
        history = HistoryLog()
        for i in range(1005):
            history.add(f"echo {i}")
        assert history.size() == 1000
        assert history.get_by_index(1) == "echo 5"


class TestRetrieval:
    """Verify positional access and search."""

    def test_get_by_index(self) -> None:
        """Indices are 1-based; out-of-range returns None."""
        history = _log("a", "b")
        assert history.get_by_index(1) == "a"
        assert history.get_by_index(2) == "b"
        assert history.get_by_index(0) is None
        assert history.get_by_index(3) is None

    def test_get_last(self) -> None:
        """get_last returns the newest entry or None."""
        assert HistoryLog().get_last() is None
        assert _log("a", "b").get_last() == "b"

    def test_get_from_end(self) -> None:
        """get_from_end counts back from the tail (1 = last)."""
        history = _log("a", "b", "c")
        assert history.get_from_end(1) == "c"
        assert history.get_from_end(3) == "a"
        assert history.get_from_end(4) is None

    def test_get_recent(self) -> None:
        """get_recent returns the last n entries, oldest first."""
        history = _log("a", "b", "c")
        assert history.get_recent(2) == ["b", "c"]
        assert history.get_recent(10) == ["a", "b", "c"]
        assert history.get_recent(0) == []

    def test_search_case_insensitive(self) -> None:
        """Search matches substrings regardless of case, with 1-based indices."""
        history = _log("wallet status", "echo hi", "Wallet balance")
        assert history.search("WALLET") == [
            HistoryMatch(index=1, command="wallet status"),
            HistoryMatch(index=3, command="Wallet balance"),
        ]

    def test_get_all_is_a_copy(self) -> None:
        """Mutating the returned list does not touch the log."""
        history = _log("a")
        history.get_all().append("b")
        assert history.size() == 1

    def test_clear(self) -> None:
        """Clear removes every entry."""
        history = _log("a", "b")
        history.clear()
        assert history.size() == 0


class TestClassifyReference:
    """Verify syntactic recognition of back-references."""

    def test_forms(self) -> None:
        """Each back-reference form is recognised."""
        assert classify_reference("!!") is ReferenceKind.LAST
        assert classify_reference("!12") is ReferenceKind.INDEX
        assert classify_reference("!-2") is ReferenceKind.FROM_END
        assert classify_reference("!wallet") is ReferenceKind.PREFIX

    def test_not_a_reference(self) -> None:
        """Ordinary commands and a bare ! are not back-references."""
        assert classify_reference("wallet status") is None
        assert classify_reference("!") is None


class TestExpandCommand:
    """Verify back-reference resolution."""

    def test_bang_bang(self) -> None:
        """!! resolves to the last entry."""
        history = _log("wallet status")
        assert history.expand_command("!!") == HistoryExpansion(
            expanded="wallet status", original="!!"
        )

    def test_bang_bang_empty(self) -> None:
        """!! on an empty log does not resolve."""
        assert HistoryLog().expand_command("!!") is None

    def test_index(self) -> None:
        """!n resolves to entry n."""
        history = _log("a", "b")
        expansion = history.expand_command("!1")
        assert expansion is not None
        assert expansion.expanded == "a"

    def test_index_out_of_range(self) -> None:
        """!n beyond the log size does not resolve."""
        history = _log("a", "b")
        assert history.expand_command("!5") is None
        assert history.expand_command("!0") is None

    def test_from_end(self) -> None:
        """!-n resolves counting back from the tail."""
        history = _log("a", "b", "c")
        expansion = history.expand_command("!-2")
        assert expansion is not None
        assert expansion.expanded == "b"
        assert history.expand_command("!-4") is None

    def test_prefix_most_recent(self) -> None:
        """!text resolves to the most recent entry starting with text."""
        history = _log("wallet connect", "echo hi", "wallet balance")
        expansion = history.expand_command("!wallet")
        assert expansion is not None
        assert expansion.expanded == "wallet balance"

    def test_prefix_is_case_sensitive_prefix(self) -> None:
        """!text only matches at the start of an entry."""
        history = _log("echo wallet")
        assert history.expand_command("!wallet") is None

    def test_not_a_reference(self) -> None:
        """Input not starting with ! is not expanded."""
        assert _log("a").expand_command("a") is None

    def test_surrounding_whitespace(self) -> None:
        """The reference is trimmed before matching."""
        expansion = _log("a").expand_command("  !!  ")
        assert expansion == HistoryExpansion(expanded="a", original="!!")


class TestExportImport:
    """Verify JSON persistence."""

    def test_export_format(self) -> None:
        """Export holds the entries, a timestamp and the size."""
        data = json.loads(_log("a", "b").export())
        assert data["history"] == ["a", "b"]
        assert data["size"] == 2
        assert "timestamp" in data

    def test_round_trip(self) -> None:
        """Importing an export reproduces the log in order."""
        history = _log("a", "b", "a")
        other = HistoryLog()
        assert other.import_json(history.export())
        assert other.get_all() == ["a", "b", "a"]

    def test_import_truncates(self) -> None:
        """Only the most recent max_size entries are imported."""
        history = HistoryLog(max_size=2)
        assert history.import_json(json.dumps({"history": ["a", "b", "c"]}))
        assert history.get_all() == ["b", "c"]

    def test_import_malformed(self) -> None:
        """Malformed documents are refused and leave the log untouched."""
        history = _log("keep")
        assert not history.import_json("{oops")
        assert not history.import_json(json.dumps({"history": "not a list"}))
        assert history.get_all() == ["keep"]
