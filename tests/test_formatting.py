"""Tests for the plain-text formatter."""

from chainterm.formatting import TextFormatter


class TestTextFormatter:
    """Verify table, key-value and numbered layouts."""

    def test_table(self) -> None:
        """Columns are padded to the widest cell under a dash rule."""
        output = TextFormatter().table(["Name", "Command"], [["bal", "wallet balance"]])
        lines = output.splitlines()
        assert lines[0] == "Name  Command"
        assert set(lines[1].replace(" ", "")) == {"-"}
        assert lines[2] == "bal   wallet balance"

    def test_key_values(self) -> None:
        """Labels are aligned and indented."""
        output = TextFormatter().key_values([("A", "1"), ("Long", "2")], indent=2)
        assert output.splitlines() == ["  A:    1", "  Long: 2"]

    def test_numbered(self) -> None:
        """Items are numbered from start with right-aligned indices."""
        output = TextFormatter().numbered(["a", "b"], start=9)
        assert output.splitlines() == ["   9  a", "  10  b"]
