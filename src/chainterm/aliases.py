"""Alias table — user-defined shortcuts for longer commands.

An alias maps a short name to a replacement command::

    alias bal wallet balance
    bal --eth          # runs: wallet balance --eth

Only the **first word** of an input line is ever looked up, and only
one level of substitution happens per expansion.  A stored command may
itself start with another alias name, which is why every ``set`` runs
a cycle check first: the table must never contain a loop that would
make repeated expansion go round forever.

The cycle check walks a small directed graph.  Nodes are alias names;
there is an edge ``a → b`` when alias ``a``'s command starts with
``b``.  Starting from the first word of the new command, the walk
follows edges until it reaches a word that is not an alias (no cycle),
the name being defined (a cycle through the new alias), or a node it
has already visited (a cycle elsewhere in the table).  Each step visits
a distinct alias, so the walk ends within ``size()`` steps.

Failures are reported through return values, never exceptions: ``set``
returns ``False`` and ``import_json`` collects one message per skipped
entry.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime

from chainterm.config import TerminalConfig
from chainterm.tokenizer import first_word

_NAME_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


@dataclass(frozen=True)
class AliasEntry:
    """A single alias: a name and the command it stands for."""

    name: str
    command: str


@dataclass
class AliasImportResult:
    """Outcome of importing aliases from JSON.

    Attributes:
        success: True when at least one alias was imported.
        imported: Number of aliases added or updated.
        errors: One message per entry that was skipped.

    """

    success: bool
    imported: int = 0
    errors: list[str] = field(default_factory=lambda: [])  # noqa: PIE807


class AliasTable:
    """Name → command mapping with validation, capacity and cycle checks."""

    def __init__(self, *, config: TerminalConfig | None = None) -> None:
        """Create an empty alias table.

        Args:
            config: Limits and reserved names; defaults when omitted.

        """
        self._config = config or TerminalConfig()
        self._reserved = frozenset(name.lower() for name in self._config.reserved_names)
        self._aliases: dict[str, str] = {}

    # -- Queries -----------------------------------------------------------

    def has(self, name: str) -> bool:
        """Return True if *name* is a defined alias."""
        return name in self._aliases

    def get(self, name: str) -> str | None:
        """Return the command stored for *name*, or None."""
        return self._aliases.get(name)

    def get_all(self) -> list[AliasEntry]:
        """Return every alias, sorted by name."""
        return [AliasEntry(name, cmd) for name, cmd in sorted(self._aliases.items())]

    def names(self) -> list[str]:
        """Return the alias names, sorted."""
        return sorted(self._aliases)

    def size(self) -> int:
        """Return the number of aliases."""
        return len(self._aliases)

    def __len__(self) -> int:
        """Return the number of aliases."""
        return len(self._aliases)

    def search(self, query: str) -> list[AliasEntry]:
        """Return aliases whose name or command contains *query*.

        The match is case-insensitive; results are sorted by name.
        """
        needle = query.lower()
        return [
            entry
            for entry in self.get_all()
            if needle in entry.name.lower() or needle in entry.command.lower()
        ]

    def suggestions(self, partial: str) -> list[str]:
        """Return alias names starting with *partial*, sorted."""
        return [name for name in self.names() if name.startswith(partial)]

    # -- Mutation ----------------------------------------------------------

    def set(self, name: str, command: str) -> bool:
        """Create or update an alias.

        Args:
            name: The alias name.
            command: The command the alias expands to.

        Returns:
            True if the alias was stored; False if the name is invalid
            or reserved, the command would create a cycle, or the table
            is full and *name* is new.

        """
        if self.validate_name(name) is not None:
            return False
        if self.would_create_cycle(name, command):
            return False
        if name not in self._aliases and len(self._aliases) >= self._config.max_aliases:
            return False
        self._aliases[name] = command
        return True

    def remove(self, name: str) -> bool:
        """Remove an alias.  Return True if it existed."""
        return self._aliases.pop(name, None) is not None

    def clear(self) -> None:
        """Remove every alias."""
        self._aliases.clear()

    # -- Expansion ---------------------------------------------------------

    def expand(self, text: str) -> str:
        """Replace the first word of *text* if it names an alias.

        Remaining words are appended to the stored command verbatim.
        Expansion is a single level: a stored command that starts with
        another alias is returned as-is.

        Args:
            text: A raw input line.

        Returns:
            The expanded line, or *text* unchanged when no alias matches.

        """
        parts = text.strip().split()
        if not parts:
            return text

        command = self._aliases.get(parts[0])
        if command is None:
            return text

        remaining = " ".join(parts[1:])
        return f"{command} {remaining}" if remaining else command

    # -- Validation --------------------------------------------------------

    def validate_name(self, name: str) -> str | None:
        """Return why *name* cannot be an alias, or None if it can."""
        if not _NAME_PATTERN.fullmatch(name):
            return (
                "must start with a letter or underscore and contain only "
                "letters, digits and underscores"
            )
        if len(name) > self._config.max_alias_name_length:
            return f"must be {self._config.max_alias_name_length} characters or less"
        if name.lower() in self._reserved:
            return "is a reserved command name"
        return None

    def would_create_cycle(self, name: str, command: str) -> bool:
        """Return True if storing ``name → command`` would create a cycle."""
        current = first_word(command)
        if not current:
            return False
        if current == name:
            return True

        visited: set[str] = set()
        while current in self._aliases:
            if current in visited:
                return True
            visited.add(current)
            current = first_word(self._aliases[current])
            if current == name:
                return True
        return False

    # -- Persistence -------------------------------------------------------

    def export(self) -> str:
        """Serialize the table as a JSON document.

        The document holds ``aliases`` (name → command), an ISO-8601
        ``timestamp`` and the alias ``count``.
        """
        data = {
            "aliases": dict(self._aliases),
            "timestamp": datetime.now(UTC).isoformat(),
            "count": len(self._aliases),
        }
        return json.dumps(data, indent=2)

    def import_json(self, text: str) -> AliasImportResult:
        """Import aliases from a JSON document produced by ``export``.

        Entries that fail validation or would create a cycle are skipped
        with an error message.  Once the table is full, new names are
        skipped too; entries that update an existing alias still apply.
        Aliases imported before a failure are kept.

        Args:
            text: The JSON document.

        Returns:
            The import outcome with per-entry error messages.

        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            return AliasImportResult(success=False, errors=[f"JSON parse error: {e}"])

        aliases = data.get("aliases") if isinstance(data, dict) else None
        if not isinstance(aliases, dict):
            return AliasImportResult(
                success=False, errors=["Invalid format: missing or invalid aliases object"]
            )

        result = AliasImportResult(success=False)
        for name, command in aliases.items():
            if not isinstance(command, str):
                result.errors.append(f"Skipped {name}: command must be a string")
                continue
            if self.validate_name(name) is not None:
                result.errors.append(f"Skipped {name}: invalid alias name")
                continue
            if self.would_create_cycle(name, command):
                result.errors.append(f"Skipped {name}: would create recursion")
                continue
            if name not in self._aliases and len(self._aliases) >= self._config.max_aliases:
                result.errors.append(f"Skipped {name}: maximum aliases limit reached")
                continue
            self._aliases[name] = command
            result.imported += 1

        result.success = result.imported > 0
        return result
