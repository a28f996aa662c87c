"""Terminal configuration — limits and names fixed at session start.

A terminal session is shaped by a handful of numbers: how many aliases
a user may define, how long alias names can be, how much history is
kept.  These live in one frozen ``TerminalConfig`` so every component
reads the same values and nothing changes them mid-session.

The configuration can be loaded from a JSON file::

    {"max_history": 500, "storage_path": "~/.chainterm/session.json"}

Missing keys fall back to the defaults.  A file that cannot be read or
parsed raises ``ConfigError`` — a broken configuration should stop the
terminal from starting rather than run it with surprising limits.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

# Environment variable naming a JSON configuration file.
CONFIG_ENV_VAR = "CHAINTERM_CONFIG"

# Built-in command names that can never be used as alias names.
RESERVED_NAMES: frozenset[str] = frozenset(
    [
        "help",
        "clear",
        "echo",
        "date",
        "history",
        "alias",
        "unalias",
        "wallet",
        "smart",
        "alchemy",
        "call",
        "write",
        "deploy",
        "compile",
        "simulate",
        "gasEstimate",
        "whoami",
        "pwd",
        "ls",
    ]
)


class ConfigError(RuntimeError):
    """Raise when a configuration file cannot be loaded.

    Examples: missing file, invalid JSON, a non-object document.
    """


@dataclass(frozen=True)
class TerminalConfig:
    """Session-wide limits for the command line interpreter.

    Attributes:
        max_aliases: Maximum number of user-defined aliases.
        max_alias_name_length: Maximum characters in an alias name.
        max_history: Maximum number of history entries kept.
        history_page_size: Entries shown by a bare ``history`` command.
        suggestion_history_depth: Recent entries offered as ``!n``
            completions.
        reserved_names: Names that cannot become aliases.
        storage_path: JSON file backing the session store, or None for
            an in-memory store.

    """

    max_aliases: int = 100
    max_alias_name_length: int = 50
    max_history: int = 1000
    history_page_size: int = 20
    suggestion_history_depth: int = 10
    reserved_names: frozenset[str] = field(default_factory=lambda: RESERVED_NAMES)
    storage_path: Path | None = None


def load_config(path: Path) -> TerminalConfig:
    """Load a configuration from a JSON file.

    Args:
        path: Path to a JSON object with any subset of the
            ``TerminalConfig`` fields.

    Returns:
        A configuration with file values overriding the defaults.

    Raises:
        ConfigError: If the file cannot be read, is not a JSON object,
            or holds a value of the wrong type (limits must be positive
            integers).

    """
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        msg = f"Cannot load configuration: {e}"
        raise ConfigError(msg) from e

    if not isinstance(data, dict):
        msg = f"Cannot load configuration: {path} does not hold a JSON object"
        raise ConfigError(msg)

    defaults = TerminalConfig()
    storage = data.get("storage_path")
    if storage is not None and not isinstance(storage, str):
        msg = f"Invalid configuration: storage_path must be a string, got {storage!r}"
        raise ConfigError(msg)
    reserved = data.get("reserved_names")
    if reserved is not None and (
        not isinstance(reserved, list) or not all(isinstance(n, str) for n in reserved)
    ):
        msg = "Invalid configuration: reserved_names must be a list of strings"
        raise ConfigError(msg)

    return TerminalConfig(
        max_aliases=_limit(data, "max_aliases", defaults.max_aliases),
        max_alias_name_length=_limit(
            data, "max_alias_name_length", defaults.max_alias_name_length
        ),
        max_history=_limit(data, "max_history", defaults.max_history),
        history_page_size=_limit(data, "history_page_size", defaults.history_page_size),
        suggestion_history_depth=_limit(
            data, "suggestion_history_depth", defaults.suggestion_history_depth
        ),
        reserved_names=frozenset(reserved) if reserved is not None else defaults.reserved_names,
        storage_path=Path(storage).expanduser() if storage else None,
    )


def _limit(data: dict[str, object], key: str, default: int) -> int:
    """Return the positive integer stored under *key*, or *default*."""
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        msg = f"Invalid configuration: {key} must be a positive integer, got {value!r}"
        raise ConfigError(msg)
    return value


def config_from_env() -> TerminalConfig:
    """Return the configuration named by ``CHAINTERM_CONFIG``, or defaults."""
    path = os.environ.get(CONFIG_ENV_VAR)
    if not path:
        return TerminalConfig()
    return load_config(Path(path))
