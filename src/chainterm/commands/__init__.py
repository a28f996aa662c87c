"""Built-in terminal commands.

Each module groups related commands into a small class whose
``handlers()`` method returns ``CommandHandler`` records.  Blockchain
commands (wallet, call, deploy, ...) live outside this package and are
registered by the host the same way::

    router.register(CommandHandler(name="call", description=..., execute=...))
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from chainterm.commands.alias import AliasCommands
from chainterm.commands.basic import BasicCommands
from chainterm.commands.history import HistoryCommands
from chainterm.commands.session import SessionCommands

if TYPE_CHECKING:
    from chainterm.router import CommandRouter
    from chainterm.session import Session

__all__ = [
    "AliasCommands",
    "BasicCommands",
    "HistoryCommands",
    "SessionCommands",
    "register_builtin_commands",
]


def register_builtin_commands(router: CommandRouter, *, session: Session) -> None:
    """Register every built-in command with *router*.

    Args:
        router: The router to register with.
        session: The session whose tables the commands manage.

    """
    config = session.config
    groups = [
        BasicCommands(router),
        HistoryCommands(session.history, page_size=config.history_page_size),
        AliasCommands(
            session.aliases,
            max_aliases=config.max_aliases,
            max_name_length=config.max_alias_name_length,
        ),
        SessionCommands(session),
    ]
    for group in groups:
        for handler in group.handlers():
            router.register(handler)
