"""Collaborator contracts consumed by the command driver.

The driver never imports a concrete parser or elaborator; it is handed
objects that satisfy these protocols. The defaults live in
:mod:`elabfront.parser` and :mod:`elabfront.elab`.
"""

from __future__ import annotations

from typing import Protocol

from elabfront.domain.messages import MessageLog
from elabfront.domain.state import CommandContext, ElaborationState, ParserContext, ParserState
from elabfront.domain.syntax import CommandSyntax


class CommandParser(Protocol):
    def __call__(
        self,
        ctx: ParserContext,
        state: ParserState,
        log: MessageLog,
    ) -> tuple[CommandSyntax, ParserState, MessageLog]: ...


class CommandElaborator(Protocol):
    """Raises :class:`~elabfront.domain.exceptions.ElabException` on failure."""

    def elab_command(
        self,
        stx: CommandSyntax,
        ctx: CommandContext,
        state: ElaborationState,
    ) -> ElaborationState: ...


class FrontendObserver(Protocol):
    """Lifecycle sink; :class:`~elabfront.plugins.manager.PluginManager` satisfies it."""

    def notify_command(self, *, kind: str, position: int, ok: bool, diagnostics_added: int) -> None: ...

    def notify_run(self, *, module_name: str, commands: int, errors: int) -> None: ...
