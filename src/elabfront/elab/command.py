"""Command elaborator: dispatch a command node to its registered elaborator."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING

from elabfront.domain.exceptions import ElabException, InternalFailure, MetaError, Silent, Unclassified
from elabfront.domain.state import CommandContext, ElaborationState
from elabfront.domain.syntax import CommandSyntax, contains_missing
from elabfront.elab.builtin import BUILTIN_COMMAND_ELABORATORS, CommandElab

if TYPE_CHECKING:
    from elabfront.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class Elaborator:
    """Table-driven command elaborator.

    Usage::

        elaborator = Elaborator.from_plugins(plugin_manager)
        state = elaborator.elab_command(stx, ctx, state)
    """

    def __init__(self, elaborators: Mapping[str, CommandElab] | None = None) -> None:
        table = BUILTIN_COMMAND_ELABORATORS if elaborators is None else elaborators
        self._table: dict[str, CommandElab] = dict(table)

    @classmethod
    def from_plugins(cls, plugins: PluginManager) -> Elaborator:
        return cls(plugins.command_elaborators())

    @property
    def kinds(self) -> list[str]:
        return sorted(self._table)

    def elab_command(
        self,
        stx: CommandSyntax,
        ctx: CommandContext,
        state: ElaborationState,
    ) -> ElaborationState:
        """Elaborate one command and return the resulting state.

        Raises:
            Silent: The syntax carries a parse error marker (already reported).
            Unclassified: No elaborator is registered for the command kind.
            InternalFailure: A registered elaborator raised a non-elaboration error.
            ElabException: Whatever the elaborator itself raised.
        """
        if contains_missing(stx):
            raise Silent()
        elab = self._table.get(stx.kind)
        if elab is None:
            raise Unclassified()
        try:
            return elab(stx, ctx, state)
        except ElabException:
            raise
        except Exception as exc:
            logger.debug("Elaborator for %s raised %s", stx.kind, type(exc).__name__, exc_info=True)
            raise InternalFailure(MetaError(f"elaborator for '{stx.kind}' failed", cause=exc)) from exc
