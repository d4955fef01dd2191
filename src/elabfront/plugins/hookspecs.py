"""Pluggy hook specifications for elabfront extensions and lifecycle events.

Two setup-time hooks let plugins contribute command elaborators and
importable modules. Two lifecycle hooks observe the command loop; they are
dispatched synchronously, in command order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from elabfront.domain.environment import ConstantInfo
    from elabfront.elab.builtin import CommandElab

hookspec = pluggy.HookspecMarker("elabfront")


class ElabfrontHookSpec:
    """Hook specifications for the elabfront plugin system."""

    @hookspec
    def register_command_elaborators(self) -> dict[str, CommandElab] | None:
        """Return command kind -> elaborator mappings (e.g. ``{"#eval": fn}``)."""

    @hookspec
    def register_modules(self) -> dict[str, list[ConstantInfo]] | None:
        """Return module name -> declarations for modules that can be imported."""

    @hookspec
    def post_command(
        self,
        kind: str,
        position: int,
        ok: bool,
        diagnostics_added: int,
    ) -> None:
        """Called after each regular command was elaborated or recovered."""

    @hookspec
    def post_run(
        self,
        module_name: str,
        commands: int,
        errors: int,
    ) -> None:
        """Called once the command loop has terminated."""
