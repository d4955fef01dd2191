"""Built-in core plugin: the standard command elaborators and the ``Init`` module.

Registered first, so any later plugin can override an elaborator by
returning the same command kind.
"""

from __future__ import annotations

import pluggy

from elabfront.domain.environment import ConstantInfo
from elabfront.elab.builtin import BUILTIN_COMMAND_ELABORATORS, CommandElab
from elabfront.elab.prelude import INIT_DECLS, INIT_MODULE

hookimpl = pluggy.HookimplMarker("elabfront")


class CorePlugin:
    """Provides ``def``, scoping commands, ``#check``, ``#eval``, ``#print`` and ``Init``."""

    @hookimpl
    def register_command_elaborators(self) -> dict[str, CommandElab]:
        return dict(BUILTIN_COMMAND_ELABORATORS)

    @hookimpl
    def register_modules(self) -> dict[str, list[ConstantInfo]]:
        return {INIT_MODULE: list(INIT_DECLS)}
