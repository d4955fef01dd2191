"""Command driver: the parse → elaborate → recover loop.

INVARIANT: Each iteration owns exactly one ParserState and one
ElaborationState and hands back replacements. A failed command leaves the
environment exactly as it was before the command; only the log grows.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from elabfront.domain.exceptions import ElabException
from elabfront.domain.state import CommandContext, ElaborationState, ParserContext, ParserState
from elabfront.domain.syntax import CommandSyntax
from elabfront.frontend.classifier import log_elab_exception
from elabfront.frontend.contracts import CommandElaborator, CommandParser, FrontendObserver
from elabfront.frontend.telemetry import trace_span
from elabfront.parser import is_eoi, is_exit_command, parse_command

logger = logging.getLogger(__name__)

DEFAULT_MAX_REC_DEPTH = 512

CommandAction = Callable[[CommandContext, ElaborationState], ElaborationState]


def get_cmd_context(
    parser_ctx: ParserContext,
    state: ElaborationState,
    max_rec_depth: int = DEFAULT_MAX_REC_DEPTH,
) -> CommandContext:
    """Build the per-call context from the shared parser context and *state*."""
    return CommandContext(
        file_name=parser_ctx.file_name,
        file_map=parser_ctx.file_map,
        cmd_pos=state.cmd_pos,
        env=state.env,
        max_rec_depth=max_rec_depth,
    )


class CommandDriver:
    """Drives one module's command stream to completion.

    Usage::

        driver = CommandDriver(parser_ctx, Elaborator())
        final_state = driver.process_commands(parser_state, elab_state)
    """

    def __init__(
        self,
        parser_ctx: ParserContext,
        elaborator: CommandElaborator,
        *,
        parse: CommandParser = parse_command,
        observer: FrontendObserver | None = None,
        max_rec_depth: int = DEFAULT_MAX_REC_DEPTH,
    ) -> None:
        self._parser_ctx = parser_ctx
        self._elaborator = elaborator
        self._parse = parse
        self._observer = observer
        self._max_rec_depth = max_rec_depth
        self._command_count = 0

    @property
    def command_count(self) -> int:
        """Regular commands processed so far (terminators excluded)."""
        return self._command_count

    def update_cmd_pos(self, parser_state: ParserState, state: ElaborationState) -> ElaborationState:
        return state.model_copy(update={"cmd_pos": parser_state.pos})

    def get_cmd_context(self, state: ElaborationState) -> CommandContext:
        return get_cmd_context(self._parser_ctx, state, self._max_rec_depth)

    def run_command_elab(self, action: CommandAction, state: ElaborationState) -> ElaborationState:
        """Run *action* under a context derived from *state*.

        Exceptions from *action* propagate unchanged.
        """
        return action(self.get_cmd_context(state), state)

    def elab_command_at_frontend(self, stx: CommandSyntax, state: ElaborationState) -> ElaborationState:
        """Elaborate *stx*, turning any elaboration failure into a diagnostic."""
        return self._elab_or_recover(stx, state)[0]

    def _elab_or_recover(self, stx: CommandSyntax, state: ElaborationState) -> tuple[ElaborationState, bool]:
        def action(ctx: CommandContext, st: ElaborationState) -> ElaborationState:
            return self._elaborator.elab_command(stx, ctx, st)

        try:
            return self.run_command_elab(action, state), True
        except ElabException as exc:
            logger.debug("Command %s at %d failed: %s", stx.kind, state.cmd_pos, type(exc).__name__)
            ctx = self.get_cmd_context(state)
            return log_elab_exception(exc, ctx, state), False

    def process_command(
        self,
        parser_state: ParserState,
        state: ElaborationState,
    ) -> tuple[bool, ParserState, ElaborationState]:
        """Parse and elaborate one command.

        Returns ``(done, parser_state, state)``; *done* is True once end of
        input or an exit directive was reached.
        """
        state = self.update_cmd_pos(parser_state, state)
        logged_before = len(state.messages.messages)
        stx, parser_state, messages = self._parse(self._parser_ctx, parser_state, state.messages)
        state = state.model_copy(update={"messages": messages})

        if is_eoi(stx) or is_exit_command(stx):
            logger.debug("Stopping at %s (offset %d)", type(stx).__name__, state.cmd_pos)
            return True, parser_state, state

        with trace_span(f"command {stx.kind}") as span:
            state, ok = self._elab_or_recover(stx, state)
            if span is not None:
                span.annotate("kind", stx.kind)
                span.annotate("position", state.cmd_pos)
                span.annotate("ok", ok)

        self._command_count += 1
        if self._observer is not None:
            self._observer.notify_command(
                kind=stx.kind,
                position=state.cmd_pos,
                ok=ok,
                diagnostics_added=len(state.messages.messages) - logged_before,
            )
        return False, parser_state, state

    def process_commands(self, parser_state: ParserState, state: ElaborationState) -> ElaborationState:
        """Process commands until end of input or an exit directive."""
        done = False
        while not done:
            done, parser_state, state = self.process_command(parser_state, state)
        return state
