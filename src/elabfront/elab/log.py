"""Message construction helpers for elaborators."""

from __future__ import annotations

from elabfront.domain.exceptions import DirectMessage
from elabfront.domain.messages import Diagnostic
from elabfront.domain.state import CommandContext, ElaborationState, OutputEntry
from elabfront.domain.types import Severity


def mk_diagnostic(
    text: str,
    pos: int | None,
    ctx: CommandContext,
    severity: Severity = Severity.ERROR,
) -> Diagnostic:
    """Build a diagnostic at *pos*, or at the command position when *pos* is None."""
    return Diagnostic(file_name=ctx.file_name, pos=ctx.position(pos), severity=severity, text=text)


def mk_message(
    text: str,
    pos: int | None,
    ctx: CommandContext,
    state: ElaborationState,
    severity: Severity = Severity.ERROR,
) -> ElaborationState:
    """Return *state* with exactly one diagnostic appended to its log."""
    diagnostic = mk_diagnostic(text, pos, ctx, severity)
    return state.model_copy(update={"messages": state.messages.add(diagnostic)})


def error_at(ctx: CommandContext, pos: int | None, text: str) -> DirectMessage:
    """Exception carrying a ready-made error diagnostic. Callers ``raise`` it."""
    return DirectMessage(mk_diagnostic(text, pos, ctx))


def log_output(text: str, pos: int | None, ctx: CommandContext, state: ElaborationState) -> ElaborationState:
    """Append a command result (``#check``/``#eval``/``#print``) to the output channel."""
    entry = OutputEntry(pos=ctx.position(pos), text=text)
    return state.model_copy(update={"outputs": (*state.outputs, entry)})
