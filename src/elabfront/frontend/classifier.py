"""Turn a recoverable elaboration exception into at most one diagnostic."""

from __future__ import annotations

import logging

from elabfront.domain.exceptions import (
    DirectMessage,
    ElabException,
    InternalFailure,
    Silent,
    Unclassified,
    UnresolvedReferenceLike,
)
from elabfront.domain.state import CommandContext, ElaborationState
from elabfront.domain.syntax import Ident
from elabfront.elab.log import mk_message

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = "unexpected syntax"


def log_elab_exception(exc: ElabException, ctx: CommandContext, state: ElaborationState) -> ElaborationState:
    """Append the diagnostic for *exc* to the log of *state*.

    Never raises. The environment of *state* is returned untouched.
    """
    if isinstance(exc, Silent):
        return state
    if isinstance(exc, DirectMessage):
        return state.model_copy(update={"messages": state.messages.add(exc.diagnostic)})
    if isinstance(exc, UnresolvedReferenceLike) and isinstance(exc.node, Ident):
        return mk_message(f"unknown identifier '{exc.node.name}'", exc.node.pos, ctx, state)
    if isinstance(exc, InternalFailure):
        return mk_message(exc.error.to_message_data(), None, ctx, state)
    if isinstance(exc, Unclassified) and exc.detail:
        return mk_message(exc.detail, None, ctx, state)

    logger.debug("No specific message for %s, using default template", type(exc).__name__)
    return mk_message(DEFAULT_TEMPLATE, None, ctx, state)
