"""Built-in command elaborators.

Each elaborator takes ``(stx, ctx, state)`` and returns the next state, or
raises an :class:`~elabfront.domain.exceptions.ElabException`. They never
touch *state* in place; every change goes through ``model_copy``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from elabfront.domain.environment import TYPE_SORT, ConstantInfo, render_value
from elabfront.domain.exceptions import Silent, UnresolvedReferenceLike
from elabfront.domain.state import CommandContext, ElaborationState, Scope
from elabfront.domain.syntax import Def, End, HashCommand, Ident, Namespace, Open, Section, format_term
from elabfront.domain.types import ScopeKind
from elabfront.elab.log import error_at, log_output
from elabfront.elab.term import TermElaborator, resolve_name, resolve_namespace

CommandElab = Callable[[Any, CommandContext, ElaborationState], ElaborationState]


def _qualify(namespace: str, name: str) -> str:
    return f"{namespace}.{name}" if namespace else name


def _push_scope(state: ElaborationState, scope: Scope) -> ElaborationState:
    return state.model_copy(update={"scopes": (*state.scopes, scope)})


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


def elab_def(stx: Def, ctx: CommandContext, state: ElaborationState) -> ElaborationState:
    if not isinstance(stx.name, Ident):
        raise Silent()
    full_name = _qualify(state.namespace, stx.name.name)
    if state.env.contains(full_name):
        raise error_at(ctx, stx.name.pos, f"'{full_name}' has already been declared")

    terms = TermElaborator(ctx, state.scope)
    declared = terms.elab_type(stx.type) if stx.type is not None else None
    result = terms.elab(stx.value)
    if declared is not None and result.type != declared:
        raise error_at(
            ctx,
            stx.value.pos,
            f"type mismatch: '{full_name}' is declared with type {declared}, "
            f"but the value has type {result.type}",
        )

    info = ConstantInfo(name=full_name, type=result.type, value=result.value, module=ctx.file_name)
    return state.model_copy(update={"env": state.env.add_decl(info)})


# ---------------------------------------------------------------------------
# Scopes
# ---------------------------------------------------------------------------


def elab_namespace(stx: Namespace, ctx: CommandContext, state: ElaborationState) -> ElaborationState:
    if not isinstance(stx.name, Ident):
        raise Silent()
    namespace = _qualify(state.namespace, stx.name.name)
    scope = Scope(
        kind=ScopeKind.NAMESPACE,
        header=stx.name.name,
        namespace=namespace,
        opens=state.scope.opens,
    )
    state = state.model_copy(update={"env": state.env.register_namespace(namespace)})
    return _push_scope(state, scope)


def elab_section(stx: Section, ctx: CommandContext, state: ElaborationState) -> ElaborationState:
    scope = Scope(
        kind=ScopeKind.SECTION,
        header=stx.name.name if stx.name else "",
        namespace=state.namespace,
        opens=state.scope.opens,
    )
    return _push_scope(state, scope)


def elab_end(stx: End, ctx: CommandContext, state: ElaborationState) -> ElaborationState:
    if len(state.scopes) <= 1:
        raise error_at(ctx, stx.pos, "invalid 'end', insufficient scopes")
    given = stx.name.name if stx.name else ""
    if given != state.scope.header:
        raise error_at(ctx, stx.pos, "invalid 'end', name mismatch")
    return state.model_copy(update={"scopes": state.scopes[:-1]})


def elab_open(stx: Open, ctx: CommandContext, state: ElaborationState) -> ElaborationState:
    opens = list(state.scope.opens)
    for name in stx.names:
        if not isinstance(name, Ident):
            raise Silent()
        resolved = resolve_namespace(state.env, name.name, state.scope)
        if resolved is None:
            raise error_at(ctx, name.pos, f"unknown namespace '{name.name}'")
        if resolved not in opens:
            opens.append(resolved)
    scope = state.scope.model_copy(update={"opens": tuple(opens)})
    return state.model_copy(update={"scopes": (*state.scopes[:-1], scope)})


# ---------------------------------------------------------------------------
# Informational commands
# ---------------------------------------------------------------------------


def elab_check(stx: HashCommand, ctx: CommandContext, state: ElaborationState) -> ElaborationState:
    if stx.arg is None:
        raise error_at(ctx, stx.pos, f"'{stx.name}' expects a term")
    result = TermElaborator(ctx, state.scope).elab(stx.arg)
    return log_output(f"{format_term(stx.arg)} : {result.type}", stx.pos, ctx, state)


def elab_eval(stx: HashCommand, ctx: CommandContext, state: ElaborationState) -> ElaborationState:
    if stx.arg is None:
        raise error_at(ctx, stx.pos, f"'{stx.name}' expects a term")
    result = TermElaborator(ctx, state.scope).elab(stx.arg)
    if result.type == TYPE_SORT:
        raise error_at(ctx, stx.arg.pos, "cannot evaluate a type")
    if result.value is None:
        raise error_at(ctx, stx.arg.pos, "cannot evaluate a term that depends on an axiom")
    return log_output(render_value(result.value), stx.pos, ctx, state)


def elab_print(stx: HashCommand, ctx: CommandContext, state: ElaborationState) -> ElaborationState:
    if stx.arg is None:
        raise error_at(ctx, stx.pos, f"'{stx.name}' expects an identifier")
    if not isinstance(stx.arg, Ident):
        raise UnresolvedReferenceLike(stx.arg)
    info = resolve_name(state.env, stx.arg.name, state.scope)
    if info is None:
        raise UnresolvedReferenceLike(stx.arg)
    return log_output(info.describe(), stx.pos, ctx, state)


BUILTIN_COMMAND_ELABORATORS: dict[str, CommandElab] = {
    "def": elab_def,
    "namespace": elab_namespace,
    "section": elab_section,
    "end": elab_end,
    "open": elab_open,
    "#check": elab_check,
    "#eval": elab_eval,
    "#print": elab_print,
}
