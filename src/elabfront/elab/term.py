"""Term elaboration: name resolution, type checking, and evaluation.

Terms are tiny (literals, constants, ``+ * ++``), so elaboration infers a
type and computes the value in one pass.
"""

from __future__ import annotations

from dataclasses import dataclass

from elabfront.domain.environment import TYPE_SORT, ConstantInfo, Environment
from elabfront.domain.exceptions import InternalFailure, MetaError, Silent, UnresolvedReferenceLike
from elabfront.domain.state import CommandContext, Scope
from elabfront.domain.syntax import BinOp, Ident, Missing, NumLit, StrLit, Term
from elabfront.elab.log import error_at

NAT = "Nat"
STRING = "String"
BOOL = "Bool"

MAX_REC_DEPTH_MESSAGE = "maximum recursion depth has been reached"

_OPERAND_TYPES = {"+": NAT, "*": NAT, "++": STRING}


@dataclass(frozen=True)
class Elaborated:
    """Type and value of an elaborated term.

    For terms of type ``Type`` the value is the name of the denoted type.
    ``value`` is None for constants declared without a value.
    """

    type: str
    value: bool | int | str | None


def resolve_name(env: Environment, name: str, scope: Scope) -> ConstantInfo | None:
    """Look *name* up from the current namespace outward, then in opened namespaces."""
    namespace = scope.namespace
    while True:
        candidate = f"{namespace}.{name}" if namespace else name
        info = env.find(candidate)
        if info is not None:
            return info
        if not namespace:
            break
        namespace = namespace.rpartition(".")[0]
    for opened in scope.opens:
        info = env.find(f"{opened}.{name}")
        if info is not None:
            return info
    return None


def resolve_namespace(env: Environment, name: str, scope: Scope) -> str | None:
    """Same lookup order as :func:`resolve_name`, for namespaces."""
    namespace = scope.namespace
    while True:
        candidate = f"{namespace}.{name}" if namespace else name
        if env.is_namespace(candidate):
            return candidate
        if not namespace:
            return None
        namespace = namespace.rpartition(".")[0]


class TermElaborator:
    """Elaborates terms against one command's context and scope."""

    def __init__(self, ctx: CommandContext, scope: Scope) -> None:
        self._ctx = ctx
        self._scope = scope

    def elab(self, term: Term) -> Elaborated:
        try:
            return self._elab(term, 0)
        except RecursionError as exc:
            raise InternalFailure(MetaError(MAX_REC_DEPTH_MESSAGE, cause=exc)) from exc

    def elab_type(self, term: Term) -> str:
        """Elaborate *term* as a type and return the type's name."""
        result = self.elab(term)
        if result.type != TYPE_SORT:
            raise error_at(self._ctx, term.pos, f"type expected, got term of type {result.type}")
        if not isinstance(result.value, str):
            raise InternalFailure(MetaError(f"type denoted by a {type(result.value).__name__} value"))
        return result.value

    def _elab(self, term: Term, depth: int) -> Elaborated:
        if depth > self._ctx.max_rec_depth:
            raise InternalFailure(MetaError(MAX_REC_DEPTH_MESSAGE))
        if isinstance(term, Missing):
            raise Silent()
        if isinstance(term, NumLit):
            return Elaborated(NAT, term.value)
        if isinstance(term, StrLit):
            return Elaborated(STRING, term.value)
        if isinstance(term, Ident):
            return self._elab_ident(term)
        if isinstance(term, BinOp):
            return self._elab_binop(term, depth)
        raise UnresolvedReferenceLike(term)

    def _elab_ident(self, ident: Ident) -> Elaborated:
        info = resolve_name(self._ctx.env, ident.name, self._scope)
        if info is None:
            raise UnresolvedReferenceLike(ident)
        if info.type == TYPE_SORT:
            return Elaborated(TYPE_SORT, info.value if info.value is not None else info.name)
        return Elaborated(info.type, info.value)

    def _elab_binop(self, term: BinOp, depth: int) -> Elaborated:
        expected = _OPERAND_TYPES.get(term.op)
        if expected is None:
            raise UnresolvedReferenceLike(term)
        lhs = self._elab(term.lhs, depth + 1)
        rhs = self._elab(term.rhs, depth + 1)
        for operand, result in ((term.lhs, lhs), (term.rhs, rhs)):
            if result.type != expected:
                raise error_at(
                    self._ctx,
                    operand.pos,
                    f"type mismatch: operator '{term.op}' expects {expected}, got {result.type}",
                )
        if lhs.value is None or rhs.value is None:
            return Elaborated(expected, None)
        if term.op == "+":
            return Elaborated(NAT, lhs.value + rhs.value)
        if term.op == "*":
            return Elaborated(NAT, lhs.value * rhs.value)
        return Elaborated(STRING, f"{lhs.value}{rhs.value}")
