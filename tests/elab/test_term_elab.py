"""Tests for term elaboration and name resolution."""

from __future__ import annotations

import pytest

from elabfront.domain.environment import ConstantInfo
from elabfront.domain.exceptions import DirectMessage, InternalFailure, Silent, UnresolvedReferenceLike
from elabfront.domain.state import Scope
from elabfront.domain.syntax import BinOp, Ident, Missing, NumLit, StrLit
from elabfront.domain.types import ScopeKind
from elabfront.elab.term import MAX_REC_DEPTH_MESSAGE, Elaborated, TermElaborator, resolve_name


def _n(value: int, pos: int = 0) -> NumLit:
    return NumLit(pos=pos, value=value)


@pytest.fixture
def elab(init_state, command_ctx):
    def _elab(term, state=None, max_rec_depth: int = 512):
        state = state or init_state
        return TermElaborator(command_ctx(state, max_rec_depth=max_rec_depth), state.scope).elab(term)

    return _elab


class TestLiterals:
    def test_nat(self, elab):
        assert elab(_n(3)) == Elaborated("Nat", 3)

    def test_string(self, elab):
        assert elab(StrLit(pos=0, value="hi")) == Elaborated("String", "hi")

    def test_bool_constant(self, elab):
        assert elab(Ident(pos=0, name="true")) == Elaborated("Bool", True)

    def test_type_constant(self, elab):
        assert elab(Ident(pos=0, name="Nat")) == Elaborated("Type", "Nat")


class TestOperators:
    def test_arithmetic(self, elab):
        term = BinOp(pos=0, op="+", lhs=_n(1), rhs=BinOp(pos=0, op="*", lhs=_n(2), rhs=_n(3)))
        assert elab(term) == Elaborated("Nat", 7)

    def test_append(self, elab):
        term = BinOp(pos=0, op="++", lhs=StrLit(pos=0, value="a"), rhs=StrLit(pos=0, value="b"))
        assert elab(term) == Elaborated("String", "ab")

    def test_mismatch(self, elab):
        term = BinOp(pos=0, op="+", lhs=_n(1), rhs=StrLit(pos=4, value="a"))
        with pytest.raises(DirectMessage) as exc_info:
            elab(term)
        assert exc_info.value.diagnostic.text == "type mismatch: operator '+' expects Nat, got String"

    def test_axiom_operand_has_no_value(self, init_state, elab):
        state = init_state.model_copy(update={"env": init_state.env.add_decl(ConstantInfo(name="a", type="Nat"))})
        term = BinOp(pos=0, op="+", lhs=Ident(pos=0, name="a"), rhs=_n(1))
        assert elab(term, state) == Elaborated("Nat", None)


class TestFailures:
    def test_unknown_identifier(self, elab):
        ident = Ident(pos=5, name="nope")
        with pytest.raises(UnresolvedReferenceLike) as exc_info:
            elab(ident)
        assert exc_info.value.node is ident

    def test_missing_is_silent(self, elab):
        with pytest.raises(Silent):
            elab(BinOp(pos=0, op="+", lhs=_n(1), rhs=Missing(pos=3)))

    def test_max_rec_depth(self, elab):
        term = BinOp(pos=0, op="+", lhs=BinOp(pos=0, op="+", lhs=_n(1), rhs=_n(2)), rhs=_n(3))
        with pytest.raises(InternalFailure) as exc_info:
            elab(term, max_rec_depth=1)
        assert exc_info.value.error.to_message_data() == MAX_REC_DEPTH_MESSAGE

    def test_interpreter_recursion_limit_becomes_internal_failure(self, elab):
        term = _n(0)
        for i in range(20_000):
            term = BinOp(pos=0, op="+", lhs=term, rhs=_n(i))
        with pytest.raises(InternalFailure) as exc_info:
            elab(term, max_rec_depth=10**9)
        assert isinstance(exc_info.value.error.cause, RecursionError)

    def test_type_constant_with_non_name_value(self, init_state, command_ctx):
        env = init_state.env.add_decl(ConstantInfo(name="Odd", type="Type", value=3))
        state = init_state.model_copy(update={"env": env})
        elaborator = TermElaborator(command_ctx(state), state.scope)
        with pytest.raises(InternalFailure) as exc_info:
            elaborator.elab_type(Ident(pos=0, name="Odd"))
        assert exc_info.value.error.to_message_data() == "type denoted by a int value"


class TestResolveName:
    @pytest.fixture
    def env(self, init_state):
        env = init_state.env
        for name in ("A.x", "A.B.y", "C.z", "x"):
            env = env.add_decl(ConstantInfo(name=name, type="Nat", value=len(name)))
        return env

    def test_innermost_namespace_wins(self, env):
        scope = Scope(kind=ScopeKind.NAMESPACE, header="B", namespace="A.B")
        assert resolve_name(env, "x", scope).name == "A.x"
        assert resolve_name(env, "y", scope).name == "A.B.y"

    def test_root(self, env):
        scope = Scope(kind=ScopeKind.NAMESPACE, header="C", namespace="C")
        assert resolve_name(env, "x", scope).name == "x"

    def test_opened_namespace(self, env):
        scope = Scope(kind=ScopeKind.SECTION, header="", opens=("C",))
        assert resolve_name(env, "z", scope).name == "C.z"

    def test_not_found(self, env):
        scope = Scope(kind=ScopeKind.ROOT, header="root")
        assert resolve_name(env, "z", scope) is None
