"""Tests for the immutable environment and constant rendering."""

from __future__ import annotations

import pytest

from elabfront.domain.environment import (
    MAX_TRUST_LEVEL,
    ConstantInfo,
    Environment,
    mk_empty_environment,
    namespace_prefixes,
    render_value,
)
from elabfront.domain.exceptions import EnvironmentCreationFailed


class TestMkEmptyEnvironment:
    def test_default_is_max_trust(self):
        env = mk_empty_environment()
        assert env.trust_level == MAX_TRUST_LEVEL
        assert env.names() == []

    @pytest.mark.parametrize("level", [-1, MAX_TRUST_LEVEL + 1])
    def test_out_of_range_trust_level(self, level):
        with pytest.raises(EnvironmentCreationFailed) as exc_info:
            mk_empty_environment(level)
        assert exc_info.value.code == "ENV_CREATION_FAILED"
        assert exc_info.value.detail == {"trust_level": level}


class TestEnvironment:
    def test_add_decl_does_not_mutate(self):
        env = Environment()
        extended = env.add_decl(ConstantInfo(name="x", type="Nat", value=1))
        assert not env.contains("x")
        assert extended.find("x").value == 1

    def test_add_decl_duplicate(self):
        env = Environment().add_decl(ConstantInfo(name="x", type="Nat", value=1))
        with pytest.raises(ValueError, match="'x' has already been declared"):
            env.add_decl(ConstantInfo(name="x", type="Nat", value=2))

    def test_add_decl_registers_namespaces(self):
        env = Environment().add_decl(ConstantInfo(name="A.B.c", type="Nat", value=1))
        assert env.is_namespace("A")
        assert env.is_namespace("A.B")
        assert not env.is_namespace("A.B.c")

    def test_register_namespace(self):
        env = Environment().register_namespace("Foo.Bar")
        assert env.is_namespace("Foo")
        assert env.is_namespace("Foo.Bar")

    def test_register_existing_namespace_is_identity(self):
        env = Environment().register_namespace("Foo")
        assert env.register_namespace("Foo") is env


class TestNamespacePrefixes:
    def test_dotted(self):
        assert namespace_prefixes("A.B.c") == frozenset({"A", "A.B"})

    def test_plain(self):
        assert namespace_prefixes("x") == frozenset()


class TestConstantInfoDescribe:
    def test_type_constant(self):
        info = ConstantInfo(name="Nat", type="Type", value="Nat")
        assert info.describe() == "inductive Nat : Type"

    def test_type_alias(self):
        info = ConstantInfo(name="MyNat", type="Type", value="Nat")
        assert info.describe() == "def MyNat : Type := Nat"

    def test_axiom(self):
        assert ConstantInfo(name="a", type="Nat").describe() == "axiom a : Nat"

    def test_definition(self):
        info = ConstantInfo(name="s", type="String", value="hi")
        assert info.describe() == 'def s : String := "hi"'


class TestRenderValue:
    def test_bool(self):
        assert render_value(True) == "true"
        assert render_value(False) == "false"

    def test_string_escapes(self):
        assert render_value('a"b\n') == '"a\\"b\\n"'

    def test_nat(self):
        assert render_value(42) == "42"

    def test_nat_past_int_str_limit(self, int_digit_limit):
        value = 7 * 10 ** (3 * int_digit_limit) + 1
        text = render_value(value)
        assert len(text) == 3 * int_digit_limit + 1
        assert text.startswith("7000")
        assert text.endswith("0001")


class TestReadOnlyConstants:
    def test_constants_cannot_be_assigned(self):
        env = mk_empty_environment()
        with pytest.raises(TypeError):
            env.constants["x"] = ConstantInfo(name="x", type="Nat", value=1)
        assert not env.contains("x")

    def test_add_decl_result_is_read_only(self):
        env = mk_empty_environment().add_decl(ConstantInfo(name="x", type="Nat", value=1))
        with pytest.raises(TypeError):
            env.constants["y"] = ConstantInfo(name="y", type="Nat", value=2)

    def test_dump_keeps_constants(self):
        env = mk_empty_environment().add_decl(ConstantInfo(name="x", type="Nat", value=1))
        assert env.model_dump()["constants"]["x"]["value"] == 1
