"""Environment — declarations visible to later commands.

INVARIANT: Exactly one Environment value is live at a time. Successful
commands supersede it with a new value; nothing ever mutates one in place,
so a failed command cannot leak partial declarations.
"""

from __future__ import annotations

import math
import sys
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, Field, field_serializer, field_validator

from elabfront.domain.exceptions import EnvironmentCreationFailed

# Same ceiling the kernel uses for "trust everything".
MAX_TRUST_LEVEL = 1024

TYPE_SORT = "Type"

_LOG10_2 = math.log10(2)


class ConstantInfo(BaseModel):
    """A declared constant: its type and, when known, its value."""

    model_config = {"frozen": True}

    name: str
    type: str
    value: bool | int | str | None = None
    module: str | None = None

    def describe(self) -> str:
        """Render the declaration the way ``#print`` shows it."""
        if self.type == TYPE_SORT and self.value in (None, self.name):
            return f"inductive {self.name} : {TYPE_SORT}"
        if self.type == TYPE_SORT:
            return f"def {self.name} : {TYPE_SORT} := {self.value}"
        if self.value is None:
            return f"axiom {self.name} : {self.type}"
        return f"def {self.name} : {self.type} := {render_value(self.value)}"


class EnvironmentHeader(BaseModel):
    model_config = {"frozen": True}

    module_name: str = ""
    imports: tuple[str, ...] = ()


class Environment(BaseModel):
    """Immutable map of declarations plus header metadata."""

    model_config = {"frozen": True}

    trust_level: int = 0
    header: EnvironmentHeader = Field(default_factory=EnvironmentHeader)
    constants: Mapping[str, ConstantInfo] = Field(default_factory=dict, validate_default=True)
    namespaces: frozenset[str] = frozenset()

    @field_validator("constants", mode="after")
    @classmethod
    def _read_only(cls, value: Mapping[str, ConstantInfo]) -> Mapping[str, ConstantInfo]:
        return MappingProxyType(dict(value))

    @field_serializer("constants")
    def _dump_constants(self, value: Mapping[str, ConstantInfo]) -> dict[str, ConstantInfo]:
        return dict(value)

    def contains(self, name: str) -> bool:
        return name in self.constants

    def find(self, name: str) -> ConstantInfo | None:
        return self.constants.get(name)

    def add_decl(self, info: ConstantInfo) -> Environment:
        """Return a new environment extended with *info*.

        Raises:
            ValueError: If a constant with the same name already exists.
        """
        if info.name in self.constants:
            msg = f"'{info.name}' has already been declared"
            raise ValueError(msg)
        return self.model_copy(
            update={
                "constants": MappingProxyType({**self.constants, info.name: info}),
                "namespaces": self.namespaces | namespace_prefixes(info.name),
            }
        )

    def register_namespace(self, namespace: str) -> Environment:
        """Return a new environment where *namespace* and its parents exist."""
        added = namespace_prefixes(f"{namespace}._")
        if added <= self.namespaces:
            return self
        return self.model_copy(update={"namespaces": self.namespaces | added})

    def is_namespace(self, namespace: str) -> bool:
        return namespace in self.namespaces

    def names(self) -> list[str]:
        return sorted(self.constants)


def namespace_prefixes(name: str) -> frozenset[str]:
    """All proper dotted prefixes of *name*: ``A.B.c`` → ``{A, A.B}``."""
    parts = name.split(".")[:-1]
    return frozenset(".".join(parts[: i + 1]) for i in range(len(parts)))


def mk_empty_environment(trust_level: int = MAX_TRUST_LEVEL) -> Environment:
    """Create an environment with no declarations.

    Raises:
        EnvironmentCreationFailed: If *trust_level* is outside ``0..MAX_TRUST_LEVEL``.
    """
    if not 0 <= trust_level <= MAX_TRUST_LEVEL:
        raise EnvironmentCreationFailed(
            f"invalid trust level {trust_level}, expected 0..{MAX_TRUST_LEVEL}",
            detail={"trust_level": trust_level},
        )
    return Environment(trust_level=trust_level)


def render_value(value: Any) -> str:
    """Render an evaluated value in source syntax."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
        return f'"{escaped}"'
    if isinstance(value, int):
        return _decimal(value)
    return str(value)


def _decimal(n: int) -> str:
    """``str(n)`` without tripping the interpreter's int/str digit limit."""
    limit = sys.get_int_max_str_digits()
    approx_digits = int(n.bit_length() * _LOG10_2) + 1
    if limit == 0 or approx_digits < limit:
        return str(n)
    half = approx_digits // 2
    high, low = divmod(n, 10**half)
    return _decimal(high) + _decimal(low).zfill(half)
