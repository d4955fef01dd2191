"""Syntax tree nodes produced by the parser.

Pure frozen dataclasses, no behaviour beyond classification. Every node
carries ``pos``, the source offset of its first token.

Command nodes expose ``kind``, the key used to look up a command
elaborator (``"def"``, ``"namespace"``, ``"#check"``, ...).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from elabfront.domain.types import CommandKind

# ---------------------------------------------------------------------------
# Error marker
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Missing:
    """Placeholder left by the parser where it failed to produce a node."""

    pos: int
    kind: ClassVar[str] = "missing"


# ---------------------------------------------------------------------------
# Terms
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NumLit:
    pos: int
    value: int


@dataclass(frozen=True)
class StrLit:
    pos: int
    value: str


@dataclass(frozen=True)
class Ident:
    """A possibly dotted identifier, e.g. ``Foo.bar``."""

    pos: int
    name: str


@dataclass(frozen=True)
class BinOp:
    pos: int
    op: str
    lhs: Term
    rhs: Term


Term = NumLit | StrLit | Ident | BinOp | Missing


# ---------------------------------------------------------------------------
# Header
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ImportDecl:
    pos: int
    module: str


@dataclass(frozen=True)
class Header:
    """Module header: optional ``prelude`` marker followed by imports."""

    pos: int
    prelude: bool = False
    imports: tuple[ImportDecl, ...] = ()


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EndOfInput:
    pos: int
    kind: ClassVar[str] = "eoi"


@dataclass(frozen=True)
class ExitDirective:
    pos: int
    kind: ClassVar[str] = "#exit"


@dataclass(frozen=True)
class Def:
    pos: int
    name: Ident | Missing
    value: Term
    type: Term | None = None
    kind: ClassVar[str] = "def"


@dataclass(frozen=True)
class Namespace:
    pos: int
    name: Ident | Missing
    kind: ClassVar[str] = "namespace"


@dataclass(frozen=True)
class Section:
    pos: int
    name: Ident | None = None
    kind: ClassVar[str] = "section"


@dataclass(frozen=True)
class End:
    pos: int
    name: Ident | None = None
    kind: ClassVar[str] = "end"


@dataclass(frozen=True)
class Open:
    pos: int
    names: tuple[Ident | Missing, ...]
    kind: ClassVar[str] = "open"


@dataclass(frozen=True)
class HashCommand:
    """``#word [term]`` — ``#check``, ``#eval``, ``#print`` or plugin-defined."""

    pos: int
    name: str
    arg: Term | None = None

    @property
    def kind(self) -> str:
        return self.name


CommandSyntax = EndOfInput | ExitDirective | Def | Namespace | Section | End | Open | HashCommand | Missing


def command_kind(stx: CommandSyntax) -> CommandKind:
    """Map a command node to its top-level tag."""
    if isinstance(stx, EndOfInput):
        return CommandKind.END_OF_INPUT
    if isinstance(stx, ExitDirective):
        return CommandKind.EXIT
    return CommandKind.REGULAR


def contains_missing(node: object) -> bool:
    """Whether *node* is, or transitively contains, a :class:`Missing` marker."""
    stack: list[object] = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, Missing):
            return True
        if isinstance(current, BinOp):
            stack.extend((current.lhs, current.rhs))
        elif isinstance(current, Def):
            stack.extend((current.name, current.value, current.type))
        elif isinstance(current, Namespace):
            stack.append(current.name)
        elif isinstance(current, Open):
            stack.extend(current.names)
        elif isinstance(current, HashCommand):
            stack.append(current.arg)
    return False


_PRECEDENCE = {"+": 65, "++": 65, "*": 70}


def format_term(term: Term) -> str:
    """Render a term back to source syntax with minimal parentheses."""
    if isinstance(term, NumLit):
        return str(term.value)
    if isinstance(term, StrLit):
        escaped = term.value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
        return f'"{escaped}"'
    if isinstance(term, Ident):
        return term.name
    if isinstance(term, BinOp):
        prec = _PRECEDENCE.get(term.op, 0)
        lhs = format_term(term.lhs)
        rhs = format_term(term.rhs)
        if isinstance(term.lhs, BinOp) and _PRECEDENCE.get(term.lhs.op, 0) < prec:
            lhs = f"({lhs})"
        if isinstance(term.rhs, BinOp) and _PRECEDENCE.get(term.rhs.op, 0) <= prec:
            rhs = f"({rhs})"
        return f"{lhs} {term.op} {rhs}"
    return "<missing>"
