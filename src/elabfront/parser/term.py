"""Term grammar.

    term := mul (("+" | "++") mul)*
    mul  := atom ("*" atom)*
    atom := nat | string | ident | "(" term ")"

Operators are left associative; ``*`` binds tighter than ``+`` and ``++``.
"""

from __future__ import annotations

from elabfront.domain.syntax import BinOp, Ident, Missing, NumLit, StrLit, Term
from elabfront.parser.base import TokenParser
from elabfront.parser.lexer import TokenKind, decode_string

# Parenthesis nesting limit; keeps the recursive descent well inside the
# interpreter's recursion limit.
MAX_PAREN_DEPTH = 128

ADD_OPERATORS = ("+", "++")


def parse_term(p: TokenParser) -> Term:
    if p.failed:
        return Missing(p.tok.pos)
    lhs = _parse_mul(p)
    while not p.failed and p.tok.kind == TokenKind.SYMBOL and p.tok.text in ADD_OPERATORS:
        op = p.advance()
        rhs = _parse_mul(p)
        lhs = BinOp(pos=op.pos, op=op.text, lhs=lhs, rhs=rhs)
    return lhs


def _parse_mul(p: TokenParser) -> Term:
    lhs = _parse_atom(p)
    while not p.failed and p.tok.is_symbol("*"):
        op = p.advance()
        rhs = _parse_atom(p)
        lhs = BinOp(pos=op.pos, op=op.text, lhs=lhs, rhs=rhs)
    return lhs


def _parse_atom(p: TokenParser) -> Term:
    if p.failed:
        return Missing(p.tok.pos)
    tok = p.tok
    if tok.kind == TokenKind.NUM:
        try:
            value = int(tok.text)
        except ValueError:
            # beyond the interpreter's int/str conversion limit
            return p.fail(f"numeric literal too large ({len(tok.text)} digits)")
        p.advance()
        return NumLit(pos=tok.pos, value=value)
    if tok.kind == TokenKind.STR:
        p.advance()
        return StrLit(pos=tok.pos, value=decode_string(tok.text))
    if tok.kind == TokenKind.IDENT:
        p.advance()
        return Ident(pos=tok.pos, name=tok.text)
    if tok.is_symbol("("):
        if p.depth >= MAX_PAREN_DEPTH:
            return p.fail("maximum nesting depth exceeded")
        p.advance()
        p.depth += 1
        try:
            inner = parse_term(p)
        finally:
            p.depth -= 1
        p.expect_symbol(")")
        return inner
    return p.expected("term")
