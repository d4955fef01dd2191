"""Shared recursive-descent machinery.

A :class:`TokenParser` holds one token of lookahead and the first error it
hit. Once an error is recorded every rule returns a :class:`Missing` marker
without consuming input, so a failed parse still yields a (partial) tree.
"""

from __future__ import annotations

from dataclasses import dataclass

from elabfront.domain.messages import Diagnostic, MessageLog
from elabfront.domain.state import ParserContext
from elabfront.domain.syntax import Ident, Missing
from elabfront.domain.types import Severity
from elabfront.parser.lexer import Token, TokenKind, next_token


@dataclass(frozen=True)
class ParseError:
    pos: int
    message: str


def describe(tok: Token) -> str:
    if tok.kind == TokenKind.EOF:
        return "end of input"
    return f"token '{tok.text}'"


class TokenParser:
    """Cursor over the source with single-token lookahead."""

    def __init__(self, source: str, pos: int) -> None:
        self.source = source
        self.tok = next_token(source, pos)
        self.last_end = pos
        self.error: ParseError | None = None
        self.depth = 0

    @property
    def failed(self) -> bool:
        return self.error is not None

    def advance(self) -> Token:
        tok = self.tok
        self.last_end = tok.end
        self.tok = next_token(self.source, tok.end)
        return tok

    def fail(self, message: str, pos: int | None = None) -> Missing:
        """Record *message* unless an earlier error exists; return a marker."""
        if self.error is None:
            self.error = ParseError(self.tok.pos if pos is None else pos, message)
        return Missing(self.tok.pos)

    def expected(self, what: str) -> Missing:
        if self.tok.kind == TokenKind.ERROR:
            return self.fail(self.tok.text)
        return self.fail(f"unexpected {describe(self.tok)}; expected {what}")

    def expect_symbol(self, text: str) -> bool:
        if self.failed:
            return False
        if self.tok.is_symbol(text):
            self.advance()
            return True
        self.expected(f"'{text}'")
        return False

    def ident(self) -> Ident | Missing:
        if self.failed:
            return Missing(self.tok.pos)
        if self.tok.kind != TokenKind.IDENT:
            return self.expected("identifier")
        tok = self.advance()
        return Ident(pos=tok.pos, name=tok.text)


def recovery_point(source: str, start: Token, error_pos: int) -> int:
    """Offset of the first command-starting token after *start* and at or after *error_pos*."""
    tok = next_token(source, start.end)
    while tok.kind != TokenKind.EOF:
        if tok.starts_command and tok.pos >= error_pos:
            break
        tok = next_token(source, tok.end)
    return tok.pos


def log_parse_error(ctx: ParserContext, log: MessageLog, error: ParseError) -> MessageLog:
    return log.add(
        Diagnostic(
            file_name=ctx.file_name,
            pos=ctx.file_map.to_position(error.pos),
            severity=Severity.ERROR,
            text=error.message,
        )
    )
