"""Tokenizer for the command language.

Stateless: :func:`next_token` lexes one token starting at an offset, after
skipping whitespace and ``--`` line comments. The parser never needs more
than one token of lookahead, so there is no token stream object.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum


class TokenKind(StrEnum):
    IDENT = "ident"
    KEYWORD = "keyword"
    HASH = "hash"
    NUM = "num"
    STR = "str"
    SYMBOL = "symbol"
    EOF = "eof"
    ERROR = "error"


KEYWORDS = frozenset({"def", "namespace", "section", "end", "open", "import", "prelude"})

# Keywords that may start a command; used for error recovery.
COMMAND_KEYWORDS = frozenset({"def", "namespace", "section", "end", "open"})

_TRIVIA = re.compile(r"(?:\s+|--[^\n]*)*")
_STR = re.compile(r'"(?:[^"\\\n]|\\.)*"')
_UNTERMINATED_STR = re.compile(r'"(?:[^"\\\n]|\\.)*')
_HASH = re.compile(r"#[A-Za-z_]+")
_IDENT = re.compile(r"[A-Za-z_][A-Za-z0-9_']*(?:\.[A-Za-z_][A-Za-z0-9_']*)*")
_NUM = re.compile(r"\d+")
_SYMBOL = re.compile(r":=|\+\+|[:()+*;]")

_ESCAPES = {"n": "\n", "t": "\t", '"': '"', "\\": "\\"}


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    pos: int
    end: int

    def is_symbol(self, text: str) -> bool:
        return self.kind == TokenKind.SYMBOL and self.text == text

    def is_keyword(self, text: str) -> bool:
        return self.kind == TokenKind.KEYWORD and self.text == text

    @property
    def starts_command(self) -> bool:
        if self.kind == TokenKind.HASH:
            return True
        return self.kind == TokenKind.KEYWORD and self.text in COMMAND_KEYWORDS

    @property
    def starts_term(self) -> bool:
        return self.kind in (TokenKind.IDENT, TokenKind.NUM, TokenKind.STR) or self.is_symbol("(")


def skip_trivia(source: str, pos: int) -> int:
    """Return the first offset at or after *pos* that is not whitespace or a comment."""
    match = _TRIVIA.match(source, pos)
    return match.end() if match else pos


def next_token(source: str, pos: int) -> Token:
    """Lex the token that starts at or after *pos*."""
    start = skip_trivia(source, pos)
    if start >= len(source):
        return Token(TokenKind.EOF, "", len(source), len(source))

    match = _STR.match(source, start)
    if match:
        return Token(TokenKind.STR, match.group(), start, match.end())
    if source[start] == '"':
        bad = _UNTERMINATED_STR.match(source, start)
        end = bad.end() if bad else start + 1
        return Token(TokenKind.ERROR, "unterminated string literal", start, end)

    match = _HASH.match(source, start)
    if match:
        return Token(TokenKind.HASH, match.group(), start, match.end())

    match = _IDENT.match(source, start)
    if match:
        text = match.group()
        kind = TokenKind.KEYWORD if text in KEYWORDS else TokenKind.IDENT
        return Token(kind, text, start, match.end())

    match = _NUM.match(source, start)
    if match:
        return Token(TokenKind.NUM, match.group(), start, match.end())

    match = _SYMBOL.match(source, start)
    if match:
        return Token(TokenKind.SYMBOL, match.group(), start, match.end())

    return Token(TokenKind.ERROR, f"unexpected character {source[start]!r}", start, start + 1)


def decode_string(literal: str) -> str:
    """Strip quotes and resolve escapes of a ``STR`` token."""
    body = literal[1:-1]
    out: list[str] = []
    idx = 0
    while idx < len(body):
        ch = body[idx]
        if ch == "\\" and idx + 1 < len(body):
            nxt = body[idx + 1]
            out.append(_ESCAPES.get(nxt, nxt))
            idx += 2
            continue
        out.append(ch)
        idx += 1
    return "".join(out)


def tokenize(source: str) -> list[Token]:
    """Lex the whole buffer. Handy for tooling; the parser lexes lazily."""
    tokens: list[Token] = []
    pos = 0
    while True:
        tok = next_token(source, pos)
        tokens.append(tok)
        if tok.kind == TokenKind.EOF:
            return tokens
        pos = tok.end
