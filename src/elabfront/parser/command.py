"""Command grammar and the ``parse_command`` entry used by the driver.

    command := "def" ident [":" term] ":=" term
             | "namespace" ident
             | "section" [ident]
             | "end" [ident]
             | "open" ident+
             | "#exit"
             | "#"word [term]

An optional ``;`` after a command is consumed.

On a parse error the first error is logged (unless the previous command
already failed, to avoid cascades), the cursor jumps to the next token that
can start a command, and the partial tree is returned so it still flows
through elaboration.
"""

from __future__ import annotations

from elabfront.domain.messages import MessageLog
from elabfront.domain.state import ParserContext, ParserState
from elabfront.domain.syntax import (
    CommandSyntax,
    Def,
    End,
    EndOfInput,
    ExitDirective,
    HashCommand,
    Ident,
    Missing,
    Namespace,
    Open,
    Section,
    command_kind,
)
from elabfront.domain.types import CommandKind
from elabfront.parser.base import TokenParser, log_parse_error, recovery_point
from elabfront.parser.lexer import TokenKind
from elabfront.parser.term import parse_term

EXIT_COMMAND = "#exit"


def parse_command(
    ctx: ParserContext,
    state: ParserState,
    log: MessageLog,
) -> tuple[CommandSyntax, ParserState, MessageLog]:
    """Parse the command starting at ``state.pos``.

    Returns the syntax, the parser state positioned at the next command,
    and the log extended with any parse error.
    """
    p = TokenParser(ctx.source, state.pos)
    start = p.tok
    if start.kind == TokenKind.EOF:
        return EndOfInput(pos=start.pos), ParserState(pos=start.pos, recovering=state.recovering), log

    stx = _parse_command_body(p)

    if p.error is None:
        if p.tok.is_symbol(";"):
            p.advance()
        return stx, ParserState(pos=p.tok.pos, recovering=False), log

    if not state.recovering:
        log = log_parse_error(ctx, log, p.error)
    resume = recovery_point(ctx.source, start, p.error.pos)
    return stx, ParserState(pos=resume, recovering=True), log


def is_eoi(stx: CommandSyntax) -> bool:
    return command_kind(stx) is CommandKind.END_OF_INPUT


def is_exit_command(stx: CommandSyntax) -> bool:
    return command_kind(stx) is CommandKind.EXIT


def _parse_command_body(p: TokenParser) -> CommandSyntax:
    tok = p.tok
    if tok.kind == TokenKind.HASH:
        p.advance()
        if tok.text == EXIT_COMMAND:
            return ExitDirective(pos=tok.pos)
        arg = parse_term(p) if p.tok.starts_term else None
        return HashCommand(pos=tok.pos, name=tok.text, arg=arg)

    if tok.is_keyword("def"):
        p.advance()
        name = p.ident()
        type_ = None
        if not p.failed and p.tok.is_symbol(":"):
            p.advance()
            type_ = parse_term(p)
        if p.expect_symbol(":="):
            value = parse_term(p)
        else:
            value = Missing(p.tok.pos)
        return Def(pos=tok.pos, name=name, value=value, type=type_)

    if tok.is_keyword("namespace"):
        p.advance()
        return Namespace(pos=tok.pos, name=p.ident())

    if tok.is_keyword("section") or tok.is_keyword("end"):
        p.advance()
        name = None
        if p.tok.kind == TokenKind.IDENT:
            ident_tok = p.advance()
            name = Ident(pos=ident_tok.pos, name=ident_tok.text)
        if tok.text == "section":
            return Section(pos=tok.pos, name=name)
        return End(pos=tok.pos, name=name)

    if tok.is_keyword("open"):
        p.advance()
        names: list[Ident | Missing] = [p.ident()]
        while not p.failed and p.tok.kind == TokenKind.IDENT:
            names.append(p.ident())
        return Open(pos=tok.pos, names=tuple(names))

    if tok.is_keyword("import"):
        return p.fail("invalid 'import' command, it must be used in the beginning of the file")

    return p.expected("command")
