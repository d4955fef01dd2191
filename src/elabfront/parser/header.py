"""Module header parsing and parser-context construction.

    header := ["prelude"] ("import" ident+)*
"""

from __future__ import annotations

from elabfront.domain.environment import Environment
from elabfront.domain.messages import FileMap, MessageLog
from elabfront.domain.state import ParserContext, ParserState
from elabfront.domain.syntax import Header, ImportDecl
from elabfront.parser.base import TokenParser, log_parse_error, recovery_point
from elabfront.parser.lexer import TokenKind


def mk_parser_context(env: Environment, source: str, file_name: str) -> ParserContext:
    """Build the immutable context shared by every parse of *source*."""
    return ParserContext(env=env, source=source, file_name=file_name, file_map=FileMap.of_source(source))


def parse_header(ctx: ParserContext) -> tuple[Header, ParserState, MessageLog]:
    """Parse the header at the start of the buffer.

    Returns the header, the parser state at the first command, and a log
    holding the header parse error, if any.
    """
    p = TokenParser(ctx.source, 0)
    start = p.tok
    prelude = False
    if p.tok.is_keyword("prelude"):
        p.advance()
        prelude = True

    imports: list[ImportDecl] = []
    while not p.failed and p.tok.is_keyword("import"):
        p.advance()
        if p.tok.kind != TokenKind.IDENT:
            p.expected("module name")
            break
        while p.tok.kind == TokenKind.IDENT:
            tok = p.advance()
            imports.append(ImportDecl(pos=tok.pos, module=tok.text))

    header = Header(pos=start.pos, prelude=prelude, imports=tuple(imports))
    log = MessageLog()
    if p.error is None:
        return header, ParserState(pos=p.tok.pos), log

    log = log_parse_error(ctx, log, p.error)
    resume = recovery_point(ctx.source, start, p.error.pos)
    return header, ParserState(pos=resume, recovering=True), log
