"""Parser — tokenizer, header and command grammar.

Consumed by the driver only through ``parse_header``, ``parse_command``,
``is_eoi`` and ``is_exit_command``.
"""

from elabfront.parser.command import is_eoi, is_exit_command, parse_command
from elabfront.parser.header import mk_parser_context, parse_header

__all__ = ["is_eoi", "is_exit_command", "mk_parser_context", "parse_command", "parse_header"]
