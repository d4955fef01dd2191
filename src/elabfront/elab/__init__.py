"""Elaborator — command and term semantics, header processing.

May import from domain. Must never import from frontend, commands, or output.
"""

from elabfront.elab.command import Elaborator
from elabfront.elab.header import process_header
from elabfront.elab.log import mk_message

__all__ = ["Elaborator", "mk_message", "process_header"]
