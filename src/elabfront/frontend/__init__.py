"""Frontend layer — command driver, exception classifier, entry point.

May import from domain, parser, elab, plugins, and config models.
Must never import from commands or output.
"""

from elabfront.frontend.entry import run, scan_commands
from elabfront.frontend.result import FrontendError, FrontendResult

__all__ = ["FrontendError", "FrontendResult", "run", "scan_commands"]
