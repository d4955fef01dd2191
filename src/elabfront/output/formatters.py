"""Rich/JSON output helpers.

The CLI renders FrontendResult for humans (Rich) or machines (--json).
This layer picks the mode; :mod:`elabfront.output.renderers` does the drawing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

if TYPE_CHECKING:
    from elabfront.frontend.result import FrontendResult


class OutputSettings(BaseModel):
    """Output mode selected by the global CLI flags."""

    model_config = {"frozen": True}

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(result: FrontendResult, *, settings: OutputSettings | None = None) -> str:
    """Format a FrontendResult for display."""
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)

    from elabfront.output.renderers import render_quiet, render_result

    if settings.quiet:
        return render_quiet(result)
    return render_result(result, verbose=settings.verbose)
