"""In-memory Rich console for rendering a FrontendResult to text.

Renderers print into a :class:`BufferConsole` and return ``text()``, so the
CLI decides where the string goes. Color is only emitted for a TTY.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

from elabfront.domain.types import Severity

DEFAULT_WIDTH = 120

SEVERITY_STYLES: dict[Severity, str] = {
    Severity.ERROR: "bold red",
    Severity.WARNING: "bold yellow",
    Severity.INFORMATION: "bold blue",
}

ELAB_THEME = Theme(
    {
        "elab.ok": "bold green",
        "elab.op": "bold cyan",
        "elab.key": "dim",
        "elab.pos": "dim",
        "elab.name": "bold",
        "elab.output": "green",
        **{f"elab.{severity}": style for severity, style in SEVERITY_STYLES.items()},
    }
)


class BufferConsole(Console):
    """Console writing to a private buffer."""

    def __init__(self, *, no_color: bool = False, width: int = DEFAULT_WIDTH) -> None:
        self._text_buffer = StringIO()
        super().__init__(file=self._text_buffer, theme=ELAB_THEME, no_color=no_color, highlight=False, width=width)

    def text(self) -> str:
        return self._text_buffer.getvalue()


def create_console(*, no_color: bool = False, width: int | None = None) -> BufferConsole:
    return BufferConsole(no_color=no_color, width=width or DEFAULT_WIDTH)


def style_for_severity(severity: str) -> str:
    """Theme key for a diagnostic severity; empty for unknown values."""
    if severity in SEVERITY_STYLES:
        return f"elab.{severity}"
    return ""
