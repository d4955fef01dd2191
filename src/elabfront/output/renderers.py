"""Operation-specific Rich renderers for FrontendResult.

Each renderer writes to a Rich Console backed by StringIO. Renderers are
dispatched by ``result.op`` in :func:`render_result`; unknown ops fall
through to a generic key-value renderer.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from elabfront.output.console import create_console, style_for_severity

if TYPE_CHECKING:
    from rich.console import Console

    from elabfront.frontend.result import FrontendResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: FrontendResult, *, verbose: bool = False) -> str:
    """Render a FrontendResult to a styled string via Rich."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return console.text().rstrip("\n")


def render_quiet(result: FrontendResult) -> str:
    """Minimal output for ``--quiet``: diagnostics only, one per line."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        lines = [str(d) for d in result.messages.messages]
        lines.append(f"ERROR: {result.op}: {msg}")
        return "\n".join(lines)
    return "\n".join(str(d) for d in result.messages.messages)


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: FrontendResult) -> None:
    if result.messages.has_errors():
        label = Text("FAILED", style="elab.error")
    else:
        label = Text("OK", style="elab.ok")
    console.print(label, Text(f"  {result.op}", style="elab.op"))


def _field(console: Console, key: str, value: Any) -> None:
    k = Text(f"  {key}: ", style="elab.key")
    if isinstance(value, list):
        value = ", ".join(str(v) for v in value) or "-"
    console.print(k, Text(str(value), style="elab.name" if key == "module_name" else ""), sep="")


def _render_diagnostics(console: Console, result: FrontendResult) -> None:
    for diag in result.messages.messages:
        line = Text()
        line.append(f"{diag.file_name}:{diag.pos}: ", style="elab.pos")
        line.append(str(diag.severity), style=style_for_severity(diag.severity))
        line.append(f": {diag.text}")
        console.print(line)


def _span_label(span: dict[str, Any]) -> Text:
    ms = span.get("duration_ms", 0.0)
    label = Text(f"{ms:.2f}ms ", style="bold red" if ms > 1000 else "yellow" if ms > 100 else "dim")
    label.append(str(span.get("name", "?")))
    notes = span.get("annotations")
    if notes:
        label.append("  " + " ".join(f"{k}={v}" for k, v in notes.items()), style="dim")
    return label


def _add_spans(parent: Tree, span: dict[str, Any]) -> None:
    branch = parent.add(_span_label(span))
    for child in span.get("children", []):
        _add_spans(branch, child)


def _render_meta(console: Console, result: FrontendResult) -> None:
    """Verbose-only: timing tree plus any other meta keys."""
    if not result.meta:
        return
    tree = Tree(Text("meta", style="dim"))
    for key, value in result.meta.items():
        if key == "telemetry":
            _add_spans(tree, value)
        else:
            tree.add(Text(f"{key}: {value}"))
    console.print()
    console.print(tree)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: FrontendResult, console: Console, *, verbose: bool = False) -> None:
    _render_diagnostics(console, result)
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="elab.error")
    op = Text(f"  {result.op}", style="elab.op")
    code = Text(f" [{err.code}]" if err else "", style="elab.key")
    console.print(label, op, code, Text(f": {msg}"), sep="")

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


# ── Operation renderers ───────────────────────────────────────────────


def _render_run(result: FrontendResult, console: Console, *, verbose: bool = False) -> None:
    """Outputs first, then diagnostics, then a summary."""
    for entry in result.outputs:
        console.print(Text(entry.text, style="elab.output"))
    _render_diagnostics(console, result)
    _status_line(console, result)
    for key in ("module_name", "commands", "errors", "declarations"):
        if key in result.data:
            _field(console, key, result.data[key])
    if verbose:
        _field(console, "imports", result.data.get("imports", []))
        _render_meta(console, result)


def _render_parse(result: FrontendResult, console: Console, *, verbose: bool = False) -> None:
    _render_diagnostics(console, result)
    _status_line(console, result)
    _field(console, "module_name", result.data.get("module_name", ""))
    _field(console, "imports", result.data.get("imports", []))

    commands = result.data.get("commands", [])
    if not commands:
        console.print(Text("  no commands", style="dim"))
        return

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Pos", style="elab.pos", no_wrap=True)
    table.add_column("Kind", style="elab.op")
    table.add_column("OK")
    if verbose:
        table.add_column("Text")
    for cmd in commands:
        row: list[str | Text] = [str(cmd["position"]), str(cmd["kind"]), "yes" if cmd["ok"] else "no"]
        if verbose:
            row.append(Text(str(cmd["text"])))
        table.add_row(*row)
    console.print(table)


def _render_generic(result: FrontendResult, console: Console, *, verbose: bool = False) -> None:
    _render_diagnostics(console, result)
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


_OP_RENDERERS: dict[str, Callable[..., None]] = {
    "run": _render_run,
    "parse": _render_parse,
}
