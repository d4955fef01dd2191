"""Command: list the commands of a source file without elaborating them."""

from __future__ import annotations

from typing import TYPE_CHECKING, TextIO

import click

from elabfront.commands._base import ElabCommand

if TYPE_CHECKING:
    from elabfront.commands._context import AppContext


@click.command(
    cls=ElabCommand,
    examples="""\
  elabfront parse Main.lean
  elabfront -v parse Main.lean
  elabfront --json parse -""",
)
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.option("--module-name", default=None, help="Name used in diagnostics (default: the file path).")
@click.pass_obj
def parse(app: AppContext, source: TextIO, module_name: str | None) -> None:
    """Parse SOURCE and list its commands ("-" reads stdin)."""
    from elabfront.frontend import scan_commands

    if module_name is None and source.name != "<stdin>":
        module_name = source.name
    app.emit(scan_commands(source.read(), module_name))
