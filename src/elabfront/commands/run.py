"""Command: elaborate a source file."""

from __future__ import annotations

from typing import TYPE_CHECKING, TextIO

import click

from elabfront.commands._base import ElabCommand

if TYPE_CHECKING:
    from elabfront.commands._context import AppContext


@click.command(
    cls=ElabCommand,
    examples="""\
  elabfront run Main.lean
  elabfront run --module-name Main -
  elabfront --json run Main.lean
  elabfront -v run Main.lean""",
)
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.option("--module-name", default=None, help="Name used in diagnostics (default: the file path).")
@click.option("--no-prelude", is_flag=True, help="Do not import Init implicitly.")
@click.pass_obj
def run(app: AppContext, source: TextIO, module_name: str | None, no_prelude: bool) -> None:
    """Elaborate SOURCE and report outputs and diagnostics ("-" reads stdin)."""
    from elabfront.frontend import run as run_frontend

    options = app.settings.frontend
    if no_prelude:
        options = options.model_copy(update={"prelude": False})
    if module_name is None and source.name != "<stdin>":
        module_name = source.name

    app.emit(run_frontend(source.read(), module_name, options, plugins=app.plugins))
