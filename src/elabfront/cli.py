"""Root CLI group for elabfront with global flags and command registration."""

from __future__ import annotations

import click

from elabfront import __version__
from elabfront.commands import register_commands
from elabfront.commands._base import ElabGroup
from elabfront.commands._context import AppContext
from elabfront.config.settings import ElabSettings


@click.group(
    cls=ElabGroup,
    invoke_without_command=True,
    examples="""\
  elabfront run Main.lean
  elabfront --json run Main.lean
  elabfront -c ./elabfront.toml parse Main.lean""",
)
@click.version_option(version=__version__, prog_name="elabfront")
@click.option("--json", "json_output", is_flag=True, help="Print the FrontendResult as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="Diagnostics only.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with timing spans.")
@click.option("--log-json", is_flag=True, help="Emit log records to stderr as JSON lines.")
@click.option("-c", "--config", "config_path", default=None, help="Read settings from this TOML file instead of searching for elabfront.toml.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """elabfront — command elaboration frontend."""
    settings = ElabSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if not ctx.invoked_subcommand:
        click.echo(ctx.get_help())


register_commands(cli)
