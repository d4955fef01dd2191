"""Subcommand modules for elabfront.

:func:`register_commands` uses deferred imports to keep ``elabfront --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the standalone commands on the root CLI group."""
    from elabfront.commands.parse import parse
    from elabfront.commands.run import run

    cli.add_command(run)
    cli.add_command(parse)
