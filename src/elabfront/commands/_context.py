"""AppContext — shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``. Owns logging and telemetry setup, lazy plugin
loading, and result emission (stdout/stderr routing plus exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from elabfront.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from elabfront.config.settings import ElabSettings
    from elabfront.frontend.result import FrontendResult
    from elabfront.plugins.manager import PluginManager


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Plugins are discovered on first use so ``--help`` and ``--version``
    never import third-party plugin code.
    """

    def __init__(self, settings: ElabSettings) -> None:
        self.settings = settings
        self._plugins: PluginManager | None = None

        from elabfront.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from elabfront.frontend.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def plugins(self) -> PluginManager:
        """Core plugin plus, when enabled, entry-point and local plugins."""
        if self._plugins is None:
            from elabfront.plugins.manager import default_plugin_manager

            self._plugins = default_plugin_manager(
                local_dir=self.settings.plugin_dir,
                discover=self.settings.plugins.enabled,
            )
        return self._plugins

    def emit(self, result: FrontendResult) -> None:
        """Format and output a FrontendResult with correct exit semantics.

        * Fatal error (``not result.ok``): written to stderr, exit code 1.
        * Error diagnostics: written to stdout, exit code 1.
        * Otherwise: written to stdout, returns normally.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if not result.ok:
            click.echo(output, err=True)
            raise SystemExit(1)
        if output:
            click.echo(output)
        if result.messages.has_errors():
            raise SystemExit(1)
