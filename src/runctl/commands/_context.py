"""AppContext — shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``. Plugins are loaded lazily so ``--help`` and
``--version`` never import plugin code.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

import click

from runctl.output.formatters import OutputSettings, format_result
from runctl.runtime.factory import select_runtime

if TYPE_CHECKING:
    from runctl.config.settings import RunctlSettings
    from runctl.plugins.manager import PluginManager
    from runctl.services.lifecycle import LifecycleService
    from runctl.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: RunctlSettings) -> None:
        self.settings = settings
        self._plugins: PluginManager | None = None

        from runctl.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def plugins(self) -> PluginManager:
        """Entry-point plugins (loaded on first access)."""
        if self._plugins is None:
            from runctl.plugins.manager import PluginManager

            self._plugins = PluginManager()
            self._plugins.discover_and_load()
        return self._plugins

    def lifecycle(self) -> LifecycleService:
        """A LifecycleService wired to this invocation's settings and plugins."""
        from runctl.services.lifecycle import LifecycleService

        return LifecycleService(
            self.settings,
            plugins=self.plugins,
            runtime_factory=select_runtime,
            output=sys.stdout,
            announce=lambda line: click.echo(line, err=True),
        )

    def emit(self, result: ServiceResult) -> None:
        """Format and print a ServiceResult.

        Success and failure both go to stdout and the command returns
        normally; no exit codes are assigned at this layer. Warnings go to
        stderr so they don't pollute piped output.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if output:
            click.echo(output)
        if not settings.json_output:
            for warning in result.warnings:
                click.echo(f"WARNING: {warning}", err=True)
