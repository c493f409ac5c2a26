"""run — create a service on a runtime; locally, block until interrupted."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from runctl.commands._base import RunctlCommand

if TYPE_CHECKING:
    from runctl.commands._context import AppContext


@click.command(
    cls=RunctlCommand,
    examples="""\
  # Remote runtime, name derived from the source (svc)
  runctl run --source github.com/acme/svc

  # Positional source instead of --source
  runctl run github.com/acme/svc --version 1.2.0

  # Local runtime from the current directory; Ctrl+C deletes and stops
  runctl run service --local --name demo

  # Extra environment, comma lists and repeated flags both work
  runctl run ./greeter --local --env "PORT=8080, DEBUG=1" --env MODE=dev""",
)
@click.argument("args", nargs=-1)
@click.option("--name", default="", help="Service name (default: last segment of the source).")
@click.option("--version", "version", default="", help="Service version.")
@click.option("--source", default="", help="Source path (local) or module reference (remote).")
@click.option(
    "--env",
    "env",
    multiple=True,
    help="KEY=VALUE pairs, comma separated; repeatable.",
)
@click.option("--local", is_flag=True, help="Run on the local runtime.")
@click.pass_obj
def run(
    app: AppContext,
    args: tuple[str, ...],
    name: str,
    version: str,
    source: str,
    env: tuple[str, ...],
    local: bool,
) -> None:
    """Run a service."""
    result = app.lifecycle().run(
        args,
        name=name,
        version=version,
        source=source,
        env=env,
        local=local,
    )
    app.emit(result)
