"""kill — delete a service from a runtime."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from runctl.commands._base import RunctlCommand

if TYPE_CHECKING:
    from runctl.commands._context import AppContext


@click.command(
    cls=RunctlCommand,
    examples="""\
  runctl kill service --name demo
  runctl kill service --name demo --version 1.2.0
  runctl kill service --name demo --local""",
)
@click.argument("args", nargs=-1)
@click.option("--name", default="", help="Service name.")
@click.option("--version", "version", default="", help="Only this version (default: any).")
@click.option("--local", is_flag=True, help="Use the local runtime.")
@click.pass_obj
def kill(app: AppContext, args: tuple[str, ...], name: str, version: str, local: bool) -> None:
    """Kill a service."""
    app.emit(app.lifecycle().kill(args, name=name, version=version, local=local))
