"""ps / get — show services known to a runtime as a table."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import click

from runctl.commands._base import RunctlCommand

if TYPE_CHECKING:
    from runctl.commands._context import AppContext

_PS_EXAMPLES = """\
  # Every service on the remote runtime
  runctl ps

  # One service, any version
  runctl ps service --name demo

  # Services that belong to the runtime itself
  runctl ps --runtime

  runctl --json ps --local"""


def _query_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Arguments and options shared by ``ps`` and ``get``."""
    decorators = [
        click.argument("args", nargs=-1),
        click.option("--name", default="", help="Service name (required with 'service')."),
        click.option("--version", "version", default="", help="Service version."),
        click.option("--local", is_flag=True, help="Use the local runtime."),
        click.option(
            "--runtime", "runtime_kind", is_flag=True, help="Only runtime-internal services."
        ),
        click.pass_obj,
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def _show(
    app: AppContext,
    args: tuple[str, ...],
    name: str,
    version: str,
    local: bool,
    runtime_kind: bool,
) -> None:
    result = app.lifecycle().get(
        args,
        name=name,
        version=version,
        local=local,
        runtime_kind=runtime_kind,
    )
    app.emit(result)


@click.command(cls=RunctlCommand, examples=_PS_EXAMPLES)
@_query_options
def ps(app: AppContext, **kwargs: Any) -> None:
    """List services, or show one with 'service --name'."""
    _show(app, **kwargs)


@click.command(cls=RunctlCommand, examples=_PS_EXAMPLES.replace("runctl ps", "runctl get"))
@_query_options
def get(app: AppContext, **kwargs: Any) -> None:
    """Alias of ps."""
    _show(app, **kwargs)
