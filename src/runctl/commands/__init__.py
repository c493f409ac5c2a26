"""Subcommand modules for runctl.

Provides register_commands() which uses deferred imports to keep
``runctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register run, kill, and ps (with its ``get`` alias) on the root group."""
    from runctl.commands.kill import kill
    from runctl.commands.ps import get, ps
    from runctl.commands.run import run

    cli.add_command(run)
    cli.add_command(kill)
    cli.add_command(ps)
    cli.add_command(get)
