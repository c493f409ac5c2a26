"""Pluggy hook specifications for runctl lifecycle events.

``runctl_configure`` runs before a service is launched; the ``post_*``
hooks run after the runtime accepted the operation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from runctl.config.settings import RunctlSettings

hookspec = pluggy.HookspecMarker("runctl")
hookimpl = pluggy.HookimplMarker("runctl")


class RunctlHookSpec:
    """Hook specifications for the runctl plugin system."""

    @hookspec
    def runctl_configure(self, settings: RunctlSettings) -> None:
        """Called once before ``run`` launches a service."""

    @hookspec
    def post_create(self, name: str, version: str, source: str, local: bool) -> None:
        """Called after the runtime created a service."""

    @hookspec
    def post_delete(self, name: str, version: str, local: bool) -> None:
        """Called after the runtime deleted a service."""
