"""Plugin discovery and hook dispatch.

Plugins are pip-installed packages exposing an entry point in the
``runctl.plugins`` group. A failing plugin never fails a command: its error
becomes a warning on the ServiceResult.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any

import pluggy

from runctl.plugins.hookspecs import RunctlHookSpec

PROJECT_NAME = "runctl"
ENTRY_POINT_GROUP = "runctl.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Thin wrapper over :class:`pluggy.PluginManager` with warning-based dispatch."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(RunctlHookSpec)
        self._loaded = False

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def discover_and_load(self) -> list[str]:
        """Load entry-point plugins and return the registered names."""
        try:
            count = self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        except Exception:
            logger.warning("Failed to load %s entry points", ENTRY_POINT_GROUP, exc_info=True)
        else:
            logger.debug("Loaded %d plugin(s) from %s", count, ENTRY_POINT_GROUP)
        self._instantiate_classes()
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        plugin_name = name or type(plugin).__name__
        self._pm.register(plugin, name=plugin_name)
        logger.debug("Registered plugin %s", plugin_name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or type(p).__name__ for p in self._pm.get_plugins()]

    def dispatch(self, hook_name: str, warnings: list[str], **kwargs: Any) -> None:
        """Call every implementation of *hook_name* in pluggy's call order.

        Each implementation runs on its own; a failure is logged, recorded in
        *warnings*, and the remaining implementations still run.
        """
        caller = getattr(self._pm.hook, hook_name)
        for impl in reversed(caller.get_hookimpls()):
            try:
                impl.function(**{arg: kwargs[arg] for arg in impl.argnames})
            except Exception:
                logger.debug("Hook %s failed in %s", hook_name, impl.plugin_name, exc_info=True)
                warnings.append(f"Plugin hook {hook_name} failed in {impl.plugin_name}")

    def _instantiate_classes(self) -> None:
        """Swap plugin classes registered by entry points for instances."""
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin):
                continue
            plugin_name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)
            try:
                instance = plugin()
            except Exception:
                logger.warning("Could not instantiate plugin %s", plugin_name, exc_info=True)
                continue
            self._pm.register(instance, name=plugin_name)
