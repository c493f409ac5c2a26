"""Backend selection — a pure factory keyed on the ``--local`` flag."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from runctl.runtime.local import LocalRuntime
from runctl.runtime.notifier import Notifier
from runctl.runtime.remote import RemoteRuntime

if TYPE_CHECKING:
    from runctl.config.settings import RunctlSettings
    from runctl.domain.service import ServiceDescription
    from runctl.runtime.base import Runtime

logger = logging.getLogger(__name__)


def select_runtime(
    local: bool,
    settings: RunctlSettings,
    *,
    watch: ServiceDescription | None = None,
) -> Runtime:
    """Build the runtime for one invocation (not started).

    Args:
        local: Pick :class:`LocalRuntime` instead of :class:`RemoteRuntime`.
        settings: Source of the runtime address and local tuning.
        watch: For ``run`` in local mode, the service whose source should
            be watched for changes. Ignored for remote runtimes.

    Raises:
        NotifierInitError: The change notifier could not attach.
    """
    if not local:
        logger.debug("Using remote runtime at %s", settings.runtime.address)
        return RemoteRuntime(settings.runtime.address, timeout=settings.runtime.timeout)

    runtime = LocalRuntime(stop_timeout=settings.local.stop_timeout)
    if watch is not None and settings.local.watch:
        runtime.init(
            notifier=Notifier(
                watch.name,
                watch.version,
                watch.source,
                debounce=settings.local.debounce,
            )
        )
    logger.debug("Using local runtime")
    return runtime
