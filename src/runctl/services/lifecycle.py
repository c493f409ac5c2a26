"""LifecycleService — run, kill, and inspect services through a runtime.

Pipeline for ``run``: RESOLVE → COMPOSE ENV → SELECT RUNTIME → START →
CREATE → (local only) WAIT FOR SIGNAL → DELETE → STOP.

Runtime errors are reported verbatim in the returned ServiceResult and
end the command; nothing is retried here.
"""

from __future__ import annotations

import logging
import os
import signal
from collections.abc import Callable, Iterable, Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any, TextIO

from runctl.config.logging import bind_command, bind_service
from runctl.runtime.base import RUNTIME_KIND, CreateOptions, ReadQuery
from runctl.runtime.errors import BackendStartError, RuntimeBackendError
from runctl.runtime.factory import select_runtime
from runctl.services.environment import compose
from runctl.services.resolver import (
    GET_USAGE,
    KILL_USAGE,
    SERVICE_KEYWORD,
    MissingArgumentsError,
    ResolutionError,
    resolve_run,
    resolve_target,
)
from runctl.services.result import ServiceResult
from runctl.services.shutdown import ShutdownCoordinator

if TYPE_CHECKING:
    from runctl.config.settings import RunctlSettings
    from runctl.domain.service import ServiceDescription
    from runctl.plugins.manager import PluginManager
    from runctl.runtime.base import Runtime

logger = logging.getLogger(__name__)

RuntimeFactory = Callable[..., "Runtime"]
CoordinatorFactory = Callable[["Runtime", "ServiceDescription"], ShutdownCoordinator]


def _signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return str(signum)


def _describe(service: ServiceDescription) -> dict[str, Any]:
    return {"name": service.name, "version": service.version, "source": service.source}


class LifecycleService:
    """Drives one runtime per command invocation.

    Parameters:
        settings: Frozen settings for this invocation.
        plugins: Loaded plugin manager, or None to skip hooks.
        runtime_factory: ``(local, settings, *, watch=None) -> Runtime``.
        coordinator_factory: Builds the local shutdown coordinator.
        environ: Ambient environment (defaults to ``os.environ``).
        cwd: Working directory for name derivation and relative sources.
        output: Stream the local service writes to.
        announce: Called with a status line once a local service is up.
    """

    def __init__(
        self,
        settings: RunctlSettings,
        *,
        plugins: PluginManager | None = None,
        runtime_factory: RuntimeFactory = select_runtime,
        coordinator_factory: CoordinatorFactory = ShutdownCoordinator,
        environ: Mapping[str, str] | None = None,
        cwd: Path | None = None,
        output: TextIO | None = None,
        announce: Callable[[str], None] | None = None,
    ) -> None:
        self._settings = settings
        self._plugins = plugins
        self._runtime_factory = runtime_factory
        self._coordinator_factory = coordinator_factory
        self._environ = environ if environ is not None else os.environ
        self._cwd = cwd
        self._output = output
        self._announce = announce

    # ------------------------------------------------------------------
    # run
    # ------------------------------------------------------------------

    def run(
        self,
        args: Sequence[str],
        *,
        name: str = "",
        version: str = "",
        source: str = "",
        env: Iterable[str] = (),
        local: bool = False,
    ) -> ServiceResult:
        """Create a service; in local mode block until a signal, then tear down."""
        op = "run"
        bind_command(op, local=str(local).lower())
        warnings: list[str] = []

        self._dispatch("runctl_configure", warnings, settings=self._settings)

        try:
            resolved = resolve_run(
                args,
                name=name,
                version=version,
                source=source,
                local=local,
                command=self._settings.runtime.command,
                cwd=self._cwd,
            )
        except ResolutionError as exc:
            return ServiceResult.failure(op, exc.code, str(exc))

        service = resolved.service
        bind_service(service.name, service.version)
        environment = compose(self._environ, env, prefix=self._settings.runtime.env_prefix)

        try:
            runtime = self._runtime_factory(local, self._settings, watch=service if local else None)
        except RuntimeBackendError as exc:
            return ServiceResult.failure(op, exc.code, f"Could not start notifier: {exc}")

        failure = self._start(op, runtime)
        if failure is not None:
            return failure

        options = CreateOptions(
            command=resolved.command,
            env=environment,
            output=self._output,
            cwd=resolved.workdir,
        )

        coordinator: ShutdownCoordinator | None = None
        if local:
            coordinator = self._coordinator_factory(runtime, service)
            coordinator.arm()
        try:
            try:
                runtime.create(service, options)
            except RuntimeBackendError as exc:
                return ServiceResult.failure(op, exc.code, str(exc), **_describe(service))
            logger.info("Created %s (local=%s)", service.name, local)
            self._dispatch(
                "post_create",
                warnings,
                name=service.name,
                version=service.version,
                source=service.source,
                local=local,
            )

            data = {**_describe(service), "command": resolved.command, "local": local}
            if coordinator is None:
                return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

            if self._announce is not None:
                self._announce(f"Running {service.name}; press Ctrl+C to stop")
            try:
                signum = coordinator.wait_and_teardown()
            except RuntimeBackendError as exc:
                return ServiceResult.failure(
                    op, exc.code, str(exc), state=str(coordinator.state), **_describe(service)
                )
            self._dispatch(
                "post_delete", warnings, name=service.name, version=service.version, local=True
            )
            data.update(signal=_signal_name(signum), state=str(coordinator.state))
            return ServiceResult(ok=True, op=op, data=data, warnings=warnings)
        finally:
            if coordinator is not None:
                coordinator.disarm()

    # ------------------------------------------------------------------
    # kill
    # ------------------------------------------------------------------

    def kill(
        self,
        args: Sequence[str],
        *,
        name: str = "",
        version: str = "",
        local: bool = False,
    ) -> ServiceResult:
        """Delete a service by name (and version, if given). Never stops the runtime."""
        op = "kill"
        bind_command(op, local=str(local).lower())
        warnings: list[str] = []

        try:
            service = resolve_target(args, name=name, version=version, usage=KILL_USAGE)
        except ResolutionError as exc:
            return ServiceResult.failure(op, exc.code, str(exc))

        runtime = self._runtime_factory(local, self._settings)
        failure = self._start(op, runtime)
        if failure is not None:
            return failure

        try:
            runtime.delete(service)
        except RuntimeBackendError as exc:
            return ServiceResult.failure(op, exc.code, str(exc), **_describe(service))

        self._dispatch(
            "post_delete", warnings, name=service.name, version=service.version, local=local
        )
        return ServiceResult(ok=True, op=op, data=_describe(service), warnings=warnings)

    # ------------------------------------------------------------------
    # ps / get
    # ------------------------------------------------------------------

    def get(
        self,
        args: Sequence[str],
        *,
        name: str = "",
        version: str = "",
        local: bool = False,
        runtime_kind: bool = False,
    ) -> ServiceResult:
        """List all services, or read one by name when called as ``ps service``."""
        op = "ps"
        bind_command(op, local=str(local).lower())
        list_all = not args or args[0] != SERVICE_KEYWORD

        if not list_all and not name:
            return ServiceResult.failure(op, MissingArgumentsError.code, GET_USAGE)

        runtime = self._runtime_factory(local, self._settings)
        failure = self._start(op, runtime)
        if failure is not None:
            return failure

        kind = RUNTIME_KIND if runtime_kind else ""
        try:
            if list_all and not runtime_kind:
                services = runtime.list()
            elif list_all:
                services = runtime.read(ReadQuery(kind=kind))
            else:
                services = runtime.read(ReadQuery(service=name, version=version, kind=kind))
        except RuntimeBackendError as exc:
            return ServiceResult.failure(op, exc.code, str(exc))

        ordered = sorted(services, key=lambda s: s.name)
        return ServiceResult(
            ok=True,
            op=op,
            data={"count": len(ordered), "items": [s.to_wire() for s in ordered]},
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _start(op: str, runtime: Runtime) -> ServiceResult | None:
        try:
            runtime.start()
        except RuntimeBackendError as exc:
            return ServiceResult.failure(op, BackendStartError.code, f"Could not start: {exc}")
        return None

    def _dispatch(self, hook_name: str, warnings: list[str], **kwargs: Any) -> None:
        if self._plugins is None:
            return
        self._plugins.dispatch(hook_name, warnings, **kwargs)
