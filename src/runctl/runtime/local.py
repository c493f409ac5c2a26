"""LocalRuntime — run each service as a subprocess of this process.

Services live only as long as the runtime that created them; a second
``runctl`` process has its own, empty local runtime. When a
:class:`~runctl.runtime.notifier.Notifier` is attached, source changes
restart the affected service with its original options.
"""

from __future__ import annotations

import io
import logging
import os
import subprocess
import threading
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from runctl.domain.lifecycle import ServiceStatus
from runctl.domain.service import BUILD_KEY, STATUS_KEY
from runctl.runtime.base import CreateOptions, ReadQuery, Runtime
from runctl.runtime.errors import BackendOperationError, BackendStartError

if TYPE_CHECKING:
    from runctl.domain.service import ServiceDescription
    from runctl.runtime.notifier import ChangeEvent, Notifier

logger = logging.getLogger(__name__)


@dataclass
class _Process:
    """Book-keeping for one created service."""

    service: ServiceDescription
    options: CreateOptions
    popen: subprocess.Popen[bytes]
    build: str


def _parse_env(entries: list[str]) -> dict[str, str]:
    """Overlay ``KEY=VALUE`` entries on the current environment.

    Later entries win over earlier ones and over the inherited environment.
    """
    env = dict(os.environ)
    for entry in entries:
        key, sep, value = entry.partition("=")
        if not sep or not key:
            raise BackendOperationError(f"invalid environment entry {entry!r}, expected KEY=VALUE")
        env[key] = value
    return env


def _output_fd(output: object) -> object | None:
    """Return *output* if it is backed by a real file descriptor, else None (inherit)."""
    if output is None:
        return None
    try:
        output.fileno()  # type: ignore[attr-defined]
    except (AttributeError, OSError, io.UnsupportedOperation):
        return None
    return output


class LocalRuntime(Runtime):
    """Subprocess-backed runtime on the invoking host."""

    def __init__(self, *, stop_timeout: float = 5.0) -> None:
        self._stop_timeout = stop_timeout
        self._notifier: Notifier | None = None
        self._processes: dict[str, _Process] = {}
        self._lock = threading.RLock()
        self._started = False

    def init(self, *, notifier: Notifier | None = None) -> None:
        """Attach a change notifier. Raises NotifierInitError if it cannot watch."""
        if notifier is not None:
            notifier.prepare()
        self._notifier = notifier

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self._started:
            return
        if self._notifier is not None:
            try:
                self._notifier.watch(self._on_change)
            except RuntimeError as exc:
                raise BackendStartError(f"cannot start notifier: {exc}") from exc
        self._started = True
        logger.debug("Local runtime started")

    def stop(self) -> None:
        if not self._started:
            return
        if self._notifier is not None:
            self._notifier.close()
        with self._lock:
            stopping = list(self._processes.values())
            self._processes.clear()
        for proc in stopping:
            self._terminate(proc)
        self._started = False
        logger.debug("Local runtime stopped")

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def create(self, service: ServiceDescription, options: CreateOptions) -> None:
        self._require_started()
        key = self._key(service)
        with self._lock:
            existing = self._processes.get(key)
            if existing is not None and existing.popen.poll() is None:
                raise BackendOperationError(f"service {service.name} is already running")
            self._processes[key] = self._spawn(service, options)
        logger.info("Created local service %s", service.name)

    def delete(self, service: ServiceDescription) -> None:
        self._require_started()
        with self._lock:
            keys = [
                key
                for key, proc in self._processes.items()
                if proc.service.name == service.name
                and (not service.version or proc.service.version == service.version)
            ]
            if not keys:
                raise BackendOperationError(f"service {service.name} not found")
            removed = [self._processes.pop(key) for key in keys]
        for proc in removed:
            self._terminate(proc)
        logger.info("Deleted local service %s", service.name)

    def list(self) -> list[ServiceDescription]:
        self._require_started()
        with self._lock:
            return [self._describe(proc) for proc in self._processes.values()]

    def read(self, query: ReadQuery) -> list[ServiceDescription]:
        return [service for service in self.list() if query.matches(service)]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_started(self) -> None:
        if not self._started:
            raise BackendOperationError("local runtime not started")

    @staticmethod
    def _key(service: ServiceDescription) -> str:
        return f"{service.name}:{service.version}"

    @staticmethod
    def _spawn(service: ServiceDescription, options: CreateOptions) -> _Process:
        if not options.command:
            raise BackendOperationError(f"no command given for service {service.name}")
        env = _parse_env(options.env)
        output = _output_fd(options.output)
        try:
            popen = subprocess.Popen(  # noqa: S603
                options.command,
                cwd=options.cwd,
                env=env,
                stdout=output,
                stderr=output,
            )
        except OSError as exc:
            raise BackendOperationError(f"cannot start {service.name}: {exc}") from exc
        logger.debug("Spawned %s pid=%s cmd=%s", service.name, popen.pid, options.command)
        return _Process(
            service=service,
            options=options,
            popen=popen,
            build=str(int(time.time())),
        )

    def _terminate(self, proc: _Process) -> None:
        if proc.popen.poll() is not None:
            return
        proc.popen.terminate()
        try:
            proc.popen.wait(timeout=self._stop_timeout)
        except subprocess.TimeoutExpired:
            logger.warning("Killing %s after %.1fs", proc.service.name, self._stop_timeout)
            proc.popen.kill()
            proc.popen.wait()

    @staticmethod
    def _describe(proc: _Process) -> ServiceDescription:
        code = proc.popen.poll()
        metadata = dict(proc.service.metadata)
        if code is None:
            metadata[STATUS_KEY] = str(ServiceStatus.RUNNING)
        elif code == 0:
            metadata[STATUS_KEY] = str(ServiceStatus.STOPPED)
        else:
            metadata[STATUS_KEY] = str(ServiceStatus.ERROR)
            metadata["exit_code"] = str(code)
        metadata[BUILD_KEY] = proc.build
        metadata["pid"] = str(proc.popen.pid)
        metadata["type"] = "service"
        return proc.service.with_metadata(metadata)

    def _on_change(self, event: ChangeEvent) -> None:
        """Restart every process of the changed service.

        Old processes are terminated without holding the lock, so ``list``
        and ``delete`` are never stalled for ``stop_timeout``. A process
        deleted while it was being terminated is not respawned.
        """
        with self._lock:
            targets = [
                (key, proc)
                for key, proc in self._processes.items()
                if proc.service.name == event.service
                and (not event.version or proc.service.version == event.version)
            ]
        for key, proc in targets:
            logger.info("Restarting %s after source change", proc.service.name)
            self._terminate(proc)
            with self._lock:
                if self._processes.get(key) is not proc:
                    continue
                try:
                    self._processes[key] = self._spawn(proc.service, proc.options)
                except BackendOperationError:
                    logger.warning("Restart of %s failed", proc.service.name, exc_info=True)
                    del self._processes[key]
