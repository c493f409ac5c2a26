"""Runtime — the lifecycle contract every backend implements.

A runtime is started once per invocation, then serves any number of
create/delete/list/read calls, and is stopped only by the local run loop.
Backends raise :class:`~runctl.runtime.errors.RuntimeBackendError`
subclasses; callers never retry.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from runctl.domain.service import ServiceDescription

# Read kind for services that belong to the runtime itself.
RUNTIME_KIND = "runtime"


@dataclass(frozen=True)
class CreateOptions:
    """How to launch a service.

    Attributes:
        command: argv to execute.
        env: ``KEY=VALUE`` entries, passed through unvalidated.
        output: Stream for the service's stdout/stderr (local only).
        cwd: Working directory (local only).
    """

    command: list[str] = field(default_factory=list)
    env: list[str] = field(default_factory=list)
    output: TextIO | None = None
    cwd: Path | None = None


@dataclass(frozen=True)
class ReadQuery:
    """Filter for :meth:`Runtime.read`. Empty fields match anything."""

    service: str = ""
    version: str = ""
    kind: str = ""

    def matches(self, service: ServiceDescription) -> bool:
        if self.service and service.name != self.service:
            return False
        if self.version and service.version != self.version:
            return False
        if self.kind and service.meta("type") != self.kind:
            return False
        return True


class Runtime(ABC):
    """Capability set shared by the local and remote backends."""

    @abstractmethod
    def start(self) -> None:
        """Initialise the backend. Must succeed before any other call."""

    @abstractmethod
    def stop(self) -> None:
        """Shut the backend down."""

    @abstractmethod
    def create(self, service: ServiceDescription, options: CreateOptions) -> None:
        """Schedule *service* for execution."""

    @abstractmethod
    def delete(self, service: ServiceDescription) -> None:
        """Remove *service*, matched by name and (if set) version."""

    @abstractmethod
    def list(self) -> list[ServiceDescription]:
        """Every service the backend knows about, with metadata."""

    @abstractmethod
    def read(self, query: ReadQuery) -> list[ServiceDescription]:
        """Services matching *query*."""
