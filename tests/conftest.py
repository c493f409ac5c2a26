"""Shared pytest fixtures and fakes for runctl tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from runctl.config.settings import RunctlSettings
from runctl.domain.service import ServiceDescription
from runctl.runtime.base import CreateOptions, ReadQuery, Runtime


class FakeRuntime(Runtime):
    """In-memory runtime that records every call.

    Parameters:
        services: What list/read report.
        fail: ``{op: exception}`` raised when *op* is called.
        on_create: Hook run after a successful create.
    """

    def __init__(
        self,
        services: list[ServiceDescription] | None = None,
        *,
        fail: dict[str, Exception] | None = None,
        on_create: Callable[[], None] | None = None,
    ) -> None:
        self.services = list(services or [])
        self.fail = dict(fail or {})
        self.on_create = on_create
        self.calls: list[str] = []
        self.created: list[tuple[ServiceDescription, CreateOptions]] = []
        self.deleted: list[ServiceDescription] = []
        self.queries: list[ReadQuery] = []

    def _record(self, op: str) -> None:
        self.calls.append(op)
        exc = self.fail.get(op)
        if exc is not None:
            raise exc

    def start(self) -> None:
        self._record("start")

    def stop(self) -> None:
        self._record("stop")

    def create(self, service: ServiceDescription, options: CreateOptions) -> None:
        self._record("create")
        self.created.append((service, options))
        if self.on_create is not None:
            self.on_create()

    def delete(self, service: ServiceDescription) -> None:
        self._record("delete")
        self.deleted.append(service)

    def list(self) -> list[ServiceDescription]:
        self._record("list")
        return list(self.services)

    def read(self, query: ReadQuery) -> list[ServiceDescription]:
        self._record("read")
        self.queries.append(query)
        return [s for s in self.services if query.matches(s)]


class RecordingFactory:
    """Runtime factory returning one FakeRuntime and remembering how it was asked."""

    def __init__(self, runtime: FakeRuntime) -> None:
        self.runtime = runtime
        self.requests: list[dict[str, Any]] = []

    def __call__(
        self,
        local: bool,
        settings: RunctlSettings,
        *,
        watch: ServiceDescription | None = None,
    ) -> FakeRuntime:
        self.requests.append({"local": local, "watch": watch})
        return self.runtime


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> RunctlSettings:
    """Default settings with no config file in reach."""
    monkeypatch.delenv("RUNCTL_CONFIG", raising=False)
    return RunctlSettings.from_cli(config_path=str(tmp_path / "missing.toml"))


@pytest.fixture
def fake_runtime() -> FakeRuntime:
    return FakeRuntime()


@pytest.fixture
def runtime_factory(fake_runtime: FakeRuntime) -> RecordingFactory:
    return RecordingFactory(fake_runtime)


@pytest.fixture
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run in an empty temp directory so no runctl.toml is discovered."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("RUNCTL_CONFIG", raising=False)


@pytest.fixture
def patch_runtime(
    monkeypatch: pytest.MonkeyPatch, runtime_factory: RecordingFactory
) -> RecordingFactory:
    """Make CLI commands use the fake runtime."""
    monkeypatch.setattr("runctl.commands._context.select_runtime", runtime_factory)
    return runtime_factory


@pytest.fixture
def make_runtime() -> type[FakeRuntime]:
    """The FakeRuntime class, for tests that need custom services or failures."""
    return FakeRuntime
