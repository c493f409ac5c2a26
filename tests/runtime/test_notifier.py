"""Tests for the watchdog-backed source notifier."""

from __future__ import annotations

import threading
from collections.abc import Generator
from pathlib import Path

import pytest
from watchdog.events import DirModifiedEvent, FileModifiedEvent, FileMovedEvent

from runctl.runtime.errors import NotifierInitError
from runctl.runtime.notifier import ChangeEvent, Notifier, SourceEventHandler, is_ignored


@pytest.fixture
def root(tmp_path: Path) -> Path:
    return tmp_path.resolve()


@pytest.fixture
def notifier(root: Path) -> Generator[Notifier]:
    n = Notifier("demo", "1", str(root), debounce=0.05)
    n.prepare()
    try:
        yield n
    finally:
        n.close()


class TestIsIgnored:
    @pytest.mark.parametrize(
        "rel",
        [
            ".git/HEAD",
            ".venv/lib/site.py",
            "pkg/__pycache__/m.cpython-312.pyc",
            "node_modules/left-pad/index.js",
            "main.pyc",
            "main.py.swp",
            "main.py~",
        ],
    )
    def test_excluded(self, root: Path, rel: str) -> None:
        assert is_ignored(root, str(root / rel))

    @pytest.mark.parametrize("rel", ["main.py", "pkg/mod.py", "config/app.toml"])
    def test_watched(self, root: Path, rel: str) -> None:
        assert not is_ignored(root, str(root / rel))

    def test_outside_root(self, root: Path) -> None:
        assert is_ignored(root / "inner", str(root / "other.py"))

    def test_bytes_path(self, root: Path) -> None:
        assert not is_ignored(root, str(root / "main.py").encode())


class TestSourceEventHandler:
    def test_file_change_forwarded(self, root: Path) -> None:
        seen: list[Path] = []
        SourceEventHandler(root, seen.append).dispatch(FileModifiedEvent(str(root / "main.py")))
        assert seen == [root / "main.py"]

    def test_ignored_paths_dropped(self, root: Path) -> None:
        seen: list[Path] = []
        handler = SourceEventHandler(root, seen.append)
        handler.dispatch(FileModifiedEvent(str(root / ".git" / "index")))
        handler.dispatch(FileModifiedEvent(str(root / "__pycache__" / "m.pyc")))
        handler.dispatch(DirModifiedEvent(str(root / "pkg")))
        assert seen == []

    def test_move_into_tree_forwarded(self, root: Path) -> None:
        seen: list[Path] = []
        event = FileMovedEvent(str(root / ".cache" / "tmp"), str(root / "main.py"))
        SourceEventHandler(root, seen.append).dispatch(event)
        assert seen == [root / "main.py"]


class TestNotifier:
    def test_defaults_to_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert Notifier("demo", "", "").path == tmp_path

    def test_non_directory_disabled(self) -> None:
        notifier = Notifier("svc", "", "github.com/acme/svc")
        notifier.prepare()
        assert notifier.enabled is False
        notifier.watch(lambda event: None)
        notifier.close()

    def test_directory_enabled(self, notifier: Notifier) -> None:
        assert notifier.enabled

    def test_unreadable_directory(self, root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        def _denied(path: Path) -> None:
            raise PermissionError("denied")

        monkeypatch.setattr(Notifier, "_check_access", staticmethod(_denied))
        with pytest.raises(NotifierInitError, match="denied"):
            Notifier("demo", "", str(root)).prepare()

    def test_observer_start_failure(
        self, notifier: Notifier, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def _fail() -> None:
            raise OSError("inotify watch limit reached")

        monkeypatch.setattr(notifier._observer, "start", _fail)
        with pytest.raises(NotifierInitError, match="watch limit"):
            notifier.watch(lambda event: None)

    def test_burst_coalesced(self, notifier: Notifier, root: Path) -> None:
        events: list[ChangeEvent] = []
        fired = threading.Event()

        def _record(event: ChangeEvent) -> None:
            events.append(event)
            fired.set()

        notifier._callback = _record
        for name in ("a.py", "b.py", "c.py"):
            notifier._on_event(root / name)

        assert fired.wait(timeout=5)
        assert [e.path for e in events] == [root / "c.py"]
        assert events[0].service == "demo"
        assert events[0].version == "1"

    def test_detects_file_write(self, notifier: Notifier, root: Path) -> None:
        fired = threading.Event()
        changed: list[ChangeEvent] = []

        def _record(event: ChangeEvent) -> None:
            changed.append(event)
            fired.set()

        notifier.watch(_record)
        (root / "main.py").write_text("print('hi')\n")

        assert fired.wait(timeout=5)
        assert changed[0].path == root / "main.py"

    def test_hidden_write_not_reported(self, notifier: Notifier, root: Path) -> None:
        (root / ".git").mkdir()
        fired = threading.Event()
        notifier.watch(lambda event: fired.set())

        (root / ".git" / "HEAD").write_text("ref: refs/heads/main\n")

        assert not fired.wait(timeout=0.5)

    def test_close_stops_callbacks(self, notifier: Notifier, root: Path) -> None:
        fired = threading.Event()
        notifier.watch(lambda event: fired.set())
        notifier.close()

        (root / "late.py").write_text("")

        assert not fired.wait(timeout=0.3)
