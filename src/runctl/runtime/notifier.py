"""Source change notifier for the local runtime, built on watchdog.

A watchdog ``Observer`` watches a service's source directory recursively.
Events under hidden directories, ``__pycache__`` and ``node_modules``, and
for bytecode or editor swap files, are dropped. A burst of the remaining
events is coalesced for ``debounce`` seconds into one :class:`ChangeEvent`.
"""

from __future__ import annotations

import fnmatch
import logging
import os
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from runctl.runtime.errors import NotifierInitError

logger = logging.getLogger(__name__)

# Matched against every component of the path relative to the watched root.
EXCLUDE_PATTERNS = (
    ".*",
    "__pycache__",
    "node_modules",
    "*.pyc",
    "*.pyo",
    "*.swp",
    "*~",
)

# Access events that never change content.
_IGNORED_EVENT_TYPES = frozenset({"opened", "closed", "closed_no_write"})


@dataclass(frozen=True)
class ChangeEvent:
    """A change detected under the watched source of one service."""

    service: str
    version: str
    path: Path


def is_ignored(root: Path, path: str | bytes) -> bool:
    """True if *path* is outside *root* or matches :data:`EXCLUDE_PATTERNS`."""
    try:
        rel = Path(os.fsdecode(path)).relative_to(root)
    except ValueError:
        return True
    return any(
        fnmatch.fnmatch(part, pattern) for part in rel.parts for pattern in EXCLUDE_PATTERNS
    )


class SourceEventHandler(FileSystemEventHandler):
    """Forwards relevant file events under *root* to *on_change*."""

    def __init__(self, root: Path, on_change: Callable[[Path], None]) -> None:
        super().__init__()
        self.root = root
        self._on_change = on_change

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type in _IGNORED_EVENT_TYPES:
            return
        # A move counts if either end is inside the watched tree.
        for path in (event.src_path, getattr(event, "dest_path", "")):
            if path and not is_ignored(self.root, path):
                logger.debug("%s %s", event.event_type, os.fsdecode(path))
                self._on_change(Path(os.fsdecode(path)))
                return


class Notifier:
    """Watches the source of one service (the working directory if no source).

    Usage::

        notifier = Notifier("demo", "", "./demo")
        notifier.prepare()          # raises NotifierInitError
        notifier.watch(on_change)   # starts the observer thread
        ...
        notifier.close()
    """

    def __init__(
        self,
        name: str,
        version: str,
        source: str,
        *,
        debounce: float = 0.5,
    ) -> None:
        self.name = name
        self.version = version
        self.path = Path(source) if source else Path.cwd()
        self.debounce = debounce
        self._observer: Observer | None = None
        self._callback: Callable[[ChangeEvent], None] | None = None
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        """False when the source is not a local directory (nothing to watch)."""
        return self._observer is not None

    def prepare(self) -> None:
        """Schedule the observer on the source directory.

        A source that is not a directory (e.g. a remote fetch target) leaves
        the notifier disabled. An unreadable directory is an error.
        """
        if not self.path.is_dir():
            logger.debug("Notifier disabled, %s is not a directory", self.path)
            return
        root = self.path.resolve()
        try:
            self._check_access(root)
        except OSError as exc:
            raise NotifierInitError(f"cannot watch {self.path}: {exc}") from exc
        observer = Observer()
        observer.schedule(SourceEventHandler(root, self._on_event), str(root), recursive=True)
        self._observer = observer

    def watch(self, callback: Callable[[ChangeEvent], None]) -> None:
        """Start the observer. No-op when disabled or already watching."""
        if self._observer is None or self._callback is not None:
            return
        self._callback = callback
        try:
            self._observer.start()
        except OSError as exc:
            self._callback = None
            raise NotifierInitError(f"cannot watch {self.path}: {exc}") from exc
        logger.debug("Watching %s for %s", self.path, self.name)

    def close(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        if self._observer is not None and self._observer.is_alive():
            self._observer.stop()
            self._observer.join(timeout=5.0)
        self._callback = None

    def _on_event(self, path: Path) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.debounce, self._fire, args=(path,))
            self._timer.daemon = True
            self._timer.start()

    def _fire(self, path: Path) -> None:
        with self._lock:
            self._timer = None
        callback = self._callback
        if callback is None:
            return
        logger.info("Source changed for %s (%s)", self.name, path)
        try:
            callback(ChangeEvent(self.name, self.version, path))
        except Exception:
            logger.warning("Change handler failed for %s", self.name, exc_info=True)

    @staticmethod
    def _check_access(root: Path) -> None:
        with os.scandir(root) as entries:
            next(entries, None)
