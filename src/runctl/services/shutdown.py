"""ShutdownCoordinator — the local ``run`` loop.

running → awaiting_signal → deleting → stopping → terminated

Exactly one termination signal (SIGINT, SIGTERM, or SIGQUIT) ends the
wait. A failed delete halts the sequence in ``failed`` without stopping
the runtime; a failed stop also ends in ``failed``.
"""

from __future__ import annotations

import logging
import queue
import signal
from typing import TYPE_CHECKING, Any

from runctl.domain.lifecycle import ShutdownState, is_valid_transition
from runctl.runtime.errors import RuntimeBackendError

if TYPE_CHECKING:
    from runctl.domain.service import ServiceDescription
    from runctl.runtime.base import Runtime

logger = logging.getLogger(__name__)


def termination_signals() -> tuple[signal.Signals, ...]:
    """Signals that end a local run on this platform."""
    signals = [signal.SIGINT, signal.SIGTERM]
    if hasattr(signal, "SIGQUIT"):
        signals.append(signal.SIGQUIT)
    return tuple(signals)


class ShutdownCoordinator:
    """Blocks until a termination signal, then deletes the service and stops the runtime.

    Handlers are installed by :meth:`arm` before the service is created, so
    a signal that arrives before :meth:`wait_and_teardown` starts waiting is
    kept in the single pending slot rather than lost.
    """

    def __init__(self, runtime: Runtime, service: ServiceDescription) -> None:
        self._runtime = runtime
        self._service = service
        # SimpleQueue.put is safe to call from a signal handler.
        self._pending: queue.SimpleQueue[int] = queue.SimpleQueue()
        self._previous: dict[signal.Signals, Any] = {}
        self.state = ShutdownState.RUNNING
        self.history: list[ShutdownState] = [self.state]

    # ------------------------------------------------------------------
    # Signal plumbing
    # ------------------------------------------------------------------

    def arm(self) -> None:
        """Install handlers for :func:`termination_signals`."""
        for signum in termination_signals():
            self._previous[signum] = signal.signal(signum, self._handle)

    def disarm(self) -> None:
        """Restore the handlers that were active before :meth:`arm`."""
        for signum, handler in self._previous.items():
            signal.signal(signum, handler)
        self._previous.clear()

    def notify(self, signum: int) -> None:
        """Record a termination request; extra requests while one is pending are dropped."""
        if self._pending.empty():
            self._pending.put(signum)

    def _handle(self, signum: int, _frame: object) -> None:
        self.notify(signum)

    # ------------------------------------------------------------------
    # Sequence
    # ------------------------------------------------------------------

    def wait_and_teardown(self) -> int:
        """Run the loop to completion and return the signal that ended it.

        Raises:
            RuntimeBackendError: delete or stop failed. ``state`` is
                ``failed``; after a delete failure stop was never called.
        """
        self._transition(ShutdownState.AWAITING_SIGNAL)
        signum = self._pending.get()
        logger.info("Received signal %s, shutting down %s", signum, self._service.name)

        self._transition(ShutdownState.DELETING)
        try:
            self._runtime.delete(self._service)
        except RuntimeBackendError:
            self._transition(ShutdownState.FAILED)
            raise

        self._transition(ShutdownState.STOPPING)
        try:
            self._runtime.stop()
        except RuntimeBackendError:
            self._transition(ShutdownState.FAILED)
            raise

        self._transition(ShutdownState.TERMINATED)
        return signum

    def _transition(self, target: ShutdownState) -> None:
        if not is_valid_transition(self.state, target):
            msg = f"invalid shutdown transition {self.state} -> {target}"
            raise ValueError(msg)
        logger.debug("shutdown %s -> %s", self.state, target)
        self.state = target
        self.history.append(target)
