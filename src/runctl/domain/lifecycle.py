"""Service status and local shutdown lifecycle models.

Two lifecycles:
- Service status: reported by runtimes in ``metadata["status"]``.
- Shutdown state: the local ``run`` loop, driven by the shutdown coordinator.
"""

from __future__ import annotations

from enum import StrEnum


class ServiceStatus(StrEnum):
    """Status values the local runtime writes into service metadata."""

    STARTING = "starting"
    RUNNING = "running"
    STOPPED = "stopped"
    ERROR = "error"


class ShutdownState(StrEnum):
    """States of the local run loop."""

    RUNNING = "running"
    AWAITING_SIGNAL = "awaiting_signal"
    DELETING = "deleting"
    STOPPING = "stopping"
    TERMINATED = "terminated"
    FAILED = "failed"


# --- Transition maps ---

SHUTDOWN_TRANSITIONS: dict[str, list[str]] = {
    "running": ["awaiting_signal"],
    "awaiting_signal": ["deleting"],
    "deleting": ["stopping", "failed"],
    "stopping": ["terminated", "failed"],
    "terminated": [],
    "failed": [],
}


def is_valid_transition(current: str, target: str) -> bool:
    """Check whether the shutdown loop may move from *current* to *target*."""
    return target in SHUTDOWN_TRANSITIONS.get(current, [])
