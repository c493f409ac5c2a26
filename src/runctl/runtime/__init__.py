"""Runtime backends — where services actually run.

Two interchangeable implementations of :class:`Runtime`:
:class:`LocalRuntime` (subprocesses on this host) and
:class:`RemoteRuntime` (an external runtime service over HTTP).
"""

from runctl.runtime.base import CreateOptions, ReadQuery, Runtime
from runctl.runtime.errors import (
    BackendOperationError,
    BackendStartError,
    NotifierInitError,
    RuntimeBackendError,
)
from runctl.runtime.factory import select_runtime

__all__ = [
    "BackendOperationError",
    "BackendStartError",
    "CreateOptions",
    "NotifierInitError",
    "ReadQuery",
    "Runtime",
    "RuntimeBackendError",
    "select_runtime",
]
