"""Runtime failures.

Each error carries the ``code`` the service layer copies into
:class:`~runctl.services.result.ServiceError`.
"""

from __future__ import annotations


class RuntimeBackendError(Exception):
    """Base class for everything a runtime backend can raise."""

    code = "BACKEND_ERROR"


class BackendStartError(RuntimeBackendError):
    """The backend could not be initialised."""

    code = "BACKEND_START_FAILED"


class BackendOperationError(RuntimeBackendError):
    """A create/delete/list/read call failed."""

    code = "BACKEND_OPERATION_FAILED"


class NotifierInitError(RuntimeBackendError):
    """The local change notifier could not attach."""

    code = "NOTIFIER_INIT_FAILED"
