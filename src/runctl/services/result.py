"""ServiceResult and ServiceError — the result of every lifecycle command.

INVARIANT: service-layer operations return ServiceResult instead of raising.
The CLI renders it for humans or as JSON.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one lifecycle command.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (``"run"``, ``"kill"``, ``"ps"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues (e.g. failed plugin hooks).
        error: Structured error if ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None

    @classmethod
    def failure(cls, op: str, code: str, message: str, **detail: Any) -> ServiceResult:
        return cls(ok=False, op=op, error=ServiceError(code=code, message=message, detail=detail))
