"""RemoteRuntime — client for an external runtime management service.

Every operation is one ``POST {address}/runtime/<op>`` with a JSON body.
Non-2xx responses and transport failures become
:class:`~runctl.runtime.errors.BackendOperationError` carrying the
server's message verbatim.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from runctl.domain.service import ServiceDescription
from runctl.runtime.base import CreateOptions, ReadQuery, Runtime
from runctl.runtime.errors import BackendOperationError, BackendStartError

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    """Pull ``detail`` or ``error`` out of an error body, else the raw text."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("detail", "error"):
            if body.get(key):
                return str(body[key])
    text = response.text.strip()
    return text or f"runtime service returned HTTP {response.status_code}"


class RemoteRuntime(Runtime):
    """Talks to the runtime service at *address*.

    Parameters:
        address: Base URL of the runtime service.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``).
    """

    def __init__(
        self,
        address: str,
        *,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._address = address
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.Client | None = None

    @property
    def address(self) -> str:
        return self._address

    def start(self) -> None:
        if self._client is not None:
            return
        try:
            self._client = httpx.Client(
                base_url=self._address,
                timeout=self._timeout,
                transport=self._transport,
            )
        except (httpx.InvalidURL, ValueError) as exc:
            raise BackendStartError(f"invalid runtime address {self._address!r}: {exc}") from exc
        logger.debug("Remote runtime client ready for %s", self._address)

    def stop(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def create(self, service: ServiceDescription, options: CreateOptions) -> None:
        if not service.source:
            raise BackendOperationError(f"refusing to create {service.name} without a source")
        self._call(
            "create",
            {
                "service": service.to_wire(),
                "options": {"command": list(options.command), "env": list(options.env)},
            },
        )

    def delete(self, service: ServiceDescription) -> None:
        self._call("delete", {"service": service.to_wire()})

    def list(self) -> list[ServiceDescription]:
        return self._services(self._call("list", {}))

    def read(self, query: ReadQuery) -> list[ServiceDescription]:
        body = {
            "options": {
                "service": query.service,
                "version": query.version,
                "type": query.kind,
            }
        }
        return self._services(self._call("read", body))

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _call(self, op: str, payload: dict[str, Any]) -> dict[str, Any]:
        if self._client is None:
            raise BackendOperationError("remote runtime not started")
        try:
            response = self._client.post(f"/runtime/{op}", json=payload)
        except httpx.HTTPError as exc:
            raise BackendOperationError(f"runtime service unreachable: {exc}") from exc
        logger.debug("runtime %s -> %s", op, response.status_code)
        if response.is_error:
            raise BackendOperationError(_error_message(response))
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as exc:
            raise BackendOperationError(f"invalid response from runtime service: {exc}") from exc
        return data if isinstance(data, dict) else {}

    @staticmethod
    def _services(data: dict[str, Any]) -> list[ServiceDescription]:
        try:
            return [ServiceDescription.from_wire(item) for item in data.get("services") or []]
        except (ValidationError, AttributeError) as exc:
            raise BackendOperationError(f"invalid service in runtime response: {exc}") from exc
