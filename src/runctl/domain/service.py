"""ServiceDescription — the canonical description of one service.

Built fresh for every command invocation. The name is fixed once the
description is resolved; metadata is written only by runtimes (status,
build, owner, group and anything else a backend chooses to report).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

# Metadata keys surfaced in the service table.
STATUS_KEY = "status"
BUILD_KEY = "build"
OWNER_KEY = "owner"
GROUP_KEY = "group"


class ServiceDescription(BaseModel):
    """A named service plus where its code lives.

    Attributes:
        name: Unique key for lifecycle operations. The resolver never
            produces an empty name; a backend record may carry one.
        source: Filesystem path (local mode) or canonical module reference
            (remote mode).
        version: Empty means "any" for delete/read and "latest" for create.
        metadata: Backend-observed facts, empty on create.
    """

    model_config = {"frozen": True}

    name: str
    source: str = ""
    version: str = ""
    metadata: dict[str, str] = Field(default_factory=dict)

    def with_metadata(self, metadata: dict[str, str]) -> ServiceDescription:
        """Return a copy carrying *metadata* (used by runtimes on read)."""
        return self.model_copy(update={"metadata": dict(metadata)})

    def meta(self, key: str) -> str:
        """Metadata value for *key*, or the empty string."""
        return self.metadata.get(key, "")

    def to_wire(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "source": self.source,
            "version": self.version,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> ServiceDescription:
        metadata = data.get("metadata") or {}
        return cls(
            name=str(data.get("name") or ""),
            source=str(data.get("source") or ""),
            version=str(data.get("version") or ""),
            metadata={str(k): str(v) for k, v in metadata.items()},
        )
