"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, runctl.toml only contains overrides.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- runctl.toml sections ---


class RuntimeConfig(BaseModel):
    """[runtime] section.

    ``command`` is the interpreter prefix; the service target (``.`` or the
    source reference) is appended to it.
    """

    model_config = {"frozen": True}

    address: str = "http://127.0.0.1:8088"
    timeout: float = 10.0
    command: list[str] = Field(default_factory=lambda: ["python"])
    env_prefix: str = "RUNCTL_"


class LocalConfig(BaseModel):
    """[local] section."""

    model_config = {"frozen": True}

    watch: bool = True
    debounce: float = 0.5
    stop_timeout: float = 5.0
