"""Locate runctl.toml.

Lookup order: explicit ``--config`` path, then the RUNCTL_CONFIG env var,
then a walk up from the working directory (the way git finds .git/).
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "runctl.toml"
CONFIG_ENV_VAR = "RUNCTL_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for runctl.toml.

    An RUNCTL_CONFIG value that does not point at a file disables the walk.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def resolve_config_path(config_path: str | None, start: Path | None = None) -> Path | None:
    """Return the config file to load, honouring an explicit override.

    A missing explicit file is ignored rather than treated as an error.
    """
    if config_path:
        p = Path(config_path)
        return p if p.is_file() else None
    return find_config(start)
