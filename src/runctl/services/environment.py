"""Execution environment for a launched service.

Ambient variables carrying the reserved prefix are passed through so
spawned services see the same control-plane configuration as runctl,
followed by the user's ``--env`` values.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

DEFAULT_PREFIX = "RUNCTL_"


def ambient_environment(environ: Mapping[str, str], prefix: str = DEFAULT_PREFIX) -> list[str]:
    """``KEY=VALUE`` for every variable in *environ* whose key starts with *prefix*."""
    return [f"{key}={value}" for key, value in environ.items() if key.startswith(prefix)]


def split_env_flags(values: Iterable[str]) -> list[str]:
    """Split comma lists, strip whitespace, and drop empty segments.

    Entries are not validated; the runtime rejects malformed ones.

    Examples:
        >>> split_env_flags(["FOO=1, BAR=2", "BAZ=3"])
        ['FOO=1', 'BAR=2', 'BAZ=3']
    """
    entries: list[str] = []
    for value in values:
        for part in value.split(","):
            part = part.strip()
            if part:
                entries.append(part)
    return entries


def compose(
    environ: Mapping[str, str],
    extra: Iterable[str],
    *,
    prefix: str = DEFAULT_PREFIX,
) -> list[str]:
    """Ambient prefixed variables followed by *extra* flags, in order, no dedup."""
    return ambient_environment(environ, prefix) + split_env_flags(extra)
