"""Turn raw command-line intent into a ServiceDescription.

``service`` is a reserved first argument; any other first argument is the
service source. A missing ``--name`` is derived from the last path segment
of the source, or of the working directory when there is no source.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from runctl.domain.service import ServiceDescription

SERVICE_KEYWORD = "service"

RUN_USAGE = (
    "Required usage: runctl run service --name example --version latest --source path/or/module"
)
KILL_USAGE = "Required usage: runctl kill service --name example (optional: --version latest)"
GET_USAGE = "Required usage: runctl ps service --name example (optional: --version latest)"


class ResolutionError(Exception):
    """The user's input cannot be turned into a service description."""

    code = "RESOLUTION_FAILED"


class MissingArgumentsError(ResolutionError):
    """Required input was not supplied; the message is the usage line."""

    code = "MISSING_ARGUMENTS"


class MissingSourceError(ResolutionError):
    """Remote create attempted without a source."""

    code = "MISSING_SOURCE"


@dataclass(frozen=True)
class ResolvedRun:
    """Everything ``run`` needs besides the environment.

    Attributes:
        service: The resolved description (metadata empty).
        command: argv handed to the runtime.
        workdir: Directory the local process starts in, if the source is
            a local directory.
    """

    service: ServiceDescription
    command: list[str]
    workdir: Path | None = None


def _basename(path: str) -> str:
    stripped = path.rstrip("/\\")
    return Path(stripped).name or path


def derive_name(name: str, source: str, cwd: Path | None = None) -> str:
    """Return *name*, or the basename of *source*, or of the working directory."""
    if name:
        return name
    if source:
        return _basename(source)
    return _basename(str(cwd or Path.cwd()))


def resolve_run(
    args: Sequence[str],
    *,
    name: str = "",
    version: str = "",
    source: str = "",
    local: bool = False,
    command: Sequence[str] = ("python",),
    cwd: Path | None = None,
) -> ResolvedRun:
    """Resolve ``run`` input.

    With no positional argument, ``--source`` and ``--name`` carry the
    intent, the same as after the ``service`` keyword. In local mode a
    source that is an existing directory becomes the working directory and
    the command targets ``.``; any other source is handed to the command as
    a fetch target. In remote mode the command targets the source, which
    must be set.

    Raises:
        MissingArgumentsError: A bare ``run`` (no argument, source or name),
            or a name that resolves to nothing.
        MissingSourceError: Remote mode with an empty source.
    """
    if not args and not source and not name:
        raise MissingArgumentsError(RUN_USAGE)
    if args and args[0] != SERVICE_KEYWORD:
        source = args[0]

    resolved_name = derive_name(name, source, cwd)
    if not resolved_name:
        raise MissingArgumentsError(RUN_USAGE)
    workdir: Path | None = None

    if local:
        target = "."
        if source:
            candidate = Path(source)
            if not candidate.is_absolute() and cwd is not None:
                candidate = cwd / candidate
            if candidate.is_dir():
                workdir = candidate
            else:
                target = source
    else:
        if not source:
            raise MissingSourceError(RUN_USAGE)
        target = source

    service = ServiceDescription(name=resolved_name, source=source, version=version)
    return ResolvedRun(service=service, command=[*command, target], workdir=workdir)


def resolve_target(
    args: Sequence[str],
    *,
    name: str,
    version: str = "",
    usage: str = KILL_USAGE,
) -> ServiceDescription:
    """Resolve ``kill service --name N`` style input.

    Raises:
        MissingArgumentsError: First argument is not ``service`` or no name.
    """
    if not args or args[0] != SERVICE_KEYWORD or not name:
        raise MissingArgumentsError(usage)
    return ServiceDescription(name=name, version=version)
