"""Rich Console factory and theme for runctl output.

Consoles render to a StringIO buffer so renderers return strings.
In non-TTY environments (tests, pipes) Rich disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

RUNCTL_THEME = Theme(
    {
        "runctl.ok": "bold green",
        "runctl.error": "bold red",
        "runctl.warning": "bold yellow",
        "runctl.op": "bold cyan",
        "runctl.key": "dim",
        "runctl.name": "bold blue",
        "runctl.status.running": "green",
        "runctl.status.stopped": "dim",
        "runctl.status.error": "red",
    }
)

_STATUS_STYLES: dict[str, str] = {
    "running": "runctl.status.running",
    "stopped": "runctl.status.stopped",
    "error": "runctl.status.error",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes.
        width: Override terminal width (wide by default so rows never wrap).
    """
    return Console(
        file=StringIO(),
        theme=RUNCTL_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 200,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_status(status: str) -> str:
    return _STATUS_STYLES.get(status, "")
