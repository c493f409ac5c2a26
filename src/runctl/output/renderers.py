"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO); the caller
gets the rendered text back. Renderers are dispatched by ``result.op``.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from rich import box
from rich.table import Table
from rich.text import Text

from runctl.domain.service import (
    BUILD_KEY,
    GROUP_KEY,
    OWNER_KEY,
    STATUS_KEY,
    ServiceDescription,
)
from runctl.output.console import create_console, get_output, style_for_status

if TYPE_CHECKING:
    from rich.console import Console

    from runctl.services.result import ServiceResult

NOT_AVAILABLE = "n/a"
SERVICE_COLUMNS = ("NAME", "VERSION", "SOURCE", "STATUS", "BUILD", "METADATA")


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode: service names for ``ps``."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"
    items = result.data.get("items")
    if isinstance(items, list):
        return "\n".join(sorted(str(item.get("name", "")) for item in items))
    return f"OK: {result.op}"


def service_rows(services: Iterable[ServiceDescription]) -> list[tuple[str, ...]]:
    """Table rows sorted by name, empty fields replaced by ``n/a``."""
    rows: list[tuple[str, ...]] = []
    for service in sorted(services, key=lambda s: s.name):
        owner = _or_na(service.meta(OWNER_KEY))
        group = _or_na(service.meta(GROUP_KEY))
        rows.append(
            (
                _or_na(service.name),
                _or_na(service.version),
                _or_na(service.source),
                _or_na(service.meta(STATUS_KEY)),
                _or_na(service.meta(BUILD_KEY)),
                f"owner={owner},group={group}",
            )
        )
    return rows


def render_services(services: Iterable[ServiceDescription]) -> str:
    """Render the service table. Returns ``""`` for no services."""
    rows = service_rows(services)
    if not rows:
        return ""
    console = create_console()
    console.print(_service_table(rows))
    return get_output(console).rstrip("\n")


# ── Helpers ───────────────────────────────────────────────────────────


def _or_na(value: str) -> str:
    return value if value else NOT_AVAILABLE


def _service_table(rows: list[tuple[str, ...]]) -> Table:
    table = Table(box=box.SIMPLE_HEAD, show_edge=False, pad_edge=False, expand=False)
    for column in SERVICE_COLUMNS:
        table.add_column(column, no_wrap=True, style="runctl.name" if column == "NAME" else "")
    for row in rows:
        cells = [Text(cell) for cell in row]
        status_style = style_for_status(row[3])
        if status_style:
            cells[3].stylize(status_style)
        table.add_row(*cells)
    return table


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="runctl.ok")
    op = Text(f"  {result.op}", style="runctl.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    k = Text(f"  {key}:", style="runctl.key")
    if isinstance(value, list):
        value = " ".join(str(v) for v in value)
    v = Text(str(value) if value != "" else NOT_AVAILABLE)
    if key == "name":
        v.stylize("runctl.name")
    console.print(k, v, end="")
    console.print()


# ── Renderers ─────────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="runctl.error")
    op = Text(f"  {result.op}", style="runctl.op")
    console.print(label, op, Text(" — "), Text(msg))

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


def _render_lifecycle(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render run/kill results."""
    _status_line(console, result)
    for key in ("name", "version", "source", "signal", "state"):
        if key in result.data:
            _field(console, key, result.data[key])
    if verbose and "command" in result.data:
        _field(console, "command", result.data["command"])


def _render_service_table(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    """Render ps results; prints nothing when there are no services."""
    services = [ServiceDescription.from_wire(item) for item in result.data.get("items", [])]
    rows = service_rows(services)
    if rows:
        console.print(_service_table(rows))


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


_OP_RENDERERS: dict[str, Any] = {
    "run": _render_lifecycle,
    "kill": _render_lifecycle,
    "ps": _render_service_table,
}
