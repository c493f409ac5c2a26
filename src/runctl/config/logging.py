"""structlog configuration for runctl.

Everything is logged to stderr so the service table and result lines on
stdout can be piped. ``--log-json`` switches the renderer to one JSON object
per line; otherwise the console renderer is used, colored only on a TTY.

Every record carries the command being executed (``op``) and, once known,
the service name, via :func:`bind_command`.
"""

from __future__ import annotations

import logging
import sys

import structlog

RUNCTL_LOGGER = "runctl"

# Libraries that log every request or connection at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore")


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _stderr_handler(renderer: structlog.types.Processor) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_pre_chain(),
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )
    return handler


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Route structlog and stdlib logging through one stderr handler.

    Calling this again replaces the previous handler.

    Args:
        verbose: DEBUG for ``runctl.*`` loggers; WARNING otherwise.
        log_json: Render JSON lines instead of console output.
    """
    renderer: structlog.types.Processor
    if log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[*_pre_chain(), structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(_stderr_handler(renderer))
    root.setLevel(logging.WARNING)

    logging.getLogger(RUNCTL_LOGGER).setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_command(op: str, **fields: str) -> None:
    """Attach *op* and *fields* to every record logged from here on."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(op=op, **fields)


def bind_service(name: str, version: str = "") -> None:
    """Add the resolved service to the current command's log context."""
    structlog.contextvars.bind_contextvars(service=name, version=version)
