"""Logging setup for the datafile-store command.

Modules log through ``logging.getLogger(__name__)`` and attach structured
context with ``extra={...}``. Records are tagged with the id of the file
transfer being worked on (the correlation id) so that every line written
while reclaiming space for one inbound file can be grepped together.
"""

import contextvars
import logging
import logging.handlers
import sys
from typing import Final, override

_NO_CORRELATION_ID: Final[str] = "N/A"

correlation_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "datafile_store_correlation_id",
    default=None,
)

CONSOLE_FORMAT: Final[str] = "%(asctime)s %(levelname)-8s %(name)s [%(correlation_id)s] %(message)s"
SYSLOG_FORMAT: Final[str] = "datafile-store[%(process)d]: %(levelname)s [%(correlation_id)s] %(name)s: %(message)s"
SYSLOG_SOCKET: Final[str] = "/dev/log"


class CorrelationIDFilter(logging.Filter):
    """Copy the current correlation id onto each record as ``correlation_id``."""

    @override
    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id_var.get() or _NO_CORRELATION_ID
        return True


def _syslog_handler(address: str) -> logging.Handler | None:
    try:
        handler = logging.handlers.SysLogHandler(
            address=address,
            facility=logging.handlers.SysLogHandler.LOG_USER,
        )
    except OSError as exc:
        # No syslog daemon listening; console output still works
        print(f"Warning: syslog unavailable at {address}: {exc}", file=sys.stderr)
        return None
    handler.setFormatter(logging.Formatter(SYSLOG_FORMAT))
    return handler


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    return handler


def configure_logging(
    *,
    log_level: str = "INFO",
    enable_syslog: bool = False,
    syslog_address: str = SYSLOG_SOCKET,
    enable_console: bool = True,
) -> None:
    """Install the root handlers, replacing any configured before.

    Args:
        log_level: Level name; unknown names fall back to INFO
        enable_syslog: Also log to syslog at ``syslog_address``
        syslog_address: Syslog socket path
        enable_console: Log to stderr
    """
    handlers: list[logging.Handler] = []
    if enable_syslog:
        syslog = _syslog_handler(syslog_address)
        if syslog is not None:
            handlers.append(syslog)
    if enable_console:
        handlers.append(_console_handler())

    correlation_filter = CorrelationIDFilter()
    for handler in handlers:
        handler.addFilter(correlation_filter)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.getLevelNamesMapping().get(log_level.upper(), logging.INFO))
    for handler in handlers:
        root.addHandler(handler)


def set_correlation_id(correlation_id: str) -> None:
    """Tag subsequent records in this context with ``correlation_id``."""
    _ = correlation_id_var.set(correlation_id)


def get_correlation_id() -> str | None:
    return correlation_id_var.get()


def clear_correlation_id() -> None:
    _ = correlation_id_var.set(None)
