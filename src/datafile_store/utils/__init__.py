"""Shared utility modules for formatting and logging setup."""

from datafile_store.utils.formatting import format_size
from datafile_store.utils.logging import (
    CorrelationIDFilter,
    clear_correlation_id,
    configure_logging,
    get_correlation_id,
    set_correlation_id,
)

__all__ = [
    "CorrelationIDFilter",
    "clear_correlation_id",
    "configure_logging",
    "format_size",
    "get_correlation_id",
    "set_correlation_id",
]
