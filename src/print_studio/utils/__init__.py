"""Shared utilities for print studio."""

from .logging_utils import (
    QueueLogHandler,
    attach_queue_handler,
    configure_console_logging,
    detach_queue_handler,
    drain_log_queue,
    queue_logging,
)

__all__ = [
    "QueueLogHandler",
    "attach_queue_handler",
    "configure_console_logging",
    "detach_queue_handler",
    "drain_log_queue",
    "queue_logging",
]
