"""
Module: utils.logging_utils

Purpose:
    Route print-studio log records to an editing UI console and configure
    stderr logging for the command-line launcher.

    The console receives (message, level) tuples. Packing, export and
    auto-save messages can be narrowed to a subset of components, e.g.
    only "persistence" while the save indicator is open.

Key Functions:
    - attach_queue_handler(): Start forwarding package logs to a queue
    - detach_queue_handler(): Stop forwarding and restore the logger level
    - queue_logging(): Context manager around attach/detach
    - drain_log_queue(): Non-blocking read of queued tuples
    - configure_console_logging(): Launcher logging

Used By:
    - print_studio.cli
    - Editing UI console
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from queue import Empty, Queue
from typing import Iterator, List, Optional, Sequence, Tuple

PACKAGE_LOGGER = "print_studio"
CONSOLE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

# The console has no debug styling
DISPLAY_LEVELS = {
    logging.DEBUG: "INFO",
    logging.INFO: "INFO",
    logging.WARNING: "WARNING",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "ERROR",
}

LogEntry = Tuple[str, str]


class QueueLogHandler(logging.Handler):
    """
    Puts (message, display level) tuples on a queue for an editing UI console.

    Args:
        log_queue: Destination queue, read by the UI thread
        level: Minimum level forwarded
        components: Package sub-loggers to forward ("layout", "output",
            "persistence", ...). None forwards everything.
    """

    def __init__(
        self,
        log_queue: Queue,
        level: int = logging.INFO,
        components: Optional[Sequence[str]] = None,
    ):
        super().__init__(level)
        self.log_queue = log_queue
        self.prefixes = (
            tuple(f"{PACKAGE_LOGGER}.{c}" for c in components) if components else None
        )
        self.previous_level: Optional[int] = None

    def filter(self, record: logging.LogRecord) -> bool:
        if self.prefixes is not None and not record.name.startswith(self.prefixes):
            return False
        return super().filter(record)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            display = DISPLAY_LEVELS.get(record.levelno, record.levelname)
            self.log_queue.put((record.getMessage(), display))
        except Exception:
            self.handleError(record)


def attach_queue_handler(
    log_queue: Queue,
    logger_name: Optional[str] = PACKAGE_LOGGER,
    level: int = logging.INFO,
    components: Optional[Sequence[str]] = None,
) -> QueueLogHandler:
    """
    Forward records of ``logger_name`` (the package logger by default) to a queue.

    The logger level is lowered to ``level`` if needed; detach_queue_handler()
    restores it.
    """
    logger = logging.getLogger(logger_name)
    handler = QueueLogHandler(log_queue, level, components)
    if logger.getEffectiveLevel() > level:
        handler.previous_level = logger.level
        logger.setLevel(level)
    logger.addHandler(handler)
    return handler


def detach_queue_handler(handler: QueueLogHandler, logger_name: Optional[str] = PACKAGE_LOGGER) -> None:
    logger = logging.getLogger(logger_name)
    logger.removeHandler(handler)
    if handler.previous_level is not None:
        logger.setLevel(handler.previous_level)
        handler.previous_level = None


@contextmanager
def queue_logging(
    log_queue: Queue,
    level: int = logging.INFO,
    components: Optional[Sequence[str]] = None,
) -> Iterator[QueueLogHandler]:
    """
    Forward package logs to ``log_queue`` for the duration of the block.

    Example:
        >>> with queue_logging(console_queue, components=["output"]):
        ...     render_to_pdf(page_map, config, report, path, height_model=model)
    """
    handler = attach_queue_handler(log_queue, level=level, components=components)
    try:
        yield handler
    finally:
        detach_queue_handler(handler)


def drain_log_queue(log_queue: Queue, limit: Optional[int] = None) -> List[LogEntry]:
    """Take queued (message, level) tuples without blocking, at most ``limit``."""
    items: List[LogEntry] = []
    while limit is None or len(items) < limit:
        try:
            items.append(log_queue.get_nowait())
        except Empty:
            break
    return items


def configure_console_logging(verbose: bool = False) -> None:
    """Configure stderr logging for the launcher."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=CONSOLE_FORMAT,
    )
    # Per-section packing decisions are only interesting when verbose
    if not verbose:
        logging.getLogger(f"{PACKAGE_LOGGER}.layout").setLevel(logging.INFO)
