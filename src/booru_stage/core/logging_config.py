"""Logging setup for the application.

Records go to stderr and, when ``LOGS_PATH`` is configured, to one log file per
calendar month (``<LOGS_PATH>/YYYY-MM.log``). File output is buffered through a
``MemoryHandler`` so a burst of records from one operation is written in a
single pass; ``buffered_logging`` holds the buffer open for a whole block.
"""

from __future__ import annotations

import logging
import logging.handlers
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path

from booru_stage.core.settings import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_ROOT_LOGGER_NAME = "booru_stage"
_memory_handler: logging.handlers.MemoryHandler | None = None


class MonthlyFileHandler(logging.FileHandler):
    """File handler that switches to a new ``YYYY-MM.log`` file each month."""

    def __init__(self, directory: str | Path, encoding: str = "utf-8") -> None:
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self._month = self._current_month()
        super().__init__(self._path_for(self._month), mode="a", encoding=encoding, delay=True)

    @staticmethod
    def _current_month() -> str:
        return datetime.now(UTC).strftime("%Y-%m")

    def _path_for(self, month: str) -> Path:
        return self.directory / f"{month}.log"

    def emit(self, record: logging.LogRecord) -> None:
        month = self._current_month()
        if month != self._month:
            self.acquire()
            try:
                self.close()
                self._month = month
                self.baseFilename = str(self._path_for(month).resolve())
            finally:
                self.release()
        super().emit(record)


class _HoldingMemoryHandler(logging.handlers.MemoryHandler):
    """Memory handler whose automatic flushing can be suspended.

    Holds nest and may overlap; flushing resumes once every hold is released.
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.holds = 0

    def shouldFlush(self, record: logging.LogRecord) -> bool:  # noqa: N802 - stdlib API
        if self.holds:
            return False
        return super().shouldFlush(record)


def configure_logging(config: Settings) -> logging.Logger:
    """Install handlers on the application logger and return it.

    Calling this more than once replaces the handlers installed previously.
    """
    global _memory_handler

    logger = logging.getLogger(_ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        # MemoryHandler.close drops its target without closing it.
        target = getattr(handler, "target", None)
        handler.close()
        if target is not None:
            target.close()
    _memory_handler = None

    logger.setLevel(config.log_level.upper())
    formatter = logging.Formatter(LOG_FORMAT)

    stream = logging.StreamHandler()
    stream.setFormatter(formatter)
    logger.addHandler(stream)

    if config.logs_path:
        target = MonthlyFileHandler(config.logs_path)
        target.setFormatter(formatter)
        _memory_handler = _HoldingMemoryHandler(
            capacity=max(1, config.log_buffer_capacity),
            flushLevel=logging.ERROR,
            target=target,
        )
        logger.addHandler(_memory_handler)

    logger.propagate = False
    return logger


def flush_logs() -> None:
    """Write any buffered records to the log file."""
    if _memory_handler is not None:
        _memory_handler.flush()


@contextmanager
def buffered_logging() -> Iterator[None]:
    """Hold file log records until the block exits, then write them together."""
    handler = _memory_handler
    if handler is None:
        yield
        return
    with handler.lock:
        handler.holds += 1
    try:
        yield
    finally:
        with handler.lock:
            handler.holds -= 1
            released = handler.holds == 0
        if released:
            handler.flush()
