"""Logging setup - keep log output off the screen while the dashboard owns it.

PUBLIC API:
  - setup_logging: Attach buffer (and optional file) handlers to the package logger
  - BufferHandler: Ring buffer of recent records, replayed after the run
"""

import logging
from collections import deque
from pathlib import Path
from typing import TextIO

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%H:%M:%S"


class BufferHandler(logging.Handler):
    """Keeps the last records in memory instead of writing to the terminal."""

    def __init__(self, capacity: int = 500):
        super().__init__()
        self.records: deque[logging.LogRecord] = deque(maxlen=capacity)

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    def replay(self, stream: TextIO, level: int = logging.WARNING) -> int:
        """Write buffered records at or above level to stream.

        Returns:
            Number of records written
        """
        written = 0
        for record in self.records:
            if record.levelno >= level:
                stream.write(self.format(record) + "\n")
                written += 1
        self.records.clear()
        stream.flush()
        return written


def setup_logging(level: str = "INFO", log_file: Path | None = None) -> BufferHandler:
    """Route congregation logs to an in-memory buffer and optionally a file."""
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    logger = logging.getLogger("congregation")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    buffer = BufferHandler()
    buffer.setLevel(level)
    buffer.setFormatter(formatter)
    logger.addHandler(buffer)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return buffer
