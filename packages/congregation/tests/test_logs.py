"""Tests for the logging setup."""

import io
import logging

import pytest

from congregation.logs import BufferHandler, setup_logging


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger = logging.getLogger("congregation")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True


class TestLogging:
    def test_replay_filters_by_level(self) -> None:
        buffer = setup_logging("DEBUG")
        logger = logging.getLogger("congregation.process.task")
        logger.info("started")
        logger.warning("did not exit")

        stream = io.StringIO()
        assert buffer.replay(stream) == 1
        assert "congregation.process.task - WARNING - did not exit" in stream.getvalue()
        assert not buffer.records

    def test_buffer_level(self) -> None:
        buffer = setup_logging("WARNING")
        logging.getLogger("congregation").info("quiet")
        assert not buffer.records

    def test_file_handler_gets_debug(self, tmp_path) -> None:
        log_file = tmp_path / "run.log"
        setup_logging("WARNING", log_file)
        logging.getLogger("congregation.dashboard").debug("frame")

        for handler in logging.getLogger("congregation").handlers:
            handler.flush()
        assert "frame" in log_file.read_text()

    def test_setup_replaces_handlers(self) -> None:
        setup_logging()
        setup_logging()
        handlers = logging.getLogger("congregation").handlers
        assert len([h for h in handlers if isinstance(h, BufferHandler)]) == 1

    def test_ring_buffer_capacity(self) -> None:
        handler = BufferHandler(capacity=3)
        logger = logging.getLogger("congregation.ring")
        logger.addHandler(handler)
        try:
            for i in range(5):
                logger.warning(f"record {i}")
        finally:
            logger.removeHandler(handler)
        assert [r.getMessage() for r in handler.records] == ["record 2", "record 3", "record 4"]
