"""Tests for logging utils modules."""

from __future__ import annotations

import logging
import os

import pytest

from . import add_file_handler, add_stdout_handler, close_logging, get_root_logger, log_timing, setup_logging


@pytest.fixture
def restore_root_handlers():
    """Put the root logger handlers back after the test, so pytest capturing keeps working."""
    root_logger = get_root_logger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    close_logging()
    root_logger.handlers = handlers
    root_logger.setLevel(level)


@pytest.mark.usefixtures("restore_root_handlers")
class TestLogging:
    """Run the logging tests."""

    def test_multiple_handlers_setup_logging(self, tmp_path):
        """Verifies the handler count for file, stdout and both."""
        log_filename = str(tmp_path / "test_logging.log")
        # one handler because we're logging to file only
        setup_logging(log_filename=log_filename, log_stdout=False)
        assert len(get_root_logger().handlers) == 1
        close_logging()
        assert len(get_root_logger().handlers) == 0
        # one handler because we're logging to stdout only
        setup_logging(log_stdout=True)
        assert len(get_root_logger().handlers) == 1
        close_logging()
        # two handlers because we're logging to file and stdout
        setup_logging(log_filename=log_filename, log_stdout=True)
        assert len(get_root_logger().handlers) == 2
        close_logging()
        assert len(get_root_logger().handlers) == 0

    def test_multiple_handlers_add_handlers(self, tmp_path):
        """Handlers added one by one accumulate."""
        log_filename = str(tmp_path / "test_logging")
        add_stdout_handler(keep_previous_handlers=False)
        assert len(get_root_logger().handlers) == 1
        add_file_handler(log_filename=log_filename)
        assert len(get_root_logger().handlers) == 2
        # ".log" is appended to the file name
        assert os.path.exists(log_filename + ".log")
        close_logging()
        assert not os.path.exists(log_filename + ".log")

    def test_file_handler_writes_records(self, tmp_path):
        """Records at or above the handler level end up in the file."""
        log_filename = str(tmp_path / "records.log")
        setup_logging(log_filename=log_filename, log_stdout=False, log_level=logging.WARNING)
        logging.info("not written")
        logging.warning("written")
        for handler in get_root_logger().handlers:
            handler.flush()
        with open(log_filename, encoding="UTF-8") as file:
            contents = file.read()
        assert "written" in contents
        assert "not written" not in contents
        close_logging(delete_logs=False)
        assert os.path.exists(log_filename)


def test_log_timing(caplog: pytest.LogCaptureFixture):
    """The elapsed time is logged when the block exits, even on error."""
    caplog.set_level(logging.DEBUG)
    with log_timing("Block Time"):
        pass
    with pytest.raises(RuntimeError):
        with log_timing("Failing Block Time"):
            raise RuntimeError("boom")
    messages = [record.message for record in caplog.records]
    assert any(message.startswith("Block Time: ") for message in messages)
    assert any(message.startswith("Failing Block Time: ") for message in messages)
