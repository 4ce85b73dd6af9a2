"""Logging setup and timing helpers."""

from __future__ import annotations

import logging
import os
import sys
import time
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from typing import Iterator

DEFAULT_LOG_LEVEL = logging.INFO
DEFAULT_LOG_FORMATTER = "\n%(asctime)s: %(levelname)s: %(filename)s:%(lineno)s::%(module)s::%(funcName)s:\n%(message)s"
DEFAULT_LOG_DATETIME = "%y-%m-%d %H:%M:%S"
DEFAULT_LOG_MAXBYTES = int(2e6)  # 2MB
DEFAULT_LOG_DIR = ".logging"


def setup_logging(
    log_filename: str | None = None,
    max_bytes: int | None = None,
    log_level: int | None = None,
    log_stdout: bool = True,
    log_format_string: str | None = None,
    keep_previous_handlers: bool = False,
) -> None:
    """Configure the root logger to write to stdout, a rotating file, or both.

    Arguments
    ---------
    log_filename: str, optional
        Path and name of the log file. If not given, nothing is written to file.
        A bare file name is placed in `./.logging`.
    max_bytes: int, optional
        Size at which the log file rotates. Defaults to DEFAULT_LOG_MAXBYTES.
    log_level: int, optional
        Log level for the new handlers. Defaults to DEFAULT_LOG_LEVEL.
    log_stdout: bool, optional
        Whether to log to standard output. Defaults to True.
    log_format_string: str, optional
        Format of each record. Defaults to DEFAULT_LOG_FORMATTER.
    keep_previous_handlers: bool, optional
        Whether to keep handlers that were already attached. Defaults to False.
    """
    # pylint: disable=too-many-arguments
    root_logger = get_root_logger()
    if not keep_previous_handlers:
        remove_handlers(root_logger)
    if log_stdout:
        add_stdout_handler(log_format_string=log_format_string, log_level=log_level)
    if log_filename is not None:
        add_file_handler(
            log_filename=log_filename,
            log_format_string=log_format_string,
            max_bytes=max_bytes,
            log_level=log_level,
        )
    # The root logger has to pass through everything its most verbose handler wants
    if root_logger.handlers:
        root_logger.setLevel(min(handler.level for handler in root_logger.handlers))
    else:
        root_logger.setLevel(log_level if log_level is not None else DEFAULT_LOG_LEVEL)


def close_logging(delete_logs: bool = True) -> None:
    """Close and detach all root handlers, optionally deleting the files they wrote.

    Arguments
    ---------
    delete_logs: bool
        Whether to delete log files before closing logging.
    """
    root_logger = get_root_logger()
    for handler in root_logger.handlers:
        handler.close()
        handler_file_name = getattr(handler, "baseFilename", None)
        if delete_logs and handler_file_name is not None and os.path.exists(handler_file_name):
            os.remove(handler_file_name)
    remove_handlers(root_logger)


def get_root_logger(logger: logging.Logger | None = None) -> logging.Logger:
    """Return the given logger, or the root logger if none is given.

    Arguments
    ---------
    logger: logging.Logger, optional
        Logger to return.

    Returns
    -------
    logging.Logger
        The logger.
    """
    if logger is None:
        logger = logging.getLogger()
    return logger


def add_stdout_handler(
    logger: logging.Logger | None = None,
    log_format_string: str | None = None,
    log_level: int | None = None,
    keep_previous_handlers: bool = True,
) -> None:
    """Attach a stdout stream handler.

    Arguments
    ---------
    logger: logging.Logger, optional
        Logger to which to add the handler. Defaults to the root logger.
    log_format_string: str, optional
        Format of each record. Defaults to DEFAULT_LOG_FORMATTER.
    log_level: int, optional
        Log level to track. Defaults to DEFAULT_LOG_LEVEL.
    keep_previous_handlers: bool, optional
        Whether to keep previous handlers. Defaults to True.
    """
    logger = get_root_logger(logger)
    if not keep_previous_handlers:
        remove_handlers(logger)
    handler = logging.StreamHandler(sys.stdout)
    _configure_handler(handler, log_format_string, log_level)
    logger.addHandler(handler)


def add_file_handler(
    log_filename: str,
    logger: logging.Logger | None = None,
    log_format_string: str | None = None,
    log_level: int | None = None,
    max_bytes: int | None = None,
    keep_previous_handlers: bool = True,
) -> None:
    """Attach a rotating file handler. The file is truncated when opened.

    Arguments
    ---------
    log_filename: str
        Path and name of the log file. ".log" is appended if missing.
    logger: logging.Logger, optional
        Logger to which to add the handler. Defaults to the root logger.
    log_format_string: str, optional
        Format of each record. Defaults to DEFAULT_LOG_FORMATTER.
    log_level: int, optional
        Log level to track. Defaults to DEFAULT_LOG_LEVEL.
    max_bytes: int, optional
        Size at which the log file rotates. Defaults to DEFAULT_LOG_MAXBYTES.
    keep_previous_handlers: bool, optional
        Whether to keep previous handlers. Defaults to True.
    """
    # pylint: disable=too-many-arguments
    logger = get_root_logger(logger)
    if not keep_previous_handlers:
        remove_handlers(logger)
    handler = RotatingFileHandler(
        prepare_log_path(log_filename),
        mode="w",
        maxBytes=max_bytes if max_bytes is not None else DEFAULT_LOG_MAXBYTES,
    )
    _configure_handler(handler, log_format_string, log_level)
    logger.addHandler(handler)


def prepare_log_path(log_filename: str) -> str:
    """Resolve the full path of a log file, creating its directory.

    Arguments
    ---------
    log_filename: str
        Path and name of the log file.

    Returns
    -------
    str
        The path to open.
    """
    log_dir, log_name = os.path.split(log_filename)
    if not log_name.endswith(".log"):
        log_name += ".log"
    if log_dir == "":
        log_dir = os.path.join(os.getcwd(), DEFAULT_LOG_DIR)
    os.makedirs(log_dir, exist_ok=True)
    return os.path.join(log_dir, log_name)


def remove_handlers(logger: logging.Logger) -> None:
    """Remove all handlers from the logger.

    Arguments
    ---------
    logger: logging.Logger
        Logger from which to remove handlers.
    """
    while logger.handlers:
        logger.removeHandler(logger.handlers[0])


@contextmanager
def log_timing(label: str, log_level: int = logging.DEBUG) -> Iterator[None]:
    """Log how long the wrapped block took, including when it raises.

    Arguments
    ---------
    label: str
        Name of the timed step, e.g. "Transaction Send Time".
    log_level: int, optional
        Level of the emitted record. Defaults to DEBUG.

    Yields
    ------
    None
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        logging.log(log_level, "%s: %.3f ms", label, (time.perf_counter() - start) * 1000)


def _configure_handler(handler: logging.Handler, log_format_string: str | None, log_level: int | None) -> None:
    handler.setFormatter(logging.Formatter(log_format_string or DEFAULT_LOG_FORMATTER, DEFAULT_LOG_DATETIME))
    handler.setLevel(log_level if log_level is not None else DEFAULT_LOG_LEVEL)
