"""
Logging module for the onboarding heuristics tool
"""

import json
import logging
import os
from typing import Any, Optional

from onboard_heuristics.constants import LOG_FILE_NAME

LOGGER_NAME = "onboard_heuristics"


class JsonFormatter(logging.Formatter):
    def format(self, record):
        data = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "message": record.getMessage(),
            "module": record.module,
        }
        # Include any additional attributes from the record
        for key, value in record.__dict__.items():
            if key not in (
                "args",
                "asctime",
                "created",
                "exc_info",
                "exc_text",
                "filename",
                "funcName",
                "id",
                "levelname",
                "levelno",
                "lineno",
                "module",
                "msecs",
                "message",
                "msg",
                "name",
                "pathname",
                "process",
                "processName",
                "relativeCreated",
                "stack_info",
                "taskName",
                "thread",
                "threadName",
            ):
                data[key] = value
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)


class EnhancedFormatter(logging.Formatter):
    """
    Formatter that adds module and line information in verbose mode and
    appends the repository a record refers to when one was attached.
    """

    def __init__(self, fmt=None, datefmt=None, style="%", verbose=False):
        if verbose:
            fmt = "%(asctime)s - %(name)s - %(levelname)s - [%(module)s:%(lineno)d] - %(message)s"
        elif not fmt:
            fmt = "%(asctime)s - %(levelname)s - %(message)s"

        super().__init__(fmt, datefmt, style)
        self.verbose = verbose

    def format(self, record):
        result = super().format(record)

        origin_url = getattr(record, "origin_url", None)
        if self.verbose and origin_url:
            result += f" [origin: {origin_url}]"

        return result


def setup_main_log_file(
    output_dir: str, json_logs: bool = False
) -> logging.FileHandler:
    """
    Set up a file handler that receives every record at DEBUG level.

    Args:
        output_dir: Directory that will hold the log file
        json_logs: If True, write one JSON object per line instead of text

    Returns:
        The file handler for the log file
    """
    os.makedirs(output_dir, exist_ok=True)
    log_file = os.path.join(output_dir, LOG_FILE_NAME)

    file_handler = logging.FileHandler(log_file, mode="w")
    file_handler.setLevel(logging.DEBUG)  # Always use DEBUG level for file handlers

    if json_logs:
        file_handler.setFormatter(JsonFormatter())
    else:
        file_handler.setFormatter(
            EnhancedFormatter("%(asctime)s - %(levelname)s - %(message)s")
        )

    logger = logging.getLogger(LOGGER_NAME)
    logger.addHandler(file_handler)

    logger.info(f"Log file created at: {log_file}")
    return file_handler


def setup_logger(
    verbose: bool = False, output_dir: Optional[str] = None, json_logs: bool = False
) -> logging.Logger:
    """
    Set up and return the logger with appropriate formatting.

    Args:
        verbose: If True, set console handler to DEBUG level; otherwise INFO level
        output_dir: Optional output directory for the log file
        json_logs: If True, the log file is written as JSON lines

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)

    # Clear any existing handlers to prevent duplicate messages
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    logger.setLevel(logging.DEBUG)  # Always set logger to DEBUG to capture all logs

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(EnhancedFormatter(verbose=verbose))
    logger.addHandler(console_handler)

    if output_dir:
        setup_main_log_file(output_dir, json_logs)

    return logger


def log_with_context(level: int, message: str, **kwargs: Any) -> None:
    """
    Log a message with additional context information.

    ``exc_info`` is forwarded to the logger; every other keyword ends up as an
    attribute on the log record.

    Args:
        level: The logging level (e.g., logging.INFO)
        message: The log message
        **kwargs: Additional context to include in the log record
    """
    exc_info = kwargs.pop("exc_info", None)

    # Filter out None values from kwargs
    extras = {k: v for k, v in kwargs.items() if v is not None}

    logger = logging.getLogger(LOGGER_NAME)
    logger.log(level, message, extra=extras, exc_info=exc_info)


def get_logger():
    """Get the onboard_heuristics logger, creating it with defaults if needed."""
    heuristics_logger = logging.getLogger(LOGGER_NAME)
    if not heuristics_logger.handlers:
        heuristics_logger.setLevel(logging.INFO)
        handler = logging.StreamHandler()
        handler.setLevel(logging.INFO)
        handler.setFormatter(EnhancedFormatter())
        heuristics_logger.addHandler(handler)
    return heuristics_logger


# Module logger - will be properly initialized when setup_logger is called
logger = get_logger()
