"""Publisher logging: coloured console output and optional JSON log file."""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

ROOT_LOGGER = "publisher"


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted log string
        """
        log_data: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key in ["target", "repo", "stage", "command"]:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        return json.dumps(log_data)


class ConsoleFormatter(logging.Formatter):
    """Colored console formatter for human-readable output."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = True) -> None:
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        """Format log record, colouring the level name when enabled.

        Args:
            record: Log record to format

        Returns:
            Formatted log string
        """
        timestamp = datetime.now().strftime("%H:%M:%S")
        stage = f"[{record.stage}] " if hasattr(record, "stage") else ""
        if not self.use_color:
            return f"{timestamp} {record.levelname:8s} {stage}{record.getMessage()}"

        color = self.COLORS.get(record.levelname, "")
        return f"{color}{timestamp} {record.levelname:8s}{self.RESET} {stage}{record.getMessage()}"


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the publisher namespace.

    Args:
        name: Logger name relative to the package, e.g. ``"git.repository"``

    Returns:
        Logger instance
    """
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def setup_logging(
    verbose: bool = False,
    log_file: str | Path | None = None,
) -> logging.Logger:
    """Set up logging configuration.

    Args:
        verbose: Log at DEBUG level instead of INFO
        log_file: Optional path of a JSON-lines log file

    Returns:
        The configured root publisher logger
    """
    log_level = logging.DEBUG if verbose else logging.INFO

    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(log_level)

    # Clear existing handlers
    for handler in root_logger.handlers:
        handler.close()
    root_logger.handlers = []

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(ConsoleFormatter(use_color=sys.stderr.isatty()))
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(JsonFormatter())
        root_logger.addHandler(file_handler)

    root_logger.propagate = False
    return root_logger
