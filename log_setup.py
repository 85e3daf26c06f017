"""
Logging configuration shared by the web app and the CLI.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from typing import Optional


class ConsoleFormatter(logging.Formatter):
    """Timestamped, level-coloured single-line output."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created, timezone.utc).isoformat()
        color = self.COLORS.get(record.levelname, self.RESET)
        msg = (
            f"{color}[{ts}] {record.levelname:8} "
            f"[{record.name}] {record.getMessage()}{self.RESET}"
        )
        if record.exc_info:
            msg += f"\n{self.formatException(record.exc_info)}"
        return msg


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Configure the root logger.

    Console output goes to stderr so it never mixes with the CLI's
    report on stdout.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(ConsoleFormatter())
    root.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
        ))
        root.addHandler(file_handler)
