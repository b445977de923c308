"""Centralized logging configuration using loguru."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional, Union

from loguru import logger

# Remove default handler
logger.remove()

# Add console handler with INFO level
logger.add(
    sys.stderr,
    level="INFO",
    format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    colorize=True,
)

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"


def add_file_logging(logs_dir: Union[str, Path] = "logs") -> List[int]:
    """Add rotating file sinks for a batch run.

    Args:
        logs_dir: Directory that receives the log files (created if missing)

    Returns:
        Handler ids, so callers can remove the sinks with ``logger.remove``
    """
    logs_dir = Path(logs_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)

    handler_ids = [
        logger.add(
            logs_dir / "pitch_analyzer_{time}.log",
            rotation="50 MB",
            retention="10 days",
            level="DEBUG",
            format=FILE_FORMAT,
            enqueue=True,  # Thread-safe logging
        ),
        # Error-specific log file
        logger.add(
            logs_dir / "errors_{time}.log",
            rotation="10 MB",
            retention="30 days",
            level="ERROR",
            format=FILE_FORMAT,
            enqueue=True,
        ),
    ]
    return handler_ids


def get_logger(name: Optional[str] = None):
    """Logger bound to a module name (usually ``__name__``)."""
    if name:
        return logger.bind(name=name)
    return logger


def log_performance(operation: str, duration_ms: float, threshold_ms: float = 100.0) -> None:
    """Record how long an analysis stage took, warning when over budget.

    Args:
        operation: Stage description, e.g. "analyze_pitch p12"
        duration_ms: Measured duration in milliseconds
        threshold_ms: Warning threshold (default: 100ms)
    """
    if duration_ms > threshold_ms:
        logger.warning(f"Slow stage: {operation} took {duration_ms:.1f}ms (limit {threshold_ms:.0f}ms)")
    else:
        logger.debug(f"{operation} took {duration_ms:.1f}ms")


__all__ = ["logger", "get_logger", "add_file_logging", "log_performance"]
