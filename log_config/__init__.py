"""Logging setup shared by every analysis stage."""

from .logger import add_file_logging, get_logger, log_performance, logger

__all__ = ["logger", "get_logger", "add_file_logging", "log_performance"]
