"""
Leveled logging for symbolic_cas

One process-wide CASLogger decides which engine messages reach the console.
Library code calls the module helpers (log_debug, log_operation, ...) and
never touches handlers; applications pick a verbosity with configure_logging
or set_log_level.
"""

import logging
import sys
import time
from enum import Enum
from typing import Optional, TextIO


class LogLevel(Enum):
    """Verbosity of the engine, from quiet to chatty"""
    SILENT = 0      # Nothing at all
    MINIMAL = 1     # Warnings and critical failures
    MODERATE = 2    # Informational milestones
    DETAILED = 3    # One summary line per public operation
    VERBOSE = 4     # Rewrite traces from every component


# stdlib level used when a message of the given verbosity is emitted
_STDLIB_LEVELS = {
    LogLevel.MINIMAL: logging.WARNING,
    LogLevel.MODERATE: logging.INFO,
    LogLevel.DETAILED: logging.INFO,
    LogLevel.VERBOSE: logging.DEBUG,
}

LOGGER_NAME = 'symbolic_cas'


class CASLogger:
    """
    Wraps the ``symbolic_cas`` stdlib logger with a verbosity gate.

    Args:
        log_level: Highest verbosity that is printed
        stream: Destination of the console handler, stdout by default
    """

    def __init__(self, log_level: LogLevel = LogLevel.MINIMAL, stream: Optional[TextIO] = None):
        self.log_level = log_level
        self.logger = logging.getLogger(LOGGER_NAME)
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)

        if log_level is not LogLevel.SILENT:
            handler = logging.StreamHandler(stream or sys.stdout)
            handler.setFormatter(logging.Formatter('%(asctime)s [%(levelname)s] %(message)s', '%H:%M:%S'))
            self.logger.addHandler(handler)

    def enabled(self, level: LogLevel) -> bool:
        return level is not LogLevel.SILENT and level.value <= self.log_level.value

    def emit(self, level: LogLevel, message: str):
        if self.enabled(level):
            self.logger.log(_STDLIB_LEVELS[level], message)

    def warning(self, message: str):
        self.emit(LogLevel.MINIMAL, message)

    def info(self, message: str, required_level: LogLevel = LogLevel.MODERATE):
        self.emit(required_level, message)

    def operation(self, name: str, nodes_in: int, nodes_out: int, started: float):
        """Timing summary for one public operation"""
        if self.enabled(LogLevel.DETAILED):
            elapsed_ms = (time.time() - started) * 1000.0
            self.emit(LogLevel.DETAILED, f"{name}: {nodes_in} -> {nodes_out} nodes in {elapsed_ms:.2f}ms")

    def debug(self, message: str):
        self.emit(LogLevel.VERBOSE, message)


_global_logger: Optional[CASLogger] = None


def get_logger() -> CASLogger:
    """Shared logger, created at MINIMAL on first use"""
    global _global_logger
    if _global_logger is None:
        _global_logger = CASLogger()
    return _global_logger


def set_log_level(level: LogLevel):
    """Change the verbosity of the shared logger without touching its handler"""
    logger = get_logger()
    if logger.log_level is LogLevel.SILENT and level is not LogLevel.SILENT:
        # a silent logger has no handler to write to
        configure_logging(level)
        return
    logger.log_level = level


def configure_logging(log_level: LogLevel = LogLevel.MINIMAL, stream: Optional[TextIO] = None) -> CASLogger:
    """Replace the shared logger, e.g. to capture output in a StringIO"""
    global _global_logger
    _global_logger = CASLogger(log_level=log_level, stream=stream)
    return _global_logger


def log_info(message: str, level: LogLevel = LogLevel.MODERATE):
    get_logger().info(message, level)


def log_operation(name: str, nodes_in: int, nodes_out: int, started: float):
    get_logger().operation(name, nodes_in, nodes_out, started)


def log_warning(message: str):
    get_logger().warning(message)


def log_debug(message: str):
    get_logger().debug(message)
