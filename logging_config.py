"""
Structured logging configuration for the hobong engine.

This module provides a centralized way to configure logging across the application
with different log levels and output files for different concerns.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import List, Optional, Set, Tuple

# Define logger names for different concerns
RANK_LOGGER = "hobong.rank"
REMOTE_LOGGER = "hobong.remote"
ERROR_LOGGER = "hobong.errors"
DEBUG_LOGGER = "hobong.debug"

# Standard log format with module name and line number
LOG_FORMAT = "%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

DEFAULT_LOG_DIR = Path("output_dev/hobong_logs")

LOG_FILES = (
    "rank_events.log",
    "warnings_errors.log",
    "debug_detail.log",
    "combined.log",
)

# Track if logging is already configured and log files
_LOGGING_CONFIGURED = False
_log_files_created: Set[Path] = set()
_installed_handlers: List[Tuple[str, logging.Handler]] = []


def clear_logs(log_dir: Path) -> None:
    """
    Clear all log files in the specified directory.

    Args:
        log_dir: Directory containing log files to clear
    """
    for name in LOG_FILES:
        log_file = log_dir / name
        if log_file.exists():
            try:
                log_file.unlink()
            except OSError as e:
                logging.getLogger(__name__).warning(f"Could not delete {log_file}: {e}")


def _rotating_handler(path: Path, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
        mode="a",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    _log_files_created.add(path)
    return handler


def _install(logger_name: str, handler: logging.Handler) -> None:
    named = logging.getLogger(logger_name)
    named.addHandler(handler)
    named.propagate = True  # Allow to bubble up to root
    _installed_handlers.append((logger_name, handler))


def setup_logging(log_dir: Path, debug: bool = False, clear_existing: bool = True) -> None:
    """
    Configure structured logging for the application.

    Creates separate log files for different concerns:
    - rank_events.log: Batch and step recomputation events (INFO+)
    - warnings_errors.log: Warnings and errors (WARNING+)
    - debug_detail.log: Detailed debug information (DEBUG, only if debug=True)
    - combined.log: Combined log of all messages (INFO+)

    Args:
        log_dir: Directory where log files will be stored
        debug: If True, enables debug logging and creates debug_detail.log
        clear_existing: If True, clears existing log files before starting
    """
    global _LOGGING_CONFIGURED

    if _LOGGING_CONFIGURED:
        return

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    if clear_existing:
        clear_logs(log_dir)

    # Remove all handlers from the root logger before setup
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.setLevel(logging.DEBUG if debug else logging.INFO)

    # Formatters
    file_formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)
    console_formatter = logging.Formatter("%(levelname)-8s %(message)s")

    # Console handler (for warnings and above)
    console = logging.StreamHandler()
    console.setLevel(logging.WARNING)
    console.setFormatter(console_formatter)
    _install("", console)

    _install("", _rotating_handler(log_dir / "combined.log", logging.INFO, file_formatter))
    _install("", _rotating_handler(log_dir / "warnings_errors.log", logging.WARNING, file_formatter))

    # Step recomputation events, local and remote
    rank_handler = _rotating_handler(log_dir / "rank_events.log", logging.INFO, file_formatter)
    for name in (RANK_LOGGER, REMOTE_LOGGER):
        logging.getLogger(name).setLevel(logging.INFO)
        _install(name, rank_handler)

    if debug:
        # Covers DEBUG_LOGGER and the calculator module loggers
        debug_handler = _rotating_handler(
            log_dir / "debug_detail.log", logging.DEBUG, file_formatter
        )
        logging.getLogger("hobong").setLevel(logging.DEBUG)
        _install("hobong", debug_handler)

    _LOGGING_CONFIGURED = True


def reset_logging() -> None:
    """Detach the handlers installed by :func:`setup_logging` so it can run again."""
    global _LOGGING_CONFIGURED
    for logger_name, handler in _installed_handlers:
        logging.getLogger(logger_name).removeHandler(handler)
        handler.close()
    _installed_handlers.clear()
    _log_files_created.clear()
    _LOGGING_CONFIGURED = False


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a properly configured logger instance.

    Args:
        name: Logger name (e.g., __name__). If None, returns root logger.

    Returns:
        Configured logger instance
    """
    if not _LOGGING_CONFIGURED:
        setup_logging(DEFAULT_LOG_DIR, debug=False)
    return logging.getLogger(name)
