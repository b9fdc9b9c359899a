"""
Logging Configuration - Per-process Logging Setup

The converter session, the widget timeline and the keypad entry point each
run as their own process, so each calls setup_logging once at start-up with
its own context name. The name is stamped on every line and selects the log
file, because a RotatingFileHandler must not be shared between processes.

Files that USE this module:
- widgetfx.cli (setup_logging before running any command)
- tests.test_logging_conf (unit tests)

Files that this module USES:
- None (pure configuration module)
"""
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Union
from logging.handlers import RotatingFileHandler

CONSOLE_ENV = "WIDGETFX_LOG_CONSOLE"
LOG_FORMAT = "%(asctime)s %(levelname)s [{context}] %(name)s :: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def log_file_for(log_dir: Union[str, Path], context: str) -> Path:
    """Rotating log file used by one execution context."""
    return Path(log_dir) / f"widgetfx-{context}.log"


def setup_logging(
    level=logging.INFO,
    context: str = "cli",
    log_dir: Optional[Union[str, Path]] = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> Optional[Path]:
    """
    Configure logging for one execution context.

    Console output goes to stderr so stdout stays free for command output;
    it is on unless WIDGETFX_LOG_CONSOLE is not "true".

    Args:
        level: Logging level (default: logging.INFO)
        context: Execution context name, e.g. "refresh", "widget" or "press"
        log_dir: Optional directory for rotating log files
        max_bytes: Maximum size per log file before rotation (default: 10MB)
        backup_count: Number of backup log files to keep (default: 5)

    Returns:
        The log file path, or None when file logging is off
    """
    formatter = logging.Formatter(LOG_FORMAT.format(context=context), DATE_FORMAT)
    handlers = []

    if os.environ.get(CONSOLE_ENV, "true").lower() == "true":
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    log_file_path = None
    if log_dir:
        log_file_path = log_file_for(log_dir, context)
        log_file_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        handlers = [logging.NullHandler()]

    logging.basicConfig(level=level, handlers=handlers, force=True)
    logging.getLogger(__name__).debug(
        "Logging configured for %s: file=%s, level=%s", context, log_file_path, level
    )
    return log_file_path
