"""Logging setup for taskfsm."""

import logging
import os
from datetime import datetime, timedelta
from pathlib import Path

from rich.logging import RichHandler

from taskfsm.console import console
from taskfsm.core.constants import LOGGING


def get_logs_dir(root: Path | None = None) -> Path:
    """Get logs directory, creating it if needed.

    ``TASKFSM_LOG_DIR`` overrides the location. Otherwise logs live in
    ``.taskfsm/logs`` under ``root`` (default: current working directory).
    """
    override = os.getenv(LOGGING.dir_env_var)
    if override:
        logs_dir = Path(override)
    else:
        logs_dir = (root or Path.cwd()) / LOGGING.dir_name
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logs_dir


def cleanup_old_logs(
    logs_dir: Path, retention_days: int = LOGGING.retention_days
) -> int:
    """Remove log files older than retention_days.

    Returns:
        Number of files deleted.
    """
    if not logs_dir.exists():
        return 0

    cutoff = datetime.now() - timedelta(days=retention_days)
    deleted = 0

    for log_file in logs_dir.glob("*.log"):
        try:
            # Filenames start with YYYY-MM-DD
            file_date = datetime.strptime(log_file.stem[:10], "%Y-%m-%d")
        except ValueError:
            continue
        if file_date < cutoff:
            log_file.unlink(missing_ok=True)
            deleted += 1

    return deleted


def setup_logging(log_dir: Path, verbose: bool = False) -> Path:
    """Configure the ``taskfsm`` logger.

    Uses delayed file creation - log file only created when first message written.

    Args:
        log_dir: Directory to store log files.
        verbose: Also log INFO and above to the console.

    Returns:
        Path to the log file (may not exist until first log message).
    """
    logger = logging.getLogger("taskfsm")
    logger.handlers.clear()

    timestamp = datetime.now().strftime("%Y-%m-%d-%H%M")
    log_path = log_dir / f"{timestamp}.log"

    file_handler = logging.FileHandler(log_path, delay=True, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(LOGGING.file_format, datefmt=LOGGING.date_format)
    )
    logger.addHandler(file_handler)

    if verbose:
        console_handler = RichHandler(console=console, show_path=False)
        console_handler.setLevel(logging.INFO)
        logger.addHandler(console_handler)

    # Always capture DEBUG to file; logger must allow messages through
    logger.setLevel(logging.DEBUG)

    return log_path
