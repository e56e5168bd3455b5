"""
Centralized Logging Configuration
==================================
Consistent logging for the API client, loaders and aggregation services.

Design Decisions:
- Uses Python's built-in logging
- Console output always, file output when LOGGING_CONFIG names a log file
- Defaults come from config.settings.LOGGING_CONFIG (LOG_LEVEL / LOG_FILE)

Usage:
    from utils.logger import get_logger
    logger = get_logger(__name__)
    logger.info("Loading stores")
"""

import logging
import sys
from pathlib import Path
from datetime import datetime
from typing import Optional

from config.settings import LOGGING_CONFIG


def _default_level() -> int:
    return getattr(logging, str(LOGGING_CONFIG["level"]).upper(), logging.INFO)


def get_logger(
    name: str,
    log_file: Optional[str] = None,
    level: Optional[int] = None
) -> logging.Logger:
    """
    Create and configure a logger instance.

    Parameters
    ----------
    name : str
        Logger name (typically __name__ of the calling module)
    log_file : str, optional
        Path to log file. Falls back to LOGGING_CONFIG["log_file"];
        if neither is set, logs only to console.
    level : int, optional
        Logging level (default: LOGGING_CONFIG["level"], else INFO)

    Returns
    -------
    logging.Logger
        Configured logger instance

    Example
    -------
    >>> logger = get_logger(__name__)
    >>> logger.info("Fetched 42 orders")
    2026-10-18 10:30:00 | INFO     | services.api_client | Fetched 42 orders
    """
    logger = logging.getLogger(name)

    # Avoid adding duplicate handlers
    if logger.handlers:
        return logger

    level = level if level is not None else _default_level()
    logger.setLevel(level)

    formatter = logging.Formatter(
        fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    log_file = log_file or LOGGING_CONFIG.get("log_file")
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False

    return logger


def log_dataframe_info(logger: logging.Logger, df_name: str, df) -> None:
    """Log row count and missing values of a normalized API frame."""
    logger.info(f"Frame '{df_name}': {len(df):,} rows, {len(df.columns)} columns")

    if len(df) and hasattr(df, 'isnull'):
        missing_count = int(df.isnull().sum().sum())
        if missing_count > 0:
            logger.debug(f"Frame '{df_name}' has {missing_count:,} missing values")


def log_date_range(logger: logging.Logger, df_name: str, date_column: str, df) -> None:
    """Log the first and last date of a frame's date column."""
    if date_column in df.columns and len(df):
        dates = df[date_column].dropna()
        if len(dates):
            logger.info(f"Frame '{df_name}' {date_column} range: {dates.min()} to {dates.max()}")


class LogContext:
    """
    Context manager for timed, logged operations.

    Usage:
        with LogContext(logger, "Aggregating store intelligence"):
            ...
    """

    def __init__(self, logger: logging.Logger, operation: str):
        self.logger = logger
        self.operation = operation
        self.start_time = None

    def __enter__(self):
        self.start_time = datetime.now()
        self.logger.info(f"Starting: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = (datetime.now() - self.start_time).total_seconds()

        if exc_type is None:
            self.logger.info(f"Completed: {self.operation} ({elapsed:.2f}s)")
        else:
            self.logger.error(f"Failed: {self.operation} ({elapsed:.2f}s) - {exc_val}")

        return False
