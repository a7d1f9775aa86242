"""
Utility Helper Functions
========================

Common utility functions used across the project.
"""

import sys
from datetime import date, datetime, timezone
from typing import Optional, Union

from loguru import logger

from config import LOGS_DIR


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    rotation: str = "10 MB",
    retention: str = "7 days"
):
    """
    Setup logging configuration.

    Args:
        level: Logging level
        log_file: Optional log file path
        rotation: Log rotation setting
        retention: Log retention setting
    """
    # Remove default handler
    logger.remove()

    # Add console handler
    logger.add(
        sys.stderr,
        level=level,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
    )

    # Add file handler if specified
    if log_file:
        log_path = LOGS_DIR / log_file
        log_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_path,
            level=level,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            rotation=rotation,
            retention=retention,
            compression="zip"
        )

    logger.info(f"Logging configured at {level} level")


def get_timestamp(format_str: str = "%Y%m%d_%H%M%S", now: Optional[datetime] = None) -> str:
    """
    Get current timestamp string.

    Args:
        format_str: Datetime format string
        now: Reference time, defaults to the current time

    Returns:
        Formatted timestamp
    """
    return (now or datetime.now()).strftime(format_str)


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def to_datetime(value: Union[date, datetime]) -> datetime:
    """Promote a date to a naive datetime at midnight."""
    if isinstance(value, datetime):
        return to_naive_utc(value)
    return datetime(value.year, value.month, value.day)


def days_between(earlier: Union[date, datetime], now: Union[date, datetime]) -> float:
    """
    Fractional number of days from ``earlier`` to ``now``.

    Args:
        earlier: Start date or datetime
        now: End date or datetime

    Returns:
        Elapsed days, negative if ``earlier`` lies in the future
    """
    delta = to_datetime(now) - to_datetime(earlier)
    return delta.total_seconds() / 86400


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """
    Safe division handling zero denominator.

    Args:
        numerator: Numerator value
        denominator: Denominator value
        default: Default value if denominator is zero

    Returns:
        Division result or default
    """
    return numerator / denominator if denominator != 0 else default


def calculate_percentage_change(old_value: float, new_value: float) -> float:
    """
    Calculate percentage change between two values.

    Args:
        old_value: Original value
        new_value: New value

    Returns:
        Percentage change
    """
    if old_value == 0:
        return 0.0 if new_value == 0 else float('inf')
    return ((new_value - old_value) / old_value) * 100


def format_percentage(value: float, precision: int = 1) -> str:
    """Format a percentage value for display, e.g. ``6.5`` -> ``"6.5%"``."""
    return f"{value:.{precision}f}%"
