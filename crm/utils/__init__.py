"""Utility functions."""

from .helpers import days_between, format_percentage, get_timestamp, safe_divide, setup_logging, to_naive_utc

__all__ = ["days_between", "format_percentage", "get_timestamp", "safe_divide", "setup_logging", "to_naive_utc"]
