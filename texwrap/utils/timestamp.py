"""Timestamp formatting utilities."""

from datetime import datetime


def now() -> str:
    """
    Current local time for directory and file names.

    Returns:
        Timestamp like "20251114_123456"
    """
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def now_exact() -> str:
    """Current local time as ISO 8601 with microseconds."""
    return datetime.now().isoformat()
