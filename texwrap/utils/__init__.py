"""
Shared utilities for texwrap.

Common functionality used across contexts:
- Logger setup
- PDF inspection
- Timestamps
"""

from texwrap.utils.timestamp import now, now_exact

__all__ = ["now", "now_exact"]
