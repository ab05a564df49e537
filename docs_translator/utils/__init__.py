"""Utility modules."""

from .text import content_hash, normalize_for_display, safe_truncate, split_by_lines

__all__ = [
    "content_hash",
    "normalize_for_display",
    "safe_truncate",
    "split_by_lines",
]
