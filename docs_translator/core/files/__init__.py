"""File access implementations."""

from .local import LocalFileAccess, glob_to_regex, matches_any

__all__ = [
    "LocalFileAccess",
    "glob_to_regex",
    "matches_any",
]
