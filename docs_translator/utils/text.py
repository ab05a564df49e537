"""Text utilities for safe string handling.

This module provides truncation for log messages and line-aware splitting of
large markdown documents into translator-sized chunks.
"""

import hashlib
import re
from typing import List, Optional


def safe_truncate(text: str, max_chars: int, suffix: str = "...") -> str:
    """Truncate text for display, preferring a word boundary.

    Args:
        text: Text to truncate
        max_chars: Maximum characters (excluding suffix)
        suffix: Suffix to append if truncated (default "...")

    Returns:
        Truncated text with suffix if needed
    """
    if not text or len(text) <= max_chars:
        return text

    truncated = text[:max_chars]

    # Look back up to 20 characters for a good break point
    break_chars = {' ', '\n', '\t', ',', '.', '!', '?', ';', ':', '-', '。', '，', '、'}
    for i in range(min(20, max_chars - 1), 0, -1):
        if truncated[-i] in break_chars:
            truncated = truncated[:-i].rstrip()
            break

    return truncated + suffix


def normalize_for_display(text: str, max_length: Optional[int] = None) -> str:
    """Collapse whitespace and control characters for one-line log output."""
    if not text:
        return ""

    text = re.sub(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]', '', text)
    text = re.sub(r'\s+', ' ', text)

    if max_length:
        text = safe_truncate(text, max_length)

    return text.strip()


def split_by_lines(text: str, max_chars: int) -> List[str]:
    """Split text into chunks of at most ``max_chars`` on line boundaries.

    Lines are never broken, so a single line longer than ``max_chars`` becomes
    its own chunk. Joining the chunks with ``""`` reproduces the input.

    Args:
        text: Text to split
        max_chars: Soft upper bound for each chunk

    Returns:
        List of chunks (a single chunk for short text)
    """
    if max_chars <= 0 or len(text) <= max_chars:
        return [text]

    chunks: List[str] = []
    current = ""
    for line in text.splitlines(keepends=True):
        if current and len(current) + len(line) > max_chars:
            chunks.append(current)
            current = ""
        current += line
    if current:
        chunks.append(current)
    return chunks


def content_hash(*parts: str) -> str:
    """SHA-256 hex digest of the parts joined by NUL separators."""
    digest = hashlib.sha256()
    for index, part in enumerate(parts):
        if index:
            digest.update(b"\0")
        digest.update(part.encode("utf-8"))
    return digest.hexdigest()
