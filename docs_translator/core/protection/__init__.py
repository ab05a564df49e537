"""Markdown protection.

Hides code, links, HTML and frontmatter from translators and restores them
afterwards.
"""

from .markdown import MarkdownProtector, make_token, token_pattern

__all__ = [
    "MarkdownProtector",
    "make_token",
    "token_pattern",
]
