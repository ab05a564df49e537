"""Markdown documentation translator.

Translates a documentation tree into multiple languages while keeping code,
links, HTML and frontmatter structure intact.
"""

__version__ = "0.1.0"
