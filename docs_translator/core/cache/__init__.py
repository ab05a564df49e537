"""Translation caching."""

from .translation_cache import TranslationCache

__all__ = ["TranslationCache"]
