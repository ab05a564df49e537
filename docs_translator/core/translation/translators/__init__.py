"""Translation port implementations."""

from .llm import LiteLLMTranslator
from .passthrough import PassthroughTranslator

__all__ = [
    "LiteLLMTranslator",
    "PassthroughTranslator",
]
