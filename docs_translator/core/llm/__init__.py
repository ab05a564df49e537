"""LLM integration package.

This package provides:
- LLMGateway / LiteLLMGateway: provider access through LiteLLM
- GatewayFactory: gateway construction per provider
- build_translation_prompt: prompts for protected markdown
"""

from .gateway import GatewayFactory, LiteLLMGateway, LLMGateway
from .models import LLMResponse, Message, PromptBundle, TokenUsage
from .prompts import build_translation_prompt

__all__ = [
    "GatewayFactory",
    "LiteLLMGateway",
    "LLMGateway",

    "LLMResponse",
    "Message",
    "PromptBundle",
    "TokenUsage",

    "build_translation_prompt",
]
