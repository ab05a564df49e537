"""Gateway request and response models."""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator


class Message(BaseModel):
    """One chat turn."""

    role: Literal["system", "user", "assistant"]
    content: str


class PromptBundle(BaseModel):
    """Messages and sampling settings for one translation request."""

    messages: List[Message] = Field(..., min_length=1)
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    max_tokens: int = Field(default=4096, gt=0, description="Completion token limit")

    def to_openai_format(self) -> List[Dict[str, str]]:
        """Chat messages as plain dicts, the shape acompletion takes."""
        return [message.model_dump() for message in self.messages]


class TokenUsage(BaseModel):
    """Token counts reported by the provider."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    @model_validator(mode="after")
    def _fill_total(self) -> "TokenUsage":
        # Some providers omit the total
        if not self.total_tokens:
            self.total_tokens = self.prompt_tokens + self.completion_tokens
        return self


class LLMResponse(BaseModel):
    """Completion text plus call metadata."""

    content: str
    provider: str
    model: str
    usage: TokenUsage = Field(default_factory=TokenUsage)
    latency_ms: int = 0
    finish_reason: Optional[str] = None
