"""Chat model access for the translators.

Translators talk to an LLMGateway rather than to a provider SDK. The only
concrete gateway routes every provider through LiteLLM.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from litellm import acompletion

from .models import LLMResponse, PromptBundle, TokenUsage

logger = logging.getLogger(__name__)


class LLMGateway(ABC):
    """One chat completion endpoint.

    Implementations turn a PromptBundle into an LLMResponse; retries and
    chunking are the caller's business.
    """

    @property
    @abstractmethod
    def provider(self) -> str:
        pass

    @property
    @abstractmethod
    def model(self) -> str:
        pass

    @abstractmethod
    async def call(self, bundle: PromptBundle) -> LLMResponse:
        """Send one prompt and wait for the completion.

        Args:
            bundle: Messages plus sampling settings

        Returns:
            LLMResponse holding the text and token usage
        """
        pass

    async def close(self) -> None:
        """Release provider resources."""
        return None


class LiteLLMGateway(LLMGateway):
    """Gateway that reaches any provider through litellm.acompletion."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str,
        base_url: Optional[str] = None,
        provider_name: str = "openai",
        timeout: Optional[float] = None,
    ):
        """Configure the gateway.

        Args:
            api_key: API key for authentication (None to use provider env vars)
            model: Model identifier
            base_url: Optional custom base URL for compatible APIs
            provider_name: Provider name for logging and model prefixing
            timeout: Per-request timeout in seconds
        """
        self._api_key = api_key
        self._model = model
        self._base_url = base_url
        self._provider = provider_name
        self._timeout = timeout
        self._litellm_model = self.litellm_model_name(provider_name, model)

        logger.info(
            f"[LLM Gateway] Initialized: provider={provider_name}, model={model}, "
            f"litellm_model={self._litellm_model}, base_url={base_url}"
        )

    @staticmethod
    def litellm_model_name(provider: str, model: str) -> str:
        """Build the LiteLLM model name with the proper provider prefix."""
        if provider == "openai":
            return model if model.startswith("openai/") else f"openai/{model}"
        if provider == "qwen":
            # Qwen uses an OpenAI-compatible API
            return f"openai/{model}"
        if provider == "anthropic":
            if model.startswith("anthropic/") or model.startswith("claude"):
                return model
            return f"anthropic/{model}"
        if provider in ("deepseek", "gemini", "ollama", "openrouter"):
            return model if model.startswith(f"{provider}/") else f"{provider}/{model}"
        return model

    @property
    def provider(self) -> str:
        return self._provider

    @property
    def model(self) -> str:
        return self._model

    async def call(self, bundle: PromptBundle) -> LLMResponse:
        """Call the model through LiteLLM.

        Args:
            bundle: Prompt to send

        Returns:
            LLMResponse with the model output
        """
        start_time = time.time()

        kwargs: Dict[str, Any] = {
            "model": self._litellm_model,
            "messages": bundle.to_openai_format(),
            "temperature": bundle.temperature,
            "max_tokens": bundle.max_tokens,
        }
        if self._api_key:
            kwargs["api_key"] = self._api_key
        if self._base_url:
            kwargs["api_base"] = self._base_url
        if self._timeout:
            kwargs["timeout"] = self._timeout

        logger.debug(
            f"[LLM Gateway] Calling LiteLLM: model={self._litellm_model}, "
            f"provider={self._provider}, base_url={self._base_url}"
        )

        response = await acompletion(**kwargs)

        latency_ms = int((time.time() - start_time) * 1000)
        choice = response.choices[0]
        usage = getattr(response, "usage", None)

        return LLMResponse(
            content=choice.message.content or "",
            provider=self._provider,
            model=self._model,
            usage=TokenUsage(
                prompt_tokens=usage.prompt_tokens if usage else 0,
                completion_tokens=usage.completion_tokens if usage else 0,
                total_tokens=usage.total_tokens if usage else 0,
            ),
            latency_ms=latency_ms,
            finish_reason=getattr(choice, "finish_reason", None),
        )


class GatewayFactory:
    """Builds gateways from a provider name."""

    # Default endpoints for providers that need one
    PROVIDER_BASE_URLS: Dict[str, Optional[str]] = {
        "openai": None,
        "anthropic": None,
        "deepseek": "https://api.deepseek.com/v1",
        "qwen": "https://dashscope.aliyuncs.com/compatible-mode/v1",
        "gemini": None,
        "ollama": None,
        "openrouter": None,
    }

    @classmethod
    def create(
        cls,
        provider: str,
        api_key: Optional[str],
        model: str,
        **kwargs,
    ) -> LLMGateway:
        """Create a gateway for ``provider``.

        Unknown providers are passed to LiteLLM with the model name unchanged.

        Args:
            provider: Provider name (openai, anthropic, deepseek, qwen, gemini, ...)
            api_key: API key for authentication
            model: Model identifier
            **kwargs: base_url or timeout overrides

        Returns:
            LiteLLMGateway with the provider default base URL applied
        """
        provider = provider.lower()
        base_url = kwargs.pop("base_url", None) or cls.PROVIDER_BASE_URLS.get(provider)

        return LiteLLMGateway(
            api_key=api_key,
            model=model,
            base_url=base_url,
            provider_name=provider,
            **kwargs,
        )
