"""LLM-backed translation port.

Sends protected markdown to a chat model through the LiteLLM gateway, one
line-aligned chunk at a time, retrying transient failures with exponential
backoff.
"""

import logging
import re
import time
from typing import Any, Dict, Optional, Tuple

from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from ....config import settings
from ....languages import is_supported
from ....utils.text import normalize_for_display, split_by_lines
from ...llm import GatewayFactory, LLMGateway, build_translation_prompt
from ..errors import ErrorCode, ItemTranslationError
from ..models import FileTranslationContext, FileTranslationResult
from ..ports import TranslationPort

logger = logging.getLogger(__name__)

_FENCE_LINE = re.compile(r"^(`{3,}|~{3,})[\w-]*[ \t]*$")
_CLOSING_FENCE = re.compile(r"^[ \t]*(`{3,}|~{3,})[ \t]*$")


class LiteLLMTranslator(TranslationPort):
    """Translates protected markdown with any LiteLLM-supported model."""

    def __init__(
        self,
        gateway: Optional[LLMGateway] = None,
        *,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        chunk_size: Optional[int] = None,
        max_retries: Optional[int] = None,
        retry_min_wait: Optional[float] = None,
        retry_max_wait: Optional[float] = None,
    ):
        """Initialize the translator.

        Unset arguments fall back to the application settings.

        Args:
            gateway: Pre-built gateway; created from provider/model if omitted
            provider: LLM provider name
            model: Model identifier
            api_key: API key for the provider
            base_url: Custom API endpoint
            temperature: Sampling temperature
            max_tokens: Maximum tokens per response
            chunk_size: Maximum characters sent per request
            max_retries: Retries per chunk after the first attempt
            retry_min_wait: Minimum backoff in seconds
            retry_max_wait: Maximum backoff in seconds
        """
        self.gateway = gateway or GatewayFactory.create(
            provider=provider or settings.llm_provider,
            api_key=api_key or settings.llm_api_key,
            model=model or settings.llm_model,
            base_url=base_url or settings.llm_base_url,
            timeout=settings.llm_timeout,
        )
        self.temperature = settings.llm_temperature if temperature is None else temperature
        self.max_tokens = max_tokens or settings.llm_max_tokens
        self.chunk_size = chunk_size or settings.chunk_size
        self.max_retries = settings.max_retries if max_retries is None else max_retries
        self.retry_min_wait = settings.retry_min_wait if retry_min_wait is None else retry_min_wait
        self.retry_max_wait = settings.retry_max_wait if retry_max_wait is None else retry_max_wait
        self._closed = False

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "LiteLLMTranslator":
        """Build a translator from a job's ``translator_config`` mapping."""
        allowed = {
            "provider", "model", "api_key", "base_url", "temperature", "max_tokens",
            "chunk_size", "max_retries", "retry_min_wait", "retry_max_wait",
        }
        unknown = set(config) - allowed
        if unknown:
            logger.warning(f"[Translator] Ignoring unknown translator settings: {sorted(unknown)}")
        return cls(**{k: v for k, v in config.items() if k in allowed})

    async def translate_file(self, context: FileTranslationContext) -> FileTranslationResult:
        started = time.monotonic()
        language = context.target_language
        content = context.protected_content.content

        if not is_supported(language):
            error = ItemTranslationError(
                f"Unsupported target language: {language}",
                code=ErrorCode.UNSUPPORTED_LANGUAGE,
                file=str(context.source_file),
            )
            return FileTranslationResult.failure(context, str(error))
        if not content.strip():
            return FileTranslationResult.failure(
                context, f"Source content is empty ({context.source_file})"
            )

        chunks = split_by_lines(content, self.chunk_size)
        logger.info(
            f"[Translator] Translating {context.label} "
            f"({len(content)} chars, {len(chunks)} chunks)"
        )

        translated = []
        retries = 0
        for index, chunk in enumerate(chunks, start=1):
            if not chunk.strip():
                translated.append(chunk)
                continue
            try:
                text, chunk_retries = await self._translate_chunk(chunk, context)
            except Exception as e:
                retries += self.max_retries
                logger.warning(
                    f"[Translator] Chunk {index}/{len(chunks)} of {context.label} "
                    f"failed after {self.max_retries} retries: {e}"
                )
                return FileTranslationResult.failure(
                    context,
                    f"Translation failed: {normalize_for_display(str(e), 300)}",
                    duration=time.monotonic() - started,
                    retries=retries,
                )
            retries += chunk_retries
            translated.append(_keep_edges(chunk, text))

        return FileTranslationResult(
            context=context,
            success=True,
            translated_content="".join(translated),
            duration=time.monotonic() - started,
            retries=retries,
        )

    async def _translate_chunk(
        self,
        chunk: str,
        context: FileTranslationContext,
    ) -> Tuple[str, int]:
        """Translate one chunk; returns the text and the retries it took."""
        bundle = build_translation_prompt(
            chunk,
            source_language=context.source_language,
            target_language=context.target_language,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=1, min=self.retry_min_wait, max=self.retry_max_wait),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                response = await self.gateway.call(bundle)
                text = self.extract_translation(response.content)
                if not text.strip():
                    raise ItemTranslationError(
                        "Model returned an empty translation", file=str(context.source_file)
                    )
                logger.debug(
                    f"[Translator] {context.label}: {response.usage.total_tokens} tokens, "
                    f"{response.latency_ms}ms"
                )
        return text, attempt.retry_state.attempt_number - 1

    @staticmethod
    def extract_translation(content: str) -> str:
        """Remove a code fence the model wrapped around the whole output."""
        stripped = content.strip()
        lines = stripped.split("\n")
        if (
            len(lines) >= 3
            and _FENCE_LINE.match(lines[0])
            and _CLOSING_FENCE.match(lines[-1])
            and lines[-1].strip()[0] == lines[0][0]
        ):
            return "\n".join(lines[1:-1])
        return content

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self.gateway.close()


def _keep_edges(source: str, translated: str) -> str:
    """Carry the source chunk's leading and trailing whitespace over."""
    body = translated.strip()
    leading = source[: len(source) - len(source.lstrip())]
    trailing = source[len(source.rstrip()):]
    return f"{leading}{body}{trailing}"
