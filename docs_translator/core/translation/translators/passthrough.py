"""Translation port that returns the protected text unchanged.

Used for dry runs: the whole pipeline runs, including protection,
restoration and writing, without calling a model.
"""

import logging

from ..models import FileTranslationContext, FileTranslationResult
from ..ports import TranslationPort

logger = logging.getLogger(__name__)


class PassthroughTranslator(TranslationPort):
    """Echoes the protected content as its own translation."""

    def __init__(self):
        self.calls = 0
        self.closed = False

    async def translate_file(self, context: FileTranslationContext) -> FileTranslationResult:
        self.calls += 1
        logger.debug(f"[Translator] Passthrough for {context.label}")
        return FileTranslationResult(
            context=context,
            success=True,
            translated_content=context.protected_content.content,
        )

    async def close(self) -> None:
        self.closed = True
