"""Collaborator interfaces for the batch orchestrator.

The orchestrator never touches the filesystem or a translation backend
directly; it talks to these two ports, which makes it testable with in-memory
fakes.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, List, Sequence

from .models import (
    FileProcessingPolicy,
    FileTranslationContext,
    FileTranslationResult,
    TranslationProgress,
)

ProgressCallback = Callable[[TranslationProgress], None]


class TranslationPort(ABC):
    """Translates protected markdown for one (file, language) pair."""

    @abstractmethod
    async def translate_file(self, context: FileTranslationContext) -> FileTranslationResult:
        """Translate ``context.protected_content.content``.

        Args:
            context: Work item with the protected content and target language

        Returns:
            Result whose translated_content is the translated protected text.
            Implementations may return a failed result or raise.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release backend resources. Must be idempotent."""
        pass


class FileAccessPort(ABC):
    """Reads sources and persists translations."""

    @abstractmethod
    async def get_source_files(self, policy: FileProcessingPolicy) -> List[Path]:
        """List source files matching the policy, in a stable order."""
        pass

    @abstractmethod
    async def read_source_file(self, path: Path) -> str:
        pass

    @abstractmethod
    def generate_target_path(
        self,
        source_path: Path,
        language: str,
        policy: FileProcessingPolicy,
    ) -> Path:
        """Map a source file to its output path for ``language``."""
        pass

    @abstractmethod
    async def should_overwrite(self, target_path: Path, policy: FileProcessingPolicy) -> bool:
        """Whether ``target_path`` may be written."""
        pass

    @abstractmethod
    async def ensure_target_directory(self, path: Path) -> None:
        pass

    @abstractmethod
    async def write_translated_file(self, result: FileTranslationResult) -> None:
        """Persist a successful result to ``result.context.target_file``."""
        pass

    @abstractmethod
    async def clean_target_directory(
        self,
        policy: FileProcessingPolicy,
        languages: Sequence[str],
    ) -> int:
        """Remove stale translations; returns the number of files removed."""
        pass
