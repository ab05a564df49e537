"""Translation result models.

This module defines the per-item and per-batch outputs of the orchestrator,
along with the aggregate statistics derived from them.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .content import FileTranslationContext


class FileTranslationResult(BaseModel):
    """Outcome of translating one (file, language) pair.

    ``translated_content`` is present iff ``success``; ``error`` is present
    iff not ``success``.
    """

    model_config = ConfigDict(frozen=True)

    context: FileTranslationContext
    success: bool
    translated_content: Optional[str] = None
    error: Optional[str] = None
    duration: float = Field(default=0.0, ge=0.0, description="Seconds spent")
    retries: int = Field(default=0, ge=0, description="Retries attempted")
    cached: bool = Field(default=False, description="Served from the cache")
    written: bool = Field(default=False, description="Persisted to the target file")

    @model_validator(mode="after")
    def _outcome_consistent(self) -> "FileTranslationResult":
        if self.success and self.translated_content is None:
            raise ValueError("successful result requires translated_content")
        if self.success and self.error is not None:
            raise ValueError("successful result cannot carry an error")
        if not self.success and not self.error:
            raise ValueError("failed result requires an error message")
        if not self.success and self.translated_content is not None:
            raise ValueError("failed result cannot carry translated_content")
        return self

    @classmethod
    def failure(
        cls,
        context: FileTranslationContext,
        error: str,
        duration: float = 0.0,
        retries: int = 0,
    ) -> "FileTranslationResult":
        """Build a failed result."""
        return cls(
            context=context,
            success=False,
            error=error or "Unknown error",
            duration=duration,
            retries=retries,
        )


class TranslationStats(BaseModel):
    """Summary statistics for a batch."""

    model_config = ConfigDict(frozen=True)

    total_files: int = 0
    successful_files: int = 0
    failed_files: int = 0
    total_languages: int = 0
    total_translations: int = 0
    average_time_per_file: float = 0.0
    total_characters: int = 0


class BatchTranslationResult(BaseModel):
    """Outcome of a whole batch, in work-set order."""

    model_config = ConfigDict(frozen=True)

    success: bool
    file_results: List[FileTranslationResult] = Field(default_factory=list)
    total_duration: float = 0.0
    stats: TranslationStats = Field(default_factory=TranslationStats)

    @property
    def failed_results(self) -> List[FileTranslationResult]:
        return [r for r in self.file_results if not r.success]
