"""Translation pipeline data models.

This module provides structured data models shared by the protector, the
orchestrator and the ports, ensuring type safety and clear contracts between
components.
"""

from .job import (
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_INCLUDE_PATTERNS,
    CustomProtectionPattern,
    FileProcessingPolicy,
    PostProcessingPolicy,
    ProtectionPolicy,
    StrategyPolicy,
    TranslationJob,
)
from .content import FileTranslationContext, ProtectedContent
from .result import BatchTranslationResult, FileTranslationResult, TranslationStats
from .progress import TranslationPhase, TranslationProgress

__all__ = [
    # Job models
    "DEFAULT_EXCLUDE_PATTERNS",
    "DEFAULT_INCLUDE_PATTERNS",
    "CustomProtectionPattern",
    "FileProcessingPolicy",
    "PostProcessingPolicy",
    "ProtectionPolicy",
    "StrategyPolicy",
    "TranslationJob",
    # Content models
    "FileTranslationContext",
    "ProtectedContent",
    # Result models
    "BatchTranslationResult",
    "FileTranslationResult",
    "TranslationStats",
    # Progress models
    "TranslationPhase",
    "TranslationProgress",
]
