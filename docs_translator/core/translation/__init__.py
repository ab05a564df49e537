"""Translation package.

This package provides the batch translation workflow.

Architecture:
- models/: Data models (TranslationJob, ProtectedContent, results, progress)
- translators/: TranslationPort implementations (LiteLLM, passthrough)
- ports.py: Collaborator interfaces used by the orchestrator
- postprocess.py: Fixes applied to restored translations
- job_loader.py: Job files and job validation
- orchestrator.py: BatchOrchestrator
"""

from typing import TYPE_CHECKING

from .errors import (
    BatchAbortedError,
    ConfigurationError,
    ErrorCode,
    ItemTranslationError,
    NoSourceFilesError,
    ProtectionError,
    ResourceCloseError,
    RestorationIntegrityError,
    StructuralError,
    TranslationSystemError,
    WriteError,
)

# Re-export models for convenience
from .models import (
    # Job models
    FileProcessingPolicy,
    PostProcessingPolicy,
    ProtectionPolicy,
    StrategyPolicy,
    TranslationJob,
    # Content models
    FileTranslationContext,
    ProtectedContent,
    # Result models
    BatchTranslationResult,
    FileTranslationResult,
    TranslationStats,
    # Progress models
    TranslationPhase,
    TranslationProgress,
)
from .ports import FileAccessPort, ProgressCallback, TranslationPort

# Lazy import for the orchestrator to avoid a circular import with
# the protection package
if TYPE_CHECKING:
    from .orchestrator import BatchOrchestrator


def get_orchestrator():
    """Get the BatchOrchestrator class."""
    from .orchestrator import BatchOrchestrator
    return BatchOrchestrator


__all__ = [
    # Errors
    "BatchAbortedError",
    "ConfigurationError",
    "ErrorCode",
    "ItemTranslationError",
    "NoSourceFilesError",
    "ProtectionError",
    "ResourceCloseError",
    "RestorationIntegrityError",
    "StructuralError",
    "TranslationSystemError",
    "WriteError",
    # Models
    "FileProcessingPolicy",
    "PostProcessingPolicy",
    "ProtectionPolicy",
    "StrategyPolicy",
    "TranslationJob",
    "FileTranslationContext",
    "ProtectedContent",
    "BatchTranslationResult",
    "FileTranslationResult",
    "TranslationStats",
    "TranslationPhase",
    "TranslationProgress",
    # Ports
    "FileAccessPort",
    "ProgressCallback",
    "TranslationPort",
    # Orchestrator getter
    "get_orchestrator",
]
