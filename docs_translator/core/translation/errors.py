"""Translation system errors.

Structural errors abort a batch before any work is done. Item-level errors
(translation, restoration, write) are caught by the orchestrator at the item
boundary and recorded on the failed FileTranslationResult.
"""

from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from .models.result import BatchTranslationResult


class ErrorCode(str, Enum):
    """Machine-readable error codes."""

    INVALID_CONFIG = "INVALID_CONFIG"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    DIRECTORY_NOT_FOUND = "DIRECTORY_NOT_FOUND"
    PROTECTION_FAILED = "PROTECTION_FAILED"
    RESTORATION_FAILED = "RESTORATION_FAILED"
    TRANSLATION_FAILED = "TRANSLATION_FAILED"
    FILE_WRITE_FAILED = "FILE_WRITE_FAILED"
    UNSUPPORTED_LANGUAGE = "UNSUPPORTED_LANGUAGE"
    INVALID_MARKDOWN = "INVALID_MARKDOWN"
    RESOURCE_CLOSE_FAILED = "RESOURCE_CLOSE_FAILED"
    BATCH_ABORTED = "BATCH_ABORTED"


class TranslationSystemError(Exception):
    """Base error with an error code, optional file and details."""

    default_code = ErrorCode.TRANSLATION_FAILED

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        file: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.file = file
        self.details = details or {}

    def __str__(self) -> str:
        if self.file:
            return f"{self.message} ({self.file})"
        return self.message


class StructuralError(TranslationSystemError):
    """Job-level failure; fatal, raised out of execute()."""

    default_code = ErrorCode.INVALID_CONFIG


class NoSourceFilesError(StructuralError):
    """The source tree yielded no files to translate."""

    default_code = ErrorCode.FILE_NOT_FOUND


class ConfigurationError(StructuralError):
    """Job configuration is missing or inconsistent."""

    default_code = ErrorCode.INVALID_CONFIG


class ProtectionError(StructuralError):
    """A source file could not be read or protected."""

    default_code = ErrorCode.PROTECTION_FAILED


class ItemTranslationError(TranslationSystemError):
    """The translation backend failed for one work item."""

    default_code = ErrorCode.TRANSLATION_FAILED


class RestorationIntegrityError(TranslationSystemError):
    """Placeholder tokens in translated text do not match the protected fragments.

    This means the translator altered, dropped or invented a token.
    """

    default_code = ErrorCode.RESTORATION_FAILED


class WriteError(TranslationSystemError):
    """Translated output could not be persisted."""

    default_code = ErrorCode.FILE_WRITE_FAILED


class ResourceCloseError(TranslationSystemError):
    """Releasing the translator failed. Logged, never raised to callers."""

    default_code = ErrorCode.RESOURCE_CLOSE_FAILED


class BatchAbortedError(TranslationSystemError):
    """Fail-fast stop after the first item failure.

    Carries the partial batch result collected before the stop.
    """

    default_code = ErrorCode.BATCH_ABORTED

    def __init__(
        self,
        message: str,
        result: "BatchTranslationResult",
        file: Optional[str] = None,
    ):
        super().__init__(message, file=file)
        self.result = result
