"""Job files and job validation.

Jobs are JSON documents matching TranslationJob. Relative directories in a
job file are resolved against the directory containing the file.
"""

import logging
from pathlib import Path
from typing import Any, List, Literal, Optional, Sequence

from pydantic import BaseModel, ValidationError

from ...languages import is_supported
from ..files.local import matches_any
from .errors import ConfigurationError, ErrorCode
from .models import (
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_INCLUDE_PATTERNS,
    FileProcessingPolicy,
    TranslationJob,
)

logger = logging.getLogger(__name__)


class ValidationIssue(BaseModel):
    """One problem found while validating a job."""

    severity: Literal["error", "warning"]
    code: str
    message: str


def load_job(path: Path) -> TranslationJob:
    """Load and validate a JSON job file.

    Raises:
        ConfigurationError: If the file is missing or does not describe a valid job
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigurationError(
            f"Job file not found: {path}", code=ErrorCode.FILE_NOT_FOUND, file=str(path)
        )

    try:
        job = TranslationJob.model_validate_json(path.read_text(encoding="utf-8"))
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid job file: {e.error_count()} error(s)",
            file=str(path),
            details={"errors": e.errors(include_url=False)},
        ) from e

    base = path.resolve().parent
    policy = job.file_processing
    resolved = policy.model_copy(
        update={
            "source_dir": _resolve(base, policy.source_dir),
            "target_dir": _resolve(base, policy.target_dir),
        }
    )
    logger.info(f"Loaded job {path}: {len(job.target_languages)} target languages")
    return job.model_copy(update={"file_processing": resolved})


def create_default_job(
    source_dir: Path,
    target_dir: Path,
    target_languages: Sequence[str],
    **overrides: Any,
) -> TranslationJob:
    """Build a job with default patterns for a docs tree.

    When the target directory lies inside the source directory, the language
    directories are excluded so that translations are never re-translated.

    Args:
        source_dir: Root of the source markdown
        target_dir: Root for translated output
        target_languages: Language codes to translate into
        **overrides: Extra TranslationJob fields (e.g. strategy_config)
    """
    source_dir = Path(source_dir)
    target_dir = Path(target_dir)
    languages = [code.strip().lower() for code in target_languages]

    exclude = list(DEFAULT_EXCLUDE_PATTERNS)
    relative = _relative_to(target_dir, source_dir)
    if relative is not None:
        prefix = f"{relative}/" if relative else ""
        exclude.extend(f"{prefix}{language}/**" for language in languages)

    file_processing = FileProcessingPolicy(
        source_dir=source_dir,
        target_dir=target_dir,
        include_patterns=list(DEFAULT_INCLUDE_PATTERNS),
        exclude_patterns=exclude,
    )
    return TranslationJob(
        target_languages=languages,
        file_processing=file_processing,
        **overrides,
    )


def validate_job(job: TranslationJob) -> List[ValidationIssue]:
    """Check a job against the filesystem and the known languages."""
    issues: List[ValidationIssue] = []
    policy = job.file_processing

    if not policy.source_dir.is_dir():
        issues.append(
            ValidationIssue(
                severity="error",
                code="MISSING_SOURCE_DIR",
                message=f"Source directory does not exist: {policy.source_dir}",
            )
        )

    for language in job.target_languages:
        language_dir = policy.target_dir / language
        if _relative_to(policy.source_dir, language_dir) is not None:
            issues.append(
                ValidationIssue(
                    severity="error",
                    code="CIRCULAR_PATHS",
                    message=(
                        f"Source directory {policy.source_dir} lies inside output "
                        f"directory {language_dir}"
                    ),
                )
            )
            continue
        relative = _relative_to(language_dir, policy.source_dir)
        if relative is not None and not matches_any(f"{relative}/index.md", policy.exclude_patterns):
            issues.append(
                ValidationIssue(
                    severity="error",
                    code="CIRCULAR_PATHS",
                    message=(
                        f"Output directory {language_dir} lies inside the source "
                        f"directory and is not excluded"
                    ),
                )
            )

    unknown = [code for code in job.target_languages if not is_supported(code)]
    if unknown:
        issues.append(
            ValidationIssue(
                severity="warning",
                code="UNKNOWN_LANGUAGE",
                message=f"Unknown language codes: {', '.join(unknown)}",
            )
        )

    return issues


def _resolve(base: Path, path: Path) -> Path:
    return path if path.is_absolute() else (base / path).resolve()


def _relative_to(path: Path, root: Path) -> Optional[str]:
    """POSIX path of ``path`` relative to ``root``, or None if outside it."""
    try:
        relative = path.resolve().relative_to(root.resolve())
    except ValueError:
        return None
    text = relative.as_posix()
    return "" if text == "." else text
