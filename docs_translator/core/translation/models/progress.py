"""Progress reporting model."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TranslationPhase(str, Enum):
    """Named stages of a batch execution."""

    CLEANING = "cleaning"
    INITIALIZATION = "initialization"
    PROTECTION = "protection"
    TRANSLATION = "translation"
    RESTORATION = "restoration"
    WRITING = "writing"
    COMPLETE = "complete"


class TranslationProgress(BaseModel):
    """Snapshot of batch progress delivered to progress callbacks."""

    model_config = ConfigDict(frozen=True)

    phase: TranslationPhase
    current_file: Optional[str] = None
    current_language: Optional[str] = None
    files_completed: int = 0
    total_files: int = 0
    languages_completed: int = 0
    total_languages: int = 0
    overall_progress: float = Field(default=0.0, ge=0.0, le=100.0)
    time_elapsed: float = Field(default=0.0, description="Seconds since start")
    estimated_time_remaining: Optional[float] = Field(
        default=None, description="Seconds, once any progress has been made"
    )
    message: Optional[str] = None
