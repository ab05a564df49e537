"""Translation job models.

A TranslationJob is the complete, already validated description of one batch:
which files, which languages, what to protect and how to schedule the work.
Job files may use either snake_case or camelCase keys.
"""

import re
from pathlib import Path
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

DEFAULT_INCLUDE_PATTERNS = ["**/*.md"]

DEFAULT_EXCLUDE_PATTERNS = [
    "**/node_modules/**",
    "**/dist/**",
    "**/build/**",
    "**/.git/**",
    "**/test-*.md",
    "**/*.test.md",
]

# Tags used by the built-in protection passes
RESERVED_TOKEN_KINDS = frozenset({"f", "c", "i", "l", "h", "y", "yaml"})
RESERVED_CLASS_NAMES = frozenset({"frontmatter", "code_blocks", "inline_code", "links", "html_tags"})


class JobModel(BaseModel):
    """Immutable base accepting both snake_case and camelCase keys."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class FileProcessingPolicy(JobModel):
    """Where to read sources from and where to write translations."""

    source_dir: Path = Field(..., description="Root directory of source markdown")
    target_dir: Path = Field(..., description="Root directory for translations")
    include_patterns: List[str] = Field(
        default_factory=lambda: list(DEFAULT_INCLUDE_PATTERNS),
        description="Glob patterns, relative to source_dir, of files to translate",
    )
    exclude_patterns: List[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS),
        description="Glob patterns of files to skip",
    )
    preserve_structure: bool = Field(
        default=True, description="Mirror the source directory layout per language"
    )
    overwrite_existing: bool = Field(
        default=False, description="Clean and overwrite existing translations"
    )

    @field_validator("include_patterns")
    @classmethod
    def _non_empty_includes(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("include_patterns cannot be empty")
        return value


class CustomProtectionPattern(JobModel):
    """User-defined construct to keep out of translation."""

    name: str = Field(..., min_length=1, description="Construct class name")
    pattern: str = Field(..., description="Regular expression to protect")
    placeholder: str = Field(..., description="Lowercase token tag for matches")

    @field_validator("pattern")
    @classmethod
    def _compiles(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid regular expression: {e}") from e
        return value

    @field_validator("placeholder")
    @classmethod
    def _valid_tag(cls, value: str) -> str:
        if not re.fullmatch(r"[a-z]+", value):
            raise ValueError("placeholder must be lowercase ASCII letters")
        if value in RESERVED_TOKEN_KINDS:
            raise ValueError(f"placeholder '{value}' is reserved")
        return value


class ProtectionPolicy(JobModel):
    """Which markdown constructs are hidden from the translator."""

    protect_code_blocks: bool = True
    protect_inline_code: bool = True
    protect_yaml_frontmatter: bool = True
    protect_html_tags: bool = True
    protect_links: bool = True
    custom_patterns: List[CustomProtectionPattern] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_custom_tags(self) -> "ProtectionPolicy":
        tags = [p.placeholder for p in self.custom_patterns]
        if len(tags) != len(set(tags)):
            raise ValueError("custom pattern placeholders must be unique")
        names = [p.name for p in self.custom_patterns]
        if len(names) != len(set(names)) or RESERVED_CLASS_NAMES.intersection(names):
            raise ValueError("custom pattern names must be unique and not shadow built-in classes")
        return self


class StrategyPolicy(JobModel):
    """Scheduling and failure policy for a batch."""

    max_concurrency: int = Field(default=1, ge=1, description="Worker pool size")
    delay_between_translations: float = Field(
        default=0.5, ge=0.0, description="Minimum seconds between dispatches"
    )
    continue_on_error: bool = Field(
        default=True, description="Keep going after an item fails"
    )
    use_cache: bool = Field(default=False, description="Reuse cached translations")


class PostProcessingPolicy(JobModel):
    """Fixes applied to restored translations before writing."""

    fix_punctuation: bool = True
    localize_links: bool = True


class TranslationJob(JobModel):
    """Complete configuration of one translation batch."""

    source_language: str = Field(default="en", min_length=1)
    target_languages: List[str] = Field(..., min_length=1)
    file_processing: FileProcessingPolicy
    markdown_protection: ProtectionPolicy = Field(default_factory=ProtectionPolicy)
    strategy_config: StrategyPolicy = Field(default_factory=StrategyPolicy)
    postprocessing: PostProcessingPolicy = Field(default_factory=PostProcessingPolicy)
    translator_config: Dict[str, Any] = Field(
        default_factory=dict, description="Opaque translator settings"
    )

    @field_validator("target_languages")
    @classmethod
    def _ordered_set(cls, value: List[str]) -> List[str]:
        normalised = [code.strip().lower() for code in value]
        if any(not code for code in normalised):
            raise ValueError("target language codes cannot be blank")
        if len(normalised) != len(set(normalised)):
            raise ValueError("target languages must not repeat")
        return normalised

    @model_validator(mode="after")
    def _source_not_targeted(self) -> "TranslationJob":
        if self.source_language.lower() in self.target_languages:
            raise ValueError("source language cannot also be a target language")
        return self
