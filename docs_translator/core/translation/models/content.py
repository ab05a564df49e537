"""Protected content and per-item translation context."""

from pathlib import Path
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class ProtectedContent(BaseModel):
    """Markdown with non-translatable constructs replaced by placeholder tokens.

    Every token in ``content`` has exactly one entry, in appearance order, in
    ``protected_elements`` (keyed by construct class) or in ``yaml_texts``.
    """

    model_config = ConfigDict(frozen=True)

    content: str = Field(..., description="Text with placeholder tokens")
    protected_elements: Dict[str, List[str]] = Field(
        default_factory=dict,
        description="Construct class -> raw fragments in appearance order",
    )
    element_tags: Dict[str, str] = Field(
        default_factory=dict,
        description="Token tag -> construct class, for classes present in content",
    )
    yaml_texts: List[str] = Field(
        default_factory=list,
        description="Translatable frontmatter values in appearance order",
    )
    original_content: str = Field(..., description="Verbatim source for fallback")
    token_salt: str = Field(
        default="", description="Salt making tokens unique against the source"
    )

    @property
    def element_count(self) -> int:
        """Total number of opaque fragments."""
        return sum(len(items) for items in self.protected_elements.values())

    @property
    def has_placeholders(self) -> bool:
        return bool(self.element_count or self.yaml_texts)


class FileTranslationContext(BaseModel):
    """Everything needed to translate one source file into one language."""

    model_config = ConfigDict(frozen=True)

    source_file: Path
    target_file: Path
    source_language: str
    target_language: str
    original_content: str
    protected_content: ProtectedContent

    @property
    def label(self) -> str:
        """Short description for logs and progress messages."""
        return f"{self.source_file.name} -> {self.target_language}"
