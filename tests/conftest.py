import asyncio
import time
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import pytest

from docs_translator.core.protection import MarkdownProtector
from docs_translator.core.translation.models import (
    FileProcessingPolicy,
    FileTranslationContext,
    FileTranslationResult,
    StrategyPolicy,
    TranslationJob,
)
from docs_translator.core.translation.ports import FileAccessPort, TranslationPort

SOURCE_DIR = Path("/docs")
TARGET_DIR = Path("/out")


class FakeTranslator(TranslationPort):
    """In-memory translation port recording every call."""

    def __init__(
        self,
        delay: float = 0.0,
        fail: Iterable[Tuple[str, str]] = (),
        raise_on: Iterable[Tuple[str, str]] = (),
        transform: Optional[Callable[[str, str], str]] = None,
        close_error: Optional[Exception] = None,
    ):
        self.delay = delay
        self.fail = set(fail)
        self.raise_on = set(raise_on)
        self.transform = transform or (lambda text, language: text)
        self.close_error = close_error
        self.calls: List[Tuple[str, str]] = []
        self.dispatch_times: List[float] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.close_calls = 0

    async def translate_file(self, context: FileTranslationContext) -> FileTranslationResult:
        key = (context.source_file.name, context.target_language)
        self.calls.append(key)
        self.dispatch_times.append(time.monotonic())
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if key in self.raise_on:
                raise RuntimeError("backend exploded")
            if key in self.fail:
                return FileTranslationResult.failure(context, "backend refused")
            return FileTranslationResult(
                context=context,
                success=True,
                translated_content=self.transform(
                    context.protected_content.content, context.target_language
                ),
            )
        finally:
            self.in_flight -= 1

    async def close(self) -> None:
        self.close_calls += 1
        if self.close_error is not None:
            raise self.close_error


class FakeFileAccess(FileAccessPort):
    """In-memory file access port."""

    def __init__(
        self,
        files: Dict[str, str],
        existing: Iterable[Path] = (),
        fail_writes: Iterable[Path] = (),
        fail_reads: Iterable[str] = (),
    ):
        self.files = {SOURCE_DIR / name: content for name, content in files.items()}
        self.existing = set(existing)
        self.fail_writes = set(fail_writes)
        self.fail_reads = set(fail_reads)
        self.written: Dict[Path, str] = {}
        self.events: List[object] = []

    async def get_source_files(self, policy: FileProcessingPolicy) -> List[Path]:
        self.events.append("list")
        return sorted(self.files)

    async def read_source_file(self, path: Path) -> str:
        self.events.append(("read", path.name))
        if path.name in self.fail_reads:
            raise OSError("permission denied")
        return self.files[path]

    def generate_target_path(
        self,
        source_path: Path,
        language: str,
        policy: FileProcessingPolicy,
    ) -> Path:
        return policy.target_dir / language / source_path.relative_to(policy.source_dir)

    async def should_overwrite(self, target_path: Path, policy: FileProcessingPolicy) -> bool:
        return policy.overwrite_existing or target_path not in self.existing

    async def ensure_target_directory(self, path: Path) -> None:
        return None

    async def write_translated_file(self, result: FileTranslationResult) -> None:
        target = result.context.target_file
        if target in self.fail_writes:
            raise OSError("disk full")
        self.events.append(("write", str(target)))
        self.written[target] = result.translated_content

    async def clean_target_directory(
        self,
        policy: FileProcessingPolicy,
        languages: Sequence[str],
    ) -> int:
        self.events.append("clean")
        return 0


@pytest.fixture
def make_job():
    def factory(
        languages: Sequence[str] = ("es", "fr"),
        overwrite: bool = False,
        **strategy,
    ) -> TranslationJob:
        strategy.setdefault("delay_between_translations", 0.0)
        return TranslationJob(
            target_languages=list(languages),
            file_processing=FileProcessingPolicy(
                source_dir=SOURCE_DIR,
                target_dir=TARGET_DIR,
                overwrite_existing=overwrite,
            ),
            strategy_config=StrategyPolicy(**strategy),
        )

    return factory


@pytest.fixture
def make_context():
    protector = MarkdownProtector()

    def factory(content: str, language: str = "es", name: str = "guide.md") -> FileTranslationContext:
        protected = protector.protect(content)
        return FileTranslationContext(
            source_file=SOURCE_DIR / name,
            target_file=TARGET_DIR / language / name,
            source_language="en",
            target_language=language,
            original_content=content,
            protected_content=protected,
        )

    return factory
