"""Local filesystem implementation of the file access port.

Blocking filesystem calls run in the default executor so the event loop keeps
serving other workers while files are read and written.
"""

import asyncio
import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Callable, List, Pattern, Sequence, TypeVar

from ..translation.errors import ErrorCode, StructuralError, WriteError
from ..translation.models import FileProcessingPolicy, FileTranslationResult
from ..translation.ports import FileAccessPort

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIXES = {".md", ".markdown"}

T = TypeVar("T")


@lru_cache(maxsize=256)
def glob_to_regex(pattern: str) -> Pattern[str]:
    """Compile a glob with ``**`` support into an anchored regex.

    ``*`` and ``?`` never cross a ``/``; ``**/`` matches zero or more
    directories.
    """
    out = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("**/", i):
            out.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            out.append(".*")
            i += 2
        elif pattern[i] == "*":
            out.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            out.append("[^/]")
            i += 1
        elif pattern[i] == "[" and "]" in pattern[i + 1:]:
            end = pattern.index("]", i + 1)
            body = pattern[i + 1:end].replace("\\", "\\\\")
            if body.startswith("!"):
                body = "^" + body[1:]
            out.append(f"[{body}]")
            i = end + 1
        else:
            out.append(re.escape(pattern[i]))
            i += 1
    return re.compile("".join(out) + r"\Z")


def matches_any(relative_path: str, patterns: Sequence[str]) -> bool:
    return any(glob_to_regex(p).match(relative_path) for p in patterns)


class LocalFileAccess(FileAccessPort):
    """Reads markdown sources from and writes translations to local disk."""

    async def _run(self, func: Callable[..., T], *args) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    async def get_source_files(self, policy: FileProcessingPolicy) -> List[Path]:
        source_dir = policy.source_dir
        if not source_dir.is_dir():
            raise StructuralError(
                f"Source directory does not exist: {source_dir}",
                code=ErrorCode.DIRECTORY_NOT_FOUND,
                file=str(source_dir),
            )
        files = await self._run(self._scan, policy)
        logger.info(f"[Files] Found {len(files)} markdown files in {source_dir}")
        return files

    @staticmethod
    def _scan(policy: FileProcessingPolicy) -> List[Path]:
        found = set()
        for path in policy.source_dir.rglob("*"):
            if not path.is_file() or path.suffix.lower() not in MARKDOWN_SUFFIXES:
                continue
            relative = path.relative_to(policy.source_dir).as_posix()
            if not matches_any(relative, policy.include_patterns):
                continue
            if matches_any(relative, policy.exclude_patterns):
                continue
            found.add(path)
        return sorted(found)

    async def read_source_file(self, path: Path) -> str:
        if not path.is_file():
            raise StructuralError(
                f"Source file not found: {path}",
                code=ErrorCode.FILE_NOT_FOUND,
                file=str(path),
            )
        content = await self._run(path.read_text, "utf-8")
        if not content.strip():
            raise StructuralError(
                "Source file is empty",
                code=ErrorCode.INVALID_MARKDOWN,
                file=str(path),
            )
        return content

    def generate_target_path(
        self,
        source_path: Path,
        language: str,
        policy: FileProcessingPolicy,
    ) -> Path:
        language_dir = policy.target_dir / language
        if policy.preserve_structure:
            try:
                return language_dir / source_path.relative_to(policy.source_dir)
            except ValueError:
                logger.warning(
                    f"[Files] {source_path} is outside {policy.source_dir}; "
                    f"writing it at the top of {language_dir}"
                )
        return language_dir / source_path.name

    async def should_overwrite(self, target_path: Path, policy: FileProcessingPolicy) -> bool:
        if policy.overwrite_existing:
            return True
        return not await self._run(target_path.exists)

    async def ensure_target_directory(self, path: Path) -> None:
        await self._run(lambda: path.mkdir(parents=True, exist_ok=True))

    async def write_translated_file(self, result: FileTranslationResult) -> None:
        target = result.context.target_file
        if not result.success or result.translated_content is None:
            raise WriteError(
                f"Refusing to write a failed translation: {result.error}",
                file=str(target),
            )
        await self.ensure_target_directory(target.parent)
        content = result.translated_content
        try:
            await self._run(self._write_verified, target, content)
        except OSError as e:
            raise WriteError(f"Failed to write file: {e}", file=str(target)) from e
        logger.debug(f"[Files] Wrote {target} ({len(content)} chars)")

    @staticmethod
    def _write_verified(target: Path, content: str) -> None:
        with open(target, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        with open(target, "r", encoding="utf-8", newline="") as f:
            written = f.read()
        if written != content:
            raise WriteError("Written content does not match translation", file=str(target))

    async def clean_target_directory(
        self,
        policy: FileProcessingPolicy,
        languages: Sequence[str],
    ) -> int:
        removed = await self._run(self._clean, policy.target_dir, list(languages))
        logger.info(f"[Files] Removed {removed} translated files from {policy.target_dir}")
        return removed

    @staticmethod
    def _clean(target_dir: Path, languages: List[str]) -> int:
        removed = 0
        for language in languages:
            language_dir = target_dir / language
            if not language_dir.is_dir():
                continue
            for path in sorted(language_dir.rglob("*")):
                if path.is_file() and path.suffix.lower() in MARKDOWN_SUFFIXES:
                    path.unlink()
                    removed += 1
        return removed
