from pathlib import Path

import pytest

from docs_translator.core.files import LocalFileAccess, glob_to_regex, matches_any
from docs_translator.core.protection import MarkdownProtector
from docs_translator.core.translation.errors import ErrorCode, StructuralError, WriteError
from docs_translator.core.translation.models import (
    FileProcessingPolicy,
    FileTranslationContext,
    FileTranslationResult,
)


@pytest.fixture
def docs(tmp_path):
    source = tmp_path / "docs"
    files = {
        "index.md": "# Home\n",
        "guide/intro.md": "# Intro\n",
        "guide/test-draft.md": "# Draft\n",
        "node_modules/pkg/readme.md": "# Package\n",
        "notes.txt": "not markdown\n",
        "legacy.markdown": "# Legacy\n",
    }
    for name, content in files.items():
        path = source / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return source


@pytest.fixture
def access():
    return LocalFileAccess()


def make_result(source: Path, target: Path, content: str) -> FileTranslationResult:
    context = FileTranslationContext(
        source_file=source,
        target_file=target,
        source_language="en",
        target_language="es",
        original_content=content,
        protected_content=MarkdownProtector().protect(content),
    )
    return FileTranslationResult(context=context, success=True, translated_content=content)


class TestGlobs:
    @pytest.mark.parametrize(
        "pattern, path, expected",
        [
            ("**/*.md", "index.md", True),
            ("**/*.md", "a/b/c.md", True),
            ("*.md", "a/b.md", False),
            ("guide/?.md", "guide/a.md", True),
            ("guide/?.md", "guide/ab.md", False),
            ("**/node_modules/**", "node_modules/pkg/readme.md", True),
            ("i18n/es/**", "i18n/es/guide/a.md", True),
            ("i18n/es/**", "i18n/fr/guide/a.md", False),
            ("[!_]*.md", "_partial.md", False),
            ("docs.md", "docsXmd", False),
        ],
    )
    def test_glob_to_regex(self, pattern, path, expected):
        assert bool(glob_to_regex(pattern).match(path)) is expected

    def test_matches_any(self):
        assert matches_any("a/test-x.md", ["**/*.test.md", "**/test-*.md"])
        assert not matches_any("a/x.md", ["**/*.test.md", "**/test-*.md"])


class TestSourceFiles:
    async def test_default_patterns(self, access, docs, tmp_path):
        policy = FileProcessingPolicy(source_dir=docs, target_dir=tmp_path / "out")

        files = await access.get_source_files(policy)

        assert files == [docs / "guide" / "intro.md", docs / "index.md"]

    async def test_custom_patterns(self, access, docs, tmp_path):
        policy = FileProcessingPolicy(
            source_dir=docs,
            target_dir=tmp_path / "out",
            include_patterns=["**/*.markdown", "guide/*.md"],
            exclude_patterns=[],
        )

        files = await access.get_source_files(policy)

        assert files == [
            docs / "guide" / "intro.md",
            docs / "guide" / "test-draft.md",
            docs / "legacy.markdown",
        ]

    async def test_missing_source_directory(self, access, tmp_path):
        policy = FileProcessingPolicy(source_dir=tmp_path / "missing", target_dir=tmp_path)

        with pytest.raises(StructuralError) as excinfo:
            await access.get_source_files(policy)

        assert excinfo.value.code == ErrorCode.DIRECTORY_NOT_FOUND

    async def test_read_source_file(self, access, docs):
        assert await access.read_source_file(docs / "index.md") == "# Home\n"

    async def test_read_missing_file(self, access, docs):
        with pytest.raises(StructuralError) as excinfo:
            await access.read_source_file(docs / "nope.md")

        assert excinfo.value.code == ErrorCode.FILE_NOT_FOUND

    async def test_read_empty_file(self, access, docs):
        empty = docs / "empty.md"
        empty.write_text("  \n", encoding="utf-8")

        with pytest.raises(StructuralError) as excinfo:
            await access.read_source_file(empty)

        assert excinfo.value.code == ErrorCode.INVALID_MARKDOWN


class TestTargets:
    def test_structure_is_preserved(self, access, docs, tmp_path):
        policy = FileProcessingPolicy(source_dir=docs, target_dir=tmp_path / "out")

        target = access.generate_target_path(docs / "guide" / "intro.md", "es", policy)

        assert target == tmp_path / "out" / "es" / "guide" / "intro.md"

    def test_flat_layout(self, access, docs, tmp_path):
        policy = FileProcessingPolicy(
            source_dir=docs, target_dir=tmp_path / "out", preserve_structure=False
        )

        target = access.generate_target_path(docs / "guide" / "intro.md", "es", policy)

        assert target == tmp_path / "out" / "es" / "intro.md"

    def test_source_outside_tree_falls_back_to_name(self, access, docs, tmp_path):
        policy = FileProcessingPolicy(source_dir=docs, target_dir=tmp_path / "out")

        target = access.generate_target_path(tmp_path / "elsewhere" / "x.md", "es", policy)

        assert target == tmp_path / "out" / "es" / "x.md"

    async def test_should_overwrite(self, access, tmp_path):
        existing = tmp_path / "out" / "es" / "a.md"
        existing.parent.mkdir(parents=True)
        existing.write_text("old", encoding="utf-8")
        keep = FileProcessingPolicy(source_dir=tmp_path, target_dir=tmp_path / "out")
        replace = FileProcessingPolicy(
            source_dir=tmp_path, target_dir=tmp_path / "out", overwrite_existing=True
        )

        assert not await access.should_overwrite(existing, keep)
        assert await access.should_overwrite(existing, replace)
        assert await access.should_overwrite(existing.with_name("b.md"), keep)

    async def test_write_creates_directories_and_keeps_line_endings(self, access, docs, tmp_path):
        target = tmp_path / "out" / "es" / "guide" / "intro.md"
        content = "# Introducción\r\n\r\nTexto\n"

        await access.write_translated_file(make_result(docs / "guide" / "intro.md", target, content))

        assert target.read_bytes() == content.encode("utf-8")

    async def test_refuses_failed_result(self, access, docs, tmp_path):
        ok = make_result(docs / "index.md", tmp_path / "out" / "es" / "index.md", "# Inicio\n")
        failed = FileTranslationResult.failure(ok.context, "backend refused")

        with pytest.raises(WriteError):
            await access.write_translated_file(failed)

        assert not ok.context.target_file.exists()

    async def test_clean_removes_only_markdown_of_listed_languages(self, access, tmp_path):
        out = tmp_path / "out"
        for name in ("es/a.md", "es/guide/b.markdown", "es/img/logo.png", "fr/a.md"):
            path = out / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("x", encoding="utf-8")
        policy = FileProcessingPolicy(source_dir=tmp_path, target_dir=out)

        removed = await access.clean_target_directory(policy, ["es", "de"])

        assert removed == 2
        assert (out / "es" / "img" / "logo.png").exists()
        assert (out / "fr" / "a.md").exists()
        assert not (out / "es" / "a.md").exists()
