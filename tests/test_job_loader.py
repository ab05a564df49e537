import json

import pytest
from pydantic import ValidationError

from docs_translator.core.translation.errors import ConfigurationError, ErrorCode
from docs_translator.core.translation.job_loader import create_default_job, load_job, validate_job
from docs_translator.core.translation.models import (
    DEFAULT_EXCLUDE_PATTERNS,
    CustomProtectionPattern,
    FileProcessingPolicy,
    ProtectionPolicy,
    TranslationJob,
)


def write_job(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def issue_codes(job):
    return [issue.code for issue in validate_job(job)]


class TestLoadJob:
    def test_camel_case_keys_and_relative_paths(self, tmp_path):
        (tmp_path / "docs").mkdir()
        job_file = write_job(
            tmp_path / "job.json",
            {
                "sourceLanguage": "en",
                "targetLanguages": ["ES", "fr"],
                "fileProcessing": {
                    "sourceDir": "docs",
                    "targetDir": "out",
                    "overwriteExisting": True,
                },
                "strategyConfig": {"maxConcurrency": 4, "delayBetweenTranslations": 0},
                "markdownProtection": {
                    "customPatterns": [
                        {"name": "variables", "pattern": "\\{\\{[^}]+\\}\\}", "placeholder": "v"}
                    ]
                },
                "translatorConfig": {"model": "gpt-4o"},
            },
        )

        job = load_job(job_file)

        assert job.target_languages == ["es", "fr"]
        assert job.file_processing.source_dir == (tmp_path / "docs").resolve()
        assert job.file_processing.target_dir == (tmp_path / "out").resolve()
        assert job.file_processing.overwrite_existing
        assert job.strategy_config.max_concurrency == 4
        assert job.markdown_protection.custom_patterns[0].placeholder == "v"
        assert job.translator_config == {"model": "gpt-4o"}

    def test_snake_case_keys_and_absolute_paths(self, tmp_path):
        job_file = write_job(
            tmp_path / "job.json",
            {
                "target_languages": ["de"],
                "file_processing": {
                    "source_dir": str(tmp_path / "src"),
                    "target_dir": str(tmp_path / "dst"),
                },
            },
        )

        job = load_job(job_file)

        assert job.file_processing.source_dir == tmp_path / "src"
        assert job.strategy_config.max_concurrency == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError) as excinfo:
            load_job(tmp_path / "missing.json")

        assert excinfo.value.code == ErrorCode.FILE_NOT_FOUND

    def test_invalid_job(self, tmp_path):
        job_file = write_job(
            tmp_path / "job.json",
            {
                "targetLanguages": [],
                "fileProcessing": {"sourceDir": "docs", "targetDir": "out"},
                "strategyConfig": {"maxConcurrency": 0},
            },
        )

        with pytest.raises(ConfigurationError) as excinfo:
            load_job(job_file)

        assert excinfo.value.code == ErrorCode.INVALID_CONFIG
        assert len(excinfo.value.details["errors"]) == 2

    def test_unknown_keys_are_rejected(self, tmp_path):
        job_file = write_job(
            tmp_path / "job.json",
            {
                "targetLanguages": ["es"],
                "fileProcessing": {"sourceDir": "docs", "targetDir": "out"},
                "speed": "fast",
            },
        )

        with pytest.raises(ConfigurationError):
            load_job(job_file)


class TestJobModel:
    def policy(self, tmp_path):
        return FileProcessingPolicy(source_dir=tmp_path, target_dir=tmp_path / "out")

    def test_repeated_languages_rejected(self, tmp_path):
        with pytest.raises(ValidationError):
            TranslationJob(target_languages=["es", "ES"], file_processing=self.policy(tmp_path))

    def test_source_language_cannot_be_target(self, tmp_path):
        with pytest.raises(ValidationError):
            TranslationJob(target_languages=["en", "es"], file_processing=self.policy(tmp_path))

    def test_empty_include_patterns_rejected(self, tmp_path):
        with pytest.raises(ValidationError):
            FileProcessingPolicy(source_dir=tmp_path, target_dir=tmp_path, include_patterns=[])

    @pytest.mark.parametrize("placeholder", ["c", "yaml", "V", "v1", ""])
    def test_invalid_placeholders_rejected(self, placeholder):
        with pytest.raises(ValidationError):
            CustomProtectionPattern(name="vars", pattern="x", placeholder=placeholder)

    def test_invalid_regex_rejected(self):
        with pytest.raises(ValidationError):
            CustomProtectionPattern(name="vars", pattern="(", placeholder="v")

    def test_custom_names_cannot_shadow_builtin_classes(self):
        with pytest.raises(ValidationError):
            ProtectionPolicy(
                custom_patterns=[CustomProtectionPattern(name="links", pattern="x", placeholder="v")]
            )

    def test_custom_placeholders_must_be_unique(self):
        with pytest.raises(ValidationError):
            ProtectionPolicy(
                custom_patterns=[
                    CustomProtectionPattern(name="a", pattern="x", placeholder="v"),
                    CustomProtectionPattern(name="b", pattern="y", placeholder="v"),
                ]
            )


class TestDefaultJob:
    def test_nested_target_is_excluded(self, tmp_path):
        job = create_default_job(tmp_path, tmp_path / "i18n", ["es", "FR"])

        assert job.target_languages == ["es", "fr"]
        assert "i18n/es/**" in job.file_processing.exclude_patterns
        assert "i18n/fr/**" in job.file_processing.exclude_patterns
        assert issue_codes(job) == []

    def test_target_equal_to_source(self, tmp_path):
        job = create_default_job(tmp_path, tmp_path, ["es"])

        assert "es/**" in job.file_processing.exclude_patterns
        assert issue_codes(job) == []

    def test_separate_target_adds_no_excludes(self, tmp_path):
        (tmp_path / "docs").mkdir()
        job = create_default_job(tmp_path / "docs", tmp_path / "out", ["es"])

        assert job.file_processing.exclude_patterns == DEFAULT_EXCLUDE_PATTERNS
        assert issue_codes(job) == []


class TestValidateJob:
    def test_missing_source_directory(self, tmp_path):
        job = create_default_job(tmp_path / "missing", tmp_path / "out", ["es"])

        assert issue_codes(job) == ["MISSING_SOURCE_DIR"]

    def test_unexcluded_output_inside_source(self, tmp_path):
        job = TranslationJob(
            target_languages=["es"],
            file_processing=FileProcessingPolicy(source_dir=tmp_path, target_dir=tmp_path / "i18n"),
        )

        assert issue_codes(job) == ["CIRCULAR_PATHS"]

    def test_source_inside_output(self, tmp_path):
        source = tmp_path / "es" / "docs"
        source.mkdir(parents=True)
        job = create_default_job(source, tmp_path, ["es"])

        assert issue_codes(job) == ["CIRCULAR_PATHS"]

    def test_unknown_language_is_a_warning(self, tmp_path):
        job = create_default_job(tmp_path, tmp_path / "out", ["es", "xx"])

        issues = validate_job(job)

        assert [(i.severity, i.code) for i in issues] == [("warning", "UNKNOWN_LANGUAGE")]
        assert "xx" in issues[0].message
