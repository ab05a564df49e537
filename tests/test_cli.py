import json
from types import SimpleNamespace

import pytest

from docs_translator import cli
from docs_translator.core.translation.translators import PassthroughTranslator

from .conftest import FakeTranslator


@pytest.fixture
def project(tmp_path):
    source = tmp_path / "docs"
    (source / "guide").mkdir(parents=True)
    (source / "a.md").write_text("# Alpha\n\nSee [intro](/guide/intro.md).\n", encoding="utf-8")
    (source / "guide" / "intro.md").write_text("# Intro\n\n`npm install`\n", encoding="utf-8")
    return source, tmp_path / "out"


def use_translator(monkeypatch, translator):
    monkeypatch.setattr(cli, "LiteLLMTranslator", SimpleNamespace(from_config=lambda config: translator))


def translate_args(source, target, *extra):
    return ["translate", "--source", str(source), "--target", str(target), "--languages", "es", "--delay", "0", *extra]


def test_languages_lists_supported_codes(capsys):
    assert cli.main(["languages"]) == cli.EXIT_OK

    out = capsys.readouterr().out
    assert "es" in out
    assert "Español (Spanish)" in out


def test_translate_writes_every_file(project, monkeypatch, capsys):
    source, target = project
    use_translator(monkeypatch, PassthroughTranslator())

    assert cli.main(translate_args(source, target)) == cli.EXIT_OK

    assert (target / "es" / "a.md").read_text(encoding="utf-8") == (
        "# Alpha\n\nSee [intro](/es/guide/intro.md).\n"
    )
    assert (target / "es" / "guide" / "intro.md").exists()
    assert "2/2 fully translated" in capsys.readouterr().out


def test_dry_run_writes_nothing(project):
    source, target = project

    assert cli.main(translate_args(source, target, "--dry-run")) == cli.EXIT_OK

    assert not target.exists()


def test_failed_item_exits_with_partial_status(project, monkeypatch, capsys):
    source, target = project
    use_translator(monkeypatch, FakeTranslator(fail={("a.md", "es")}))

    assert cli.main(translate_args(source, target)) == cli.EXIT_PARTIAL

    out = capsys.readouterr().out
    assert "FAILED a.md -> es" in out
    assert (target / "es" / "guide" / "intro.md").exists()


def test_fail_fast_abort_exits_with_partial_status(project, monkeypatch, capsys):
    source, target = project
    use_translator(monkeypatch, FakeTranslator(fail={("a.md", "es")}))

    assert cli.main(translate_args(source, target, "--fail-fast")) == cli.EXIT_PARTIAL

    assert "Aborted" in capsys.readouterr().err
    assert not (target / "es" / "guide" / "intro.md").exists()


def test_missing_arguments_are_structural(project, capsys):
    source, _ = project

    assert cli.main(["translate", "--source", str(source)]) == cli.EXIT_STRUCTURAL

    assert "--target" in capsys.readouterr().err


def test_invalid_override_is_structural(project):
    source, target = project

    assert cli.main(translate_args(source, target, "--concurrency", "0")) == cli.EXIT_STRUCTURAL


def test_empty_source_is_structural(tmp_path, capsys):
    source = tmp_path / "docs"
    source.mkdir()
    args = translate_args(source, tmp_path / "out", "--dry-run")

    assert cli.main(args) == cli.EXIT_STRUCTURAL

    assert "No source files" in capsys.readouterr().err


def test_validate_accepts_good_job(project, capsys):
    source, target = project

    args = ["validate", "--source", str(source), "--target", str(target), "--languages", "es", "fr"]
    assert cli.main(args) == cli.EXIT_OK

    assert "Job is valid" in capsys.readouterr().out


def test_validate_reports_circular_paths(project, tmp_path, capsys):
    source, _ = project
    job_file = tmp_path / "job.json"
    job_file.write_text(
        json.dumps(
            {
                "targetLanguages": ["es"],
                "fileProcessing": {"sourceDir": "docs", "targetDir": "docs/i18n"},
            }
        ),
        encoding="utf-8",
    )

    assert cli.main(["validate", "--config", str(job_file)]) == cli.EXIT_STRUCTURAL

    assert "CIRCULAR_PATHS" in capsys.readouterr().err


def test_clean_removes_translations(tmp_path, capsys):
    translated = tmp_path / "out" / "es" / "a.md"
    translated.parent.mkdir(parents=True)
    translated.write_text("# Alfa\n", encoding="utf-8")

    args = ["clean", "--target", str(tmp_path / "out"), "--languages", "es"]
    assert cli.main(args) == cli.EXIT_OK

    assert not translated.exists()
    assert "Removed 1 translated files" in capsys.readouterr().out
