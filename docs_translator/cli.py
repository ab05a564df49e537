"""Command line interface.

Exit codes: 0 when every translation succeeded, 1 when some items failed or
the batch was aborted, 2 for configuration and other structural errors.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import settings
from .core.files import LocalFileAccess
from .core.translation import (
    BatchAbortedError,
    BatchTranslationResult,
    FileProcessingPolicy,
    FileTranslationResult,
    StrategyPolicy,
    StructuralError,
    TranslationJob,
    TranslationProgress,
    get_orchestrator,
)
from .core.translation.job_loader import create_default_job, load_job, validate_job
from .core.translation.translators import LiteLLMTranslator, PassthroughTranslator
from .languages import ENGLISH_NAMES, SUPPORTED_LANGUAGES

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_PARTIAL = 1
EXIT_STRUCTURAL = 2


class DryRunFileAccess(LocalFileAccess):
    """Reads real sources but never modifies the target tree."""

    async def ensure_target_directory(self, path: Path) -> None:
        return None

    async def write_translated_file(self, result: FileTranslationResult) -> None:
        logger.info(f"[Dry run] Would write {result.context.target_file}")

    async def clean_target_directory(self, policy, languages) -> int:
        logger.info(f"[Dry run] Would clean {len(languages)} language directories")
        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docs-translator",
        description="Translate a markdown documentation tree into multiple languages.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    translate = subparsers.add_parser("translate", help="Translate documentation")
    _add_job_arguments(translate)
    translate.add_argument("--overwrite", action="store_true", help="Clean and overwrite existing translations.")
    translate.add_argument("--concurrency", type=int, help="Number of concurrent translations.")
    translate.add_argument("--delay", type=float, help="Minimum seconds between translator calls.")
    translate.add_argument("--cache", action="store_true", help="Reuse identical translations within the run.")
    translate.add_argument("--fail-fast", action="store_true", help="Stop after the first failed translation.")
    translate.add_argument("--dry-run", action="store_true", help="Run the pipeline without a model and without writing.")
    translate.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")
    translate.set_defaults(handler=cmd_translate)

    languages = subparsers.add_parser("languages", help="List supported languages")
    languages.set_defaults(handler=cmd_languages)

    clean = subparsers.add_parser("clean", help="Remove translated markdown")
    clean.add_argument("--target", required=True, help="Root directory of translations.")
    clean.add_argument("--languages", nargs="+", required=True, help="Language codes to clean.")
    clean.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")
    clean.set_defaults(handler=cmd_clean)

    validate = subparsers.add_parser("validate", help="Validate a job without running it")
    _add_job_arguments(validate)
    validate.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")
    validate.set_defaults(handler=cmd_validate)

    return parser


def _add_job_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", type=Path, help="JSON job file.")
    parser.add_argument("--source", type=Path, help="Source documentation directory.")
    parser.add_argument("--target", type=Path, help="Root directory for translations.")
    parser.add_argument("--languages", nargs="+", help="Target language codes.")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(getattr(args, "verbose", False))
    try:
        return args.handler(args)
    except StructuralError as e:
        print(f"Error [{e.code.value}]: {e}", file=sys.stderr)
        return EXIT_STRUCTURAL
    except ValueError as e:
        print(f"Error: invalid job settings: {e}", file=sys.stderr)
        return EXIT_STRUCTURAL


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def resolve_job(args: argparse.Namespace) -> TranslationJob:
    """Build the job from --config or from --source/--target/--languages."""
    if args.config:
        return load_job(args.config)
    missing = [flag for flag, value in (
        ("--source", args.source), ("--target", args.target), ("--languages", args.languages)
    ) if not value]
    if missing:
        raise StructuralError(f"Missing {', '.join(missing)} (or pass --config)")
    return create_default_job(
        args.source,
        args.target,
        args.languages,
        source_language=settings.source_language,
        strategy_config=StrategyPolicy(
            max_concurrency=settings.max_concurrency,
            delay_between_translations=settings.delay_between_translations,
            continue_on_error=settings.continue_on_error,
            use_cache=settings.use_cache,
        ),
    )


def apply_overrides(job: TranslationJob, args: argparse.Namespace) -> TranslationJob:
    """Apply translate flags on top of the job."""
    strategy = job.strategy_config.model_dump()
    if args.concurrency is not None:
        strategy["max_concurrency"] = args.concurrency
    if args.delay is not None:
        strategy["delay_between_translations"] = args.delay
    if args.cache:
        strategy["use_cache"] = True
    if args.fail_fast:
        strategy["continue_on_error"] = False

    file_processing = job.file_processing
    if args.overwrite:
        file_processing = FileProcessingPolicy.model_validate(
            {**file_processing.model_dump(), "overwrite_existing": True}
        )

    return job.model_copy(
        update={
            "strategy_config": StrategyPolicy.model_validate(strategy),
            "file_processing": file_processing,
        }
    )


def cmd_translate(args: argparse.Namespace) -> int:
    job = apply_overrides(resolve_job(args), args)

    if _report_issues(job):
        return EXIT_STRUCTURAL

    if args.dry_run:
        translator = PassthroughTranslator()
        file_access = DryRunFileAccess()
    else:
        translator = LiteLLMTranslator.from_config(job.translator_config)
        file_access = LocalFileAccess()

    orchestrator = get_orchestrator()(translator, file_access)
    try:
        result = asyncio.run(orchestrator.execute(job, on_progress=print_progress))
    except BatchAbortedError as e:
        print(f"Aborted: {e}", file=sys.stderr)
        print_summary(e.result)
        return EXIT_PARTIAL

    print_summary(result)
    return EXIT_OK if result.success else EXIT_PARTIAL


def cmd_languages(args: argparse.Namespace) -> int:
    for code, native in SUPPORTED_LANGUAGES.items():
        print(f"{code:<6} {native} ({ENGLISH_NAMES.get(code, code)})")
    return EXIT_OK


def cmd_clean(args: argparse.Namespace) -> int:
    policy = FileProcessingPolicy(source_dir=args.target, target_dir=args.target)
    removed = asyncio.run(LocalFileAccess().clean_target_directory(policy, args.languages))
    print(f"Removed {removed} translated files")
    return EXIT_OK


def cmd_validate(args: argparse.Namespace) -> int:
    job = resolve_job(args)
    if _report_issues(job):
        return EXIT_STRUCTURAL
    print(
        f"Job is valid: {job.file_processing.source_dir} -> "
        f"{job.file_processing.target_dir} ({', '.join(job.target_languages)})"
    )
    return EXIT_OK


def _report_issues(job: TranslationJob) -> bool:
    """Print validation issues; returns True if any is an error."""
    issues = validate_job(job)
    for issue in issues:
        print(f"{issue.severity.upper()}: [{issue.code}] {issue.message}", file=sys.stderr)
    return any(issue.severity == "error" for issue in issues)


def print_progress(progress: TranslationProgress) -> None:
    if progress.message:
        print(f"[{progress.overall_progress:5.1f}%] {progress.phase.value}: {progress.message}")


def print_summary(result: BatchTranslationResult) -> None:
    stats = result.stats
    print()
    print(f"Files:        {stats.successful_files}/{stats.total_files} fully translated")
    print(f"Translations: {stats.total_translations} ({len(result.failed_results)} failed)")
    print(f"Characters:   {stats.total_characters}")
    print(f"Duration:     {result.total_duration:.1f}s")
    for failed in result.failed_results:
        print(f"  FAILED {failed.context.label}: {failed.error}")


if __name__ == "__main__":
    sys.exit(main())
