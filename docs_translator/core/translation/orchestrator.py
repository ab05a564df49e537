"""Batch Orchestrator - Translates a documentation tree into many languages.

The orchestrator owns the workflow only. Reading and writing files is delegated
to a FileAccessPort, translation to a TranslationPort, and placeholder
handling to the MarkdownProtector.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..cache import TranslationCache
from ..protection import MarkdownProtector
from .errors import (
    BatchAbortedError,
    ErrorCode,
    ItemTranslationError,
    NoSourceFilesError,
    ProtectionError,
    ResourceCloseError,
    RestorationIntegrityError,
    StructuralError,
    TranslationSystemError,
    WriteError,
)
from .models import (
    BatchTranslationResult,
    FileTranslationContext,
    FileTranslationResult,
    ProtectedContent,
    TranslationJob,
    TranslationPhase,
    TranslationProgress,
    TranslationStats,
)
from .ports import FileAccessPort, ProgressCallback, TranslationPort
from .postprocess import ContentPostProcessor

logger = logging.getLogger(__name__)


class ProgressTracker:
    """Builds progress snapshots and delivers them to the callback.

    Overall progress never decreases. Callback failures are logged and
    otherwise ignored so that a broken sink cannot break a batch.
    """

    def __init__(
        self,
        callback: Optional[ProgressCallback],
        total_files: int,
        total_languages: int,
    ):
        self._callback = callback
        self._total_files = total_files
        self._total_languages = total_languages
        self._total_items = total_files * total_languages
        self._started = time.monotonic()
        self._last_progress = 0.0
        self._items_done = 0
        self._done_per_file: Dict[Path, int] = {}

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self._started

    @property
    def files_completed(self) -> int:
        return sum(
            1 for done in self._done_per_file.values() if done >= self._total_languages
        )

    def emit(
        self,
        phase: TranslationPhase,
        message: Optional[str] = None,
        context: Optional[FileTranslationContext] = None,
        progress: Optional[float] = None,
    ) -> None:
        if progress is None:
            progress = self._last_progress
        progress = max(self._last_progress, min(100.0, progress))
        self._last_progress = progress

        elapsed = self.elapsed
        remaining = None
        if self._items_done and self._total_items:
            remaining = elapsed / self._items_done * (self._total_items - self._items_done)

        languages_completed = 0
        if context is not None:
            languages_completed = self._done_per_file.get(context.source_file, 0)

        snapshot = TranslationProgress(
            phase=phase,
            current_file=str(context.source_file) if context else None,
            current_language=context.target_language if context else None,
            files_completed=self.files_completed,
            total_files=self._total_files,
            languages_completed=languages_completed,
            total_languages=self._total_languages,
            overall_progress=progress,
            time_elapsed=elapsed,
            estimated_time_remaining=remaining,
            message=message,
        )

        if self._callback is None:
            return
        try:
            self._callback(snapshot)
        except Exception as e:
            logger.warning(f"[Orchestrator] Progress callback failed: {e}")

    def item_finished(self, context: FileTranslationContext, success: bool) -> None:
        """Record a settled work item and emit the updated progress."""
        self._items_done += 1
        self._done_per_file[context.source_file] = (
            self._done_per_file.get(context.source_file, 0) + 1
        )
        status = "Translated" if success else "Failed"
        self.emit(
            TranslationPhase.TRANSLATION,
            message=f"{status} {context.label}",
            context=context,
            progress=self._items_done / self._total_items * 100 if self._total_items else 100.0,
        )


class _Pacer:
    """Keeps consecutive dispatches at least ``delay`` seconds apart."""

    def __init__(self, delay: float):
        self._delay = delay
        self._lock = asyncio.Lock()
        self._last_dispatch: Optional[float] = None

    async def wait(self) -> None:
        if self._delay <= 0:
            return
        loop = asyncio.get_running_loop()
        async with self._lock:
            if self._last_dispatch is not None:
                pause = self._last_dispatch + self._delay - loop.time()
                if pause > 0:
                    await asyncio.sleep(pause)
            self._last_dispatch = loop.time()


@dataclass
class _WorkItem:
    index: int
    context: FileTranslationContext


@dataclass
class _BatchRun:
    """Mutable state of one execute() call."""

    job: TranslationJob
    items: List[_WorkItem]
    tracker: ProgressTracker
    pacer: _Pacer
    post_processor: ContentPostProcessor
    cache: Optional[TranslationCache]
    results: List[Optional[FileTranslationResult]] = field(default_factory=list)
    stop: asyncio.Event = field(default_factory=asyncio.Event)
    first_failure: Optional[Exception] = None


class BatchOrchestrator:
    """Runs a TranslationJob across every (file, language) pair.

    Workflow:
    1. Enumerate sources (fatal if none), optionally clean old output
    2. Read and protect every source file once
    3. Drain the work set through a bounded worker pool with paced dispatch
    4. Restore, post-process and write each translation
    5. Aggregate statistics; always close the translator
    """

    def __init__(
        self,
        translator: TranslationPort,
        file_access: FileAccessPort,
        protector: Optional[MarkdownProtector] = None,
        cache: Optional[TranslationCache] = None,
        post_processor: Optional[ContentPostProcessor] = None,
    ):
        """Initialize the orchestrator.

        Args:
            translator: Translation backend
            file_access: Source/target file access
            protector: Markdown protector (default instance if omitted)
            cache: Translation cache; created on demand when a job enables caching
            post_processor: Fixed post-processor; by default one is built per job
        """
        self.translator = translator
        self.file_access = file_access
        self.protector = protector or MarkdownProtector()
        self.cache = cache
        self.post_processor = post_processor

    async def execute(
        self,
        job: TranslationJob,
        on_progress: Optional[ProgressCallback] = None,
    ) -> BatchTranslationResult:
        """Translate every source file of ``job`` into every target language.

        Args:
            job: Validated job description
            on_progress: Optional callable receiving TranslationProgress snapshots

        Returns:
            BatchTranslationResult with one result per (file, language), in
            files-outer, languages-inner order

        Raises:
            StructuralError: No source files, unreadable sources or protection failure
            BatchAbortedError: An item failed while continue_on_error is off
        """
        started = time.monotonic()
        policy = job.file_processing
        languages = job.target_languages

        try:
            source_files = list(await self.file_access.get_source_files(policy))
            if not source_files:
                raise NoSourceFilesError(
                    f"No source files found in {policy.source_dir}",
                    details={
                        "include_patterns": policy.include_patterns,
                        "exclude_patterns": policy.exclude_patterns,
                    },
                )

            tracker = ProgressTracker(on_progress, len(source_files), len(languages))

            if policy.overwrite_existing:
                tracker.emit(
                    TranslationPhase.CLEANING,
                    message=f"Cleaning existing translations for {len(languages)} languages",
                    progress=0.0,
                )
                await self._clean_targets(job)

            logger.info(
                f"[Orchestrator] Starting batch: {len(source_files)} files x "
                f"{len(languages)} languages, concurrency={job.strategy_config.max_concurrency}"
            )
            tracker.emit(
                TranslationPhase.INITIALIZATION,
                message=f"Found {len(source_files)} files for {len(languages)} languages",
                progress=0.0,
            )

            protected = await self._protect_sources(job, source_files, tracker)
            run = self._prepare_run(job, source_files, protected, tracker)

            await self._drain(run)

            results = [r for r in run.results if r is not None]
            total_duration = time.monotonic() - started
            stats = self._build_stats(source_files, languages, results, total_duration)
            batch = BatchTranslationResult(
                success=len(results) == len(run.items) and all(r.success for r in results),
                file_results=results,
                total_duration=total_duration,
                stats=stats,
            )

            if run.first_failure is not None:
                logger.warning(
                    f"[Orchestrator] Batch aborted after {len(results)} of "
                    f"{len(run.items)} items: {run.first_failure}"
                )
                raise BatchAbortedError(
                    f"Batch aborted after first failure: {run.first_failure}",
                    result=batch,
                ) from run.first_failure

            tracker.emit(
                TranslationPhase.COMPLETE,
                message=(
                    f"Completed {stats.total_translations} translations, "
                    f"{stats.successful_files}/{stats.total_files} files fully translated"
                ),
                progress=100.0,
            )
            logger.info(
                f"[Orchestrator] Batch finished in {total_duration:.2f}s: "
                f"{stats.successful_files} succeeded, {stats.failed_files} failed"
            )
            return batch
        finally:
            await self._close_translator()

    async def _clean_targets(self, job: TranslationJob) -> None:
        try:
            removed = await self.file_access.clean_target_directory(
                job.file_processing, job.target_languages
            )
        except TranslationSystemError:
            raise
        except Exception as e:
            raise StructuralError(
                f"Failed to clean target directory: {e}",
                code=ErrorCode.FILE_WRITE_FAILED,
                file=str(job.file_processing.target_dir),
            ) from e
        logger.info(f"[Orchestrator] Removed {removed} existing translations")

    async def _protect_sources(
        self,
        job: TranslationJob,
        source_files: List[Path],
        tracker: ProgressTracker,
    ) -> Dict[Path, ProtectedContent]:
        """Read and protect each source file once."""
        protected: Dict[Path, ProtectedContent] = {}
        for path in source_files:
            tracker.emit(TranslationPhase.PROTECTION, message=f"Protecting {path.name}")
            try:
                content = await self.file_access.read_source_file(path)
            except StructuralError:
                raise
            except Exception as e:
                raise ProtectionError(
                    f"Failed to read source file: {e}", file=str(path)
                ) from e

            try:
                protected[path] = self.protector.protect(content, job.markdown_protection)
            except ProtectionError as e:
                raise ProtectionError(e.message, file=str(path), details=e.details) from e

            logger.debug(
                f"[Orchestrator] Protected {path.name}: "
                f"{protected[path].element_count} fragments"
            )
        return protected

    def _prepare_run(
        self,
        job: TranslationJob,
        source_files: List[Path],
        protected: Dict[Path, ProtectedContent],
        tracker: ProgressTracker,
    ) -> _BatchRun:
        items: List[_WorkItem] = []
        for path in source_files:
            for language in job.target_languages:
                context = FileTranslationContext(
                    source_file=path,
                    target_file=self.file_access.generate_target_path(
                        path, language, job.file_processing
                    ),
                    source_language=job.source_language,
                    target_language=language,
                    original_content=protected[path].original_content,
                    protected_content=protected[path],
                )
                items.append(_WorkItem(index=len(items), context=context))

        cache = None
        if job.strategy_config.use_cache:
            if self.cache is None:
                self.cache = TranslationCache()
            cache = self.cache

        return _BatchRun(
            job=job,
            items=items,
            tracker=tracker,
            pacer=_Pacer(job.strategy_config.delay_between_translations),
            post_processor=self.post_processor or ContentPostProcessor(job.postprocessing),
            cache=cache,
            results=[None] * len(items),
        )

    async def _drain(self, run: _BatchRun) -> None:
        """Process the work set with exactly max_concurrency workers."""
        queue: "asyncio.Queue[_WorkItem]" = asyncio.Queue()
        for item in run.items:
            queue.put_nowait(item)

        run.tracker.emit(
            TranslationPhase.TRANSLATION,
            message=f"Translating {len(run.items)} items",
        )

        async def worker() -> None:
            while not run.stop.is_set():
                try:
                    item = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return
                result = await self._process_item(item, run)
                if result is None:
                    return
                run.results[item.index] = result
                run.tracker.item_finished(item.context, result.success)

        workers = [worker() for _ in range(run.job.strategy_config.max_concurrency)]
        await asyncio.gather(*workers)

    async def _process_item(
        self,
        item: _WorkItem,
        run: _BatchRun,
    ) -> Optional[FileTranslationResult]:
        """Translate, restore and write one work item.

        Returns None when fail-fast stopped the item before dispatch.
        """
        context = item.context
        started = time.monotonic()
        retries = 0
        cached = False
        translated: Optional[str] = None

        key = None
        if run.cache is not None:
            key = run.cache.make_key(context.protected_content.content, context.target_language)
            translated = run.cache.get(key)
            if translated is not None:
                cached = True
                logger.debug(f"[Orchestrator] Cache hit for {context.label}")

        if translated is None:
            await run.pacer.wait()
            if run.stop.is_set():
                return None

            logger.debug(f"[Orchestrator] Dispatching {context.label}")
            run.tracker.emit(
                TranslationPhase.TRANSLATION,
                message=f"Translating {context.label}",
                context=context,
            )
            try:
                port_result = await self.translator.translate_file(context)
            except Exception as e:
                error = e if isinstance(e, TranslationSystemError) else ItemTranslationError(
                    f"Translation failed: {e}", file=str(context.source_file)
                )
                return self._failed(run, context, error, started, retries, cause=e)

            retries = port_result.retries
            if not port_result.success:
                error = ItemTranslationError(
                    port_result.error or "Translation failed", file=str(context.source_file)
                )
                return self._failed(run, context, error, started, retries)

            translated = port_result.translated_content
            if run.cache is not None and key is not None:
                run.cache.set(key, translated)

        run.tracker.emit(
            TranslationPhase.RESTORATION,
            message=f"Restoring {context.label}",
            context=context,
        )
        try:
            restored = self.protector.restore(context.protected_content, translated)
            restored = run.post_processor.process(restored, context.target_language)
        except RestorationIntegrityError as e:
            logger.error(
                f"[Orchestrator] Placeholder integrity check failed for {context.label}: {e}"
            )
            return self._failed(run, context, e, started, retries, logged=True)
        except Exception as e:
            error = TranslationSystemError(
                f"Restoration failed: {e}",
                code=ErrorCode.RESTORATION_FAILED,
                file=str(context.source_file),
            )
            return self._failed(run, context, error, started, retries, cause=e)

        result = FileTranslationResult(
            context=context,
            success=True,
            translated_content=restored,
            duration=time.monotonic() - started,
            retries=retries,
            cached=cached,
        )

        run.tracker.emit(
            TranslationPhase.WRITING,
            message=f"Writing {context.target_file}",
            context=context,
        )
        try:
            policy = run.job.file_processing
            if not await self.file_access.should_overwrite(context.target_file, policy):
                logger.warning(
                    f"[Orchestrator] Target exists, not overwriting: {context.target_file}"
                )
                return result
            await self.file_access.ensure_target_directory(context.target_file.parent)
            await self.file_access.write_translated_file(result)
        except Exception as e:
            error = e if isinstance(e, WriteError) else WriteError(
                f"Failed to write translation: {e}", file=str(context.target_file)
            )
            return self._failed(run, context, error, started, retries, cause=e)

        return result.model_copy(
            update={"written": True, "duration": time.monotonic() - started}
        )

    def _failed(
        self,
        run: _BatchRun,
        context: FileTranslationContext,
        error: TranslationSystemError,
        started: float,
        retries: int,
        cause: Optional[Exception] = None,
        logged: bool = False,
    ) -> FileTranslationResult:
        """Convert an item failure into a failed result, honouring fail-fast."""
        if cause is not None and cause is not error:
            error.__cause__ = cause
        if not logged:
            logger.warning(f"[Orchestrator] {context.label} failed: {error}")

        if not run.job.strategy_config.continue_on_error and run.first_failure is None:
            run.first_failure = error
            run.stop.set()

        return FileTranslationResult.failure(
            context,
            error=str(error),
            duration=time.monotonic() - started,
            retries=retries,
        )

    @staticmethod
    def _build_stats(
        source_files: Sequence[Path],
        languages: Sequence[str],
        results: List[FileTranslationResult],
        total_duration: float,
    ) -> TranslationStats:
        """Aggregate statistics; a file succeeds only if every language did."""
        by_file: Dict[Path, List[FileTranslationResult]] = {}
        for result in results:
            by_file.setdefault(result.context.source_file, []).append(result)

        successful_files = sum(
            1
            for path in source_files
            if len(by_file.get(path, [])) == len(languages)
            and all(r.success for r in by_file[path])
        )

        return TranslationStats(
            total_files=len(source_files),
            successful_files=successful_files,
            failed_files=len(source_files) - successful_files,
            total_languages=len(languages),
            total_translations=len(results),
            average_time_per_file=total_duration / len(source_files) if source_files else 0.0,
            total_characters=sum(
                len(r.translated_content) for r in results if r.success and r.translated_content
            ),
        )

    async def _close_translator(self) -> None:
        try:
            await self.translator.close()
        except Exception as e:
            error = ResourceCloseError(f"Failed to close translator: {e}")
            logger.error(f"[Orchestrator] {error}")
