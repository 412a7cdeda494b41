"""Get-statistics use case — the main orchestration pipeline.

This is the single entry point for the business logic.  It depends only on
the two ports (:class:`RepoFetcher` and :class:`LanguageClassifier`) and the
pure service modules.  The interface layer injects concrete adapters at
runtime.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import aclosing

from loc_viewer.domain.entities import (
    ContentStrategy,
    FailurePolicy,
    FileReport,
    LanguageId,
    StatisticsOptions,
    StatisticsResult,
    TreeEntry,
    TruncationPolicy,
)
from loc_viewer.domain.exceptions import (
    ConfigurationError,
    PipelineTimeoutError,
    UnreachableError,
)
from loc_viewer.domain.ports.language_classifier import LanguageClassifier
from loc_viewer.domain.ports.repo_fetcher import RepoFetcher
from loc_viewer.domain.value_objects import RepositoryRef
from loc_viewer.services.aggregator import StatisticsAggregator
from loc_viewer.services.content_fetcher import DEFAULT_MAX_CONCURRENCY, ContentFetcher
from loc_viewer.services.path_filter import select_blobs
from loc_viewer.services.tree_walker import TreeWalker

logger = logging.getLogger(__name__)


class GetStatisticsUseCase:
    """Orchestrates the full repository → line statistics pipeline.

    Parameters
    ----------
    repo_fetcher:
        Adapter that can list trees and fetch file content.
    classifier:
        Maps paths to languages and counts lines.
    max_concurrency:
        Maximum number of simultaneous content requests.
    content_strategy:
        Raw content host or git blobs API.
    failure_policy:
        ``fail_fast`` aborts on the first file error; ``skip`` drops the
        file and records it in :attr:`StatisticsResult.skipped`.
    truncation_policy:
        ``backfill`` completes truncated tree listings; ``error`` rejects them.
    timeout_seconds:
        Upper bound for a whole run, ``None`` for no limit.
    """

    def __init__(
        self,
        repo_fetcher: RepoFetcher,
        classifier: LanguageClassifier,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        content_strategy: ContentStrategy = ContentStrategy.RAW,
        failure_policy: FailurePolicy = FailurePolicy.FAIL_FAST,
        truncation_policy: TruncationPolicy = TruncationPolicy.BACKFILL,
        timeout_seconds: float | None = None,
    ) -> None:
        if timeout_seconds is not None and timeout_seconds <= 0:
            raise ConfigurationError(f"timeout_seconds must be positive, got {timeout_seconds}")
        self._classifier = classifier
        self._walker = TreeWalker(repo_fetcher, truncation_policy)
        self._contents = ContentFetcher(repo_fetcher, max_concurrency, content_strategy)
        self._failure_policy = FailurePolicy(failure_policy)
        self._timeout = timeout_seconds

    # ── Public entry point ──────────────────────────────────────────────

    async def execute(
        self, repository: RepositoryRef, options: StatisticsOptions | None = None
    ) -> StatisticsResult:
        """Run the full pipeline and return complete statistics or raise."""
        options = options or StatisticsOptions()
        if self._timeout is None:
            return await self._run(repository, options)

        try:
            return await asyncio.wait_for(self._run(repository, options), self._timeout)
        except asyncio.TimeoutError as exc:
            raise PipelineTimeoutError(
                f"Statistics for {repository.full_name} took longer than {self._timeout:g}s."
            ) from exc

    # ── Pipeline ────────────────────────────────────────────────────────

    async def _run(self, repository: RepositoryRef, options: StatisticsOptions) -> StatisticsResult:
        logger.info("Collecting statistics for %s", repository.full_name)

        # 1. Resolve the ref, then list the tree
        ref = options.ref or await self._walker.resolve_default_ref(repository)
        listing = await self._walker.list_tree(repository, ref)

        # 2. Blobs only, path filters, then languages; unknown files are never fetched
        blobs = select_blobs(listing.entries, options.include, options.exclude)
        tracked, languages = self._classify(blobs)
        logger.info(
            "%s@%s: %d entries, %d blobs selected, %d in tracked languages",
            repository.full_name,
            ref,
            len(listing.entries),
            len(blobs),
            len(tracked),
        )

        # 3. Fetch concurrently, folding each file as it arrives
        aggregator = StatisticsAggregator(repository, ref)
        skipped: list[str] = []
        async with aclosing(self._contents.fetch_all(repository, ref, tracked)) as results:
            async for result in results:
                if result.error is not None:
                    if (
                        isinstance(result.error, UnreachableError)
                        or self._failure_policy is FailurePolicy.FAIL_FAST
                    ):
                        raise result.error
                    logger.warning("Skipping %s: %s", result.path, result.error)
                    skipped.append(result.path)
                    continue

                if result.file is None:
                    raise UnreachableError(f"fetch result for {result.path} has neither file nor error")
                language = languages[result.path]
                counts = self._classifier.analyze(language, result.file.content)
                aggregator.add(
                    FileReport(
                        path=result.path,
                        language=language,
                        code=counts.code,
                        comments=counts.comments,
                        blanks=counts.blanks,
                    )
                )

        statistics = aggregator.finish(skipped)
        logger.info(
            "%s@%s: %d files in %d languages (%d skipped)",
            repository.full_name,
            ref,
            statistics.total_files,
            len(statistics.languages),
            len(skipped),
        )
        return statistics

    def _classify(
        self, blobs: list[TreeEntry]
    ) -> tuple[list[TreeEntry], dict[str, LanguageId]]:
        tracked: list[TreeEntry] = []
        languages: dict[str, LanguageId] = {}
        for entry in blobs:
            language = self._classifier.classify_path(entry.path)
            if language is None:
                continue
            tracked.append(entry)
            languages[entry.path] = language
        return tracked, languages
