"""Concurrent content fetch — blobs in, decoded files out, bounded in-flight requests."""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Sequence

from loc_viewer.domain.entities import ContentStrategy, FetchedFile, FetchResult, TreeEntry
from loc_viewer.domain.exceptions import (
    ConfigurationError,
    FetchError,
    FileContentError,
    LocViewerError,
    UnreachableError,
)
from loc_viewer.domain.ports.repo_fetcher import RepoFetcher
from loc_viewer.domain.value_objects import RepositoryRef
from loc_viewer.services.blob_decoder import decode_blob, decode_text

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 32


class ContentFetcher:
    """Fetches file contents with a fixed pool of worker tasks.

    Parameters
    ----------
    repo_fetcher:
        Adapter that talks to the hosting API.
    max_concurrency:
        Maximum number of simultaneous content requests.
    strategy:
        ``raw`` reads the raw content host by ref and path; ``blob`` reads
        the git blobs API by sha and decodes the base64 payload.
    """

    def __init__(
        self,
        repo_fetcher: RepoFetcher,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        strategy: ContentStrategy = ContentStrategy.RAW,
    ) -> None:
        if max_concurrency < 1:
            raise ConfigurationError(f"max_concurrency must be at least 1, got {max_concurrency}")
        self._fetcher = repo_fetcher
        self._max_concurrency = max_concurrency
        self._strategy = ContentStrategy(strategy)

    @property
    def max_concurrency(self) -> int:
        return self._max_concurrency

    async def fetch_one(self, repo: RepositoryRef, ref: str, entry: TreeEntry) -> FetchedFile:
        """Fetch and decode a single blob."""
        try:
            if self._strategy is ContentStrategy.RAW:
                data = await self._fetcher.fetch_raw_content(repo, ref, entry.path)
                content = decode_text(data)
            else:
                payload = await self._fetcher.fetch_blob(repo, entry.sha, entry.path)
                content = decode_blob(payload, entry.path)
        except FileContentError:
            raise
        except LocViewerError as exc:
            raise FetchError(entry.path, str(exc)) from exc
        return FetchedFile(path=entry.path, content=content)

    async def fetch_all(
        self, repo: RepositoryRef, ref: str, entries: Sequence[TreeEntry]
    ) -> AsyncIterator[FetchResult]:
        """Yield one :class:`FetchResult` per entry, in completion order.

        Closing the iterator early cancels every outstanding request.
        """
        if not entries:
            return

        pending: asyncio.Queue[TreeEntry] = asyncio.Queue()
        for entry in entries:
            pending.put_nowait(entry)
        results: asyncio.Queue[FetchResult] = asyncio.Queue()

        worker_count = min(self._max_concurrency, len(entries))
        logger.debug(
            "Fetching %d files from %s with %d workers", len(entries), repo.full_name, worker_count
        )
        workers = [
            asyncio.create_task(self._worker(repo, ref, pending, results))
            for _ in range(worker_count)
        ]
        try:
            for _ in range(len(entries)):
                yield await results.get()
        finally:
            for worker in workers:
                worker.cancel()
            await asyncio.gather(*workers, return_exceptions=True)

    async def _worker(
        self,
        repo: RepositoryRef,
        ref: str,
        pending: asyncio.Queue[TreeEntry],
        results: asyncio.Queue[FetchResult],
    ) -> None:
        while True:
            try:
                entry = pending.get_nowait()
            except asyncio.QueueEmpty:
                return

            try:
                fetched = await self.fetch_one(repo, ref, entry)
            except FileContentError as exc:
                result = FetchResult(path=entry.path, error=exc)
            except Exception as exc:
                logger.exception("Unexpected failure fetching %s", entry.path)
                error = UnreachableError(f"unexpected failure fetching {entry.path}: {exc!r}")
                error.__cause__ = exc
                result = FetchResult(path=entry.path, error=error)
            else:
                result = FetchResult(path=entry.path, file=fetched)
            results.put_nowait(result)
