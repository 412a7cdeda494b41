"""Tree walking — resolve a ref and list every blob of the repository.

The trees API answers a recursive listing with ``truncated: true`` once a
repository exceeds its size limit; the entries are then an incomplete
prefix.  Under the ``backfill`` policy the walker rebuilds the full listing
from smaller requests: the root is listed non-recursively and each
directory is listed recursively by its sha, descending again into any
directory whose own listing is truncated.  Under the ``error`` policy a
truncated listing raises :class:`TreeTruncatedError`.
"""

from __future__ import annotations

import logging

from loc_viewer.domain.entities import EntryKind, TreeEntry, TreeListing, TruncationPolicy
from loc_viewer.domain.exceptions import RemoteApiError, TreeTruncatedError
from loc_viewer.domain.ports.repo_fetcher import RepoFetcher
from loc_viewer.domain.value_objects import RepositoryRef

logger = logging.getLogger(__name__)

FALLBACK_REF = "master"


class TreeWalker:
    """Produces the complete, flat list of entries of a repository tree."""

    def __init__(
        self,
        repo_fetcher: RepoFetcher,
        truncation_policy: TruncationPolicy = TruncationPolicy.BACKFILL,
    ) -> None:
        self._fetcher = repo_fetcher
        self._policy = TruncationPolicy(truncation_policy)

    async def resolve_default_ref(self, repo: RepositoryRef) -> str:
        """Return the default branch, or ``master`` when metadata is unavailable."""
        try:
            metadata = await self._fetcher.fetch_metadata(repo)
        except RemoteApiError as exc:
            logger.warning(
                "Metadata unavailable for %s (%s); falling back to %r",
                repo.full_name,
                exc,
                FALLBACK_REF,
            )
            return FALLBACK_REF

        if not metadata.default_branch:
            logger.warning(
                "%s reports no default branch; falling back to %r", repo.full_name, FALLBACK_REF
            )
            return FALLBACK_REF
        return metadata.default_branch

    async def list_tree(
        self, repo: RepositoryRef, ref: str, recursive: bool = True
    ) -> TreeListing:
        """List the tree at *ref*, applying the truncation policy."""
        listing = await self._fetcher.fetch_tree(repo, ref, recursive=recursive)
        if not listing.truncated:
            return listing

        if self._policy is TruncationPolicy.ERROR or not recursive:
            raise TreeTruncatedError(
                f"Tree listing of {repo.full_name}@{ref} is truncated "
                f"({len(listing.entries)} entries received)."
            )

        logger.info("Backfilling truncated tree of %s@%s", repo.full_name, ref)
        entries = await self._backfill(repo, ref, prefix="")
        logger.info(
            "Backfilled %s@%s: %d entries (initial response had %d)",
            repo.full_name,
            ref,
            len(entries),
            len(listing.entries),
        )
        return TreeListing(entries=tuple(entries), truncated=False)

    async def list_blobs(self, repo: RepositoryRef, ref: str) -> list[TreeEntry]:
        """Return only the content-bearing (blob) entries at *ref*."""
        listing = await self.list_tree(repo, ref)
        return listing.blobs()

    async def _backfill(
        self, repo: RepositoryRef, tree_ish: str, prefix: str
    ) -> list[TreeEntry]:
        shallow = await self._fetcher.fetch_tree(repo, tree_ish, recursive=False)
        if shallow.truncated:
            where = prefix or "/"
            raise TreeTruncatedError(
                f"Directory {where!r} of {repo.full_name} has too many entries to list."
            )

        entries: list[TreeEntry] = []
        for child in shallow.entries:
            child = child.with_prefix(prefix)
            entries.append(child)
            if child.kind is not EntryKind.TREE:
                continue

            subtree = await self._fetcher.fetch_tree(repo, child.sha, recursive=True)
            if subtree.truncated:
                entries.extend(await self._backfill(repo, child.sha, child.path))
            else:
                entries.extend(e.with_prefix(child.path) for e in subtree.entries)
        return entries
