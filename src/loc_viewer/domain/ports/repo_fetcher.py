"""Port: repository fetcher — defined by the domain, implemented by infrastructure."""

from __future__ import annotations

from typing import Protocol

from loc_viewer.domain.entities import BlobPayload, RepoMetadata, TreeListing
from loc_viewer.domain.value_objects import RepositoryRef


class RepoFetcher(Protocol):
    """Abstract contract for reading a hosted git repository."""

    async def fetch_metadata(self, repo: RepositoryRef) -> RepoMetadata:
        """Return repository metadata (default branch)."""
        ...

    async def fetch_tree(
        self, repo: RepositoryRef, tree_ish: str, *, recursive: bool = True
    ) -> TreeListing:
        """Return one trees API listing for a ref or tree sha."""
        ...

    async def fetch_raw_content(self, repo: RepositoryRef, ref: str, path: str) -> bytes:
        """Return the raw bytes of *path* at *ref*."""
        ...

    async def fetch_blob(self, repo: RepositoryRef, sha: str, path: str = "") -> BlobPayload:
        """Return the encoded blob payload for *sha*."""
        ...
