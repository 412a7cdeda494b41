"""Shared fakes for the pipeline tests."""

from __future__ import annotations

import asyncio
import base64

import pytest

from loc_viewer.domain.entities import (
    BlobPayload,
    EntryKind,
    LineCounts,
    RepoMetadata,
    TreeEntry,
    TreeListing,
)
from loc_viewer.domain.exceptions import FetchError, RepositoryNotFoundError
from loc_viewer.domain.value_objects import RepositoryRef


def blob(path: str, sha: str | None = None) -> TreeEntry:
    return TreeEntry(path=path, kind=EntryKind.BLOB, sha=sha or f"sha-{path}")


def tree(path: str, sha: str | None = None) -> TreeEntry:
    return TreeEntry(path=path, kind=EntryKind.TREE, sha=sha or f"tree-{path}")


class FakeRepoFetcher:
    """In-memory RepoFetcher.

    ``trees`` maps ``(tree_ish, recursive)`` to a listing; ``files`` maps a
    path to its content.  Paths in ``failing`` raise :class:`FetchError`.
    """

    def __init__(
        self,
        files: dict[str, str] | None = None,
        trees: dict[tuple[str, bool], TreeListing] | None = None,
        default_branch: str | None = "main",
        failing: set[str] | None = None,
        delay: float = 0.0,
    ) -> None:
        self.files = files or {}
        self.trees = trees or {}
        self.default_branch = default_branch
        self.failing = failing or set()
        self.delay = delay
        self.tree_calls: list[tuple[str, bool]] = []
        self.content_calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch_metadata(self, repo: RepositoryRef) -> RepoMetadata:
        if self.default_branch is None:
            raise RepositoryNotFoundError("no metadata")
        return RepoMetadata(owner=repo.owner, name=repo.name, default_branch=self.default_branch)

    async def fetch_tree(
        self, repo: RepositoryRef, tree_ish: str, *, recursive: bool = True
    ) -> TreeListing:
        self.tree_calls.append((tree_ish, recursive))
        if (tree_ish, recursive) in self.trees:
            return self.trees[(tree_ish, recursive)]
        if recursive:
            return TreeListing(entries=tuple(blob(p) for p in self.files))
        raise RepositoryNotFoundError(f"no tree {tree_ish}")

    async def _content(self, path: str) -> str:
        self.content_calls.append(path)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if path in self.failing:
                raise FetchError(path, "boom")
            return self.files[path]
        finally:
            self.in_flight -= 1

    async def fetch_raw_content(self, repo: RepositoryRef, ref: str, path: str) -> bytes:
        return (await self._content(path)).encode("utf-8")

    async def fetch_blob(self, repo: RepositoryRef, sha: str, path: str = "") -> BlobPayload:
        text = await self._content(path)
        encoded = base64.encodebytes(text.encode("utf-8")).decode("ascii")
        return BlobPayload(sha=sha, content=encoded)


class StubClassifier:
    """Tracks files by extension; every non-empty line counts as code."""

    def __init__(self, extensions: tuple[str, ...] = ("rs", "py")) -> None:
        self.extensions = extensions
        self.analyzed: list[str] = []

    def classify_path(self, path: str) -> str | None:
        ext = path.rsplit(".", 1)[-1] if "." in path else ""
        return ext if ext in self.extensions else None

    def analyze(self, language: str, content: str) -> LineCounts:
        self.analyzed.append(content)
        lines = content.splitlines()
        blanks = sum(1 for line in lines if not line.strip())
        comments = sum(1 for line in lines if line.strip().startswith("//"))
        return LineCounts(code=len(lines) - blanks - comments, comments=comments, blanks=blanks)


@pytest.fixture
def repo() -> RepositoryRef:
    return RepositoryRef.new("hayas1", "loc-viewer")
