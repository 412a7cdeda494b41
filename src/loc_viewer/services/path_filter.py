"""Path filtering — decide which tree entries are fetched."""

from __future__ import annotations

from fnmatch import fnmatchcase
from typing import Iterable, Sequence

from loc_viewer.domain.entities import EntryKind, TreeEntry


def matches(path: str, pattern: str) -> bool:
    """Return *True* if *pattern* selects *path*.

    A pattern selects a path when it is the path itself, one of its parent
    directories (``src`` selects ``src/main.rs``), or a glob matching it.
    """
    pattern = pattern.strip().strip("/")
    if not pattern:
        return False
    if path == pattern or path.startswith(pattern + "/"):
        return True
    return fnmatchcase(path, pattern)


def should_skip(
    entry: TreeEntry,
    include: Sequence[str] = (),
    exclude: Sequence[str] = (),
) -> bool:
    """Return *True* if the entry should not be fetched."""
    if entry.kind is not EntryKind.BLOB:
        return True
    if include and not any(matches(entry.path, p) for p in include):
        return True
    if any(matches(entry.path, p) for p in exclude):
        return True
    return False


def select_blobs(
    entries: Iterable[TreeEntry],
    include: Sequence[str] = (),
    exclude: Sequence[str] = (),
) -> list[TreeEntry]:
    """Filter a tree listing down to the blobs selected by the path filters."""
    return [e for e in entries if not should_skip(e, include, exclude)]
