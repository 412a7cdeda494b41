"""Domain entities — pure data structures with no external dependencies."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping

from loc_viewer.domain.value_objects import RepositoryRef

LanguageId = str


class EntryKind(str, Enum):
    """Type of a node returned by the git trees API."""

    TREE = "tree"
    BLOB = "blob"
    COMMIT = "commit"  # submodule


class ContentStrategy(str, Enum):
    """How file contents are retrieved."""

    RAW = "raw"  # raw content host, plain body per path
    BLOB = "blob"  # git blobs API, base64 JSON per sha


class FailurePolicy(str, Enum):
    """What a single file's fetch/decode failure does to the whole run."""

    FAIL_FAST = "fail_fast"
    SKIP = "skip"


class TruncationPolicy(str, Enum):
    """What to do when the trees API reports ``truncated: true``."""

    BACKFILL = "backfill"
    ERROR = "error"


class SortKey(str, Enum):
    """Column used to rank languages in a result."""

    FILES = "files"
    LINES = "lines"
    CODE = "code"
    COMMENTS = "comments"
    BLANKS = "blanks"


@dataclass(frozen=True, slots=True)
class RepoMetadata:
    """The subset of repository metadata the pipeline needs."""

    owner: str
    name: str
    default_branch: str | None = None


@dataclass(frozen=True, slots=True)
class TreeEntry:
    """A single node from the git trees API."""

    path: str
    kind: EntryKind
    sha: str
    size: int | None = None

    def with_prefix(self, prefix: str) -> TreeEntry:
        """Re-root an entry listed from a subtree under its parent *prefix*."""
        if not prefix:
            return self
        return replace(self, path=f"{prefix}/{self.path}")


@dataclass(frozen=True, slots=True)
class TreeListing:
    """One trees API response (or a backfilled, complete equivalent)."""

    entries: tuple[TreeEntry, ...] = ()
    truncated: bool = False

    def blobs(self) -> list[TreeEntry]:
        return [e for e in self.entries if e.kind is EntryKind.BLOB]


@dataclass(frozen=True, slots=True)
class BlobPayload:
    """Body of ``GET /repos/{owner}/{repo}/git/blobs/{sha}``."""

    sha: str
    content: str
    encoding: str = "base64"
    size: int | None = None


@dataclass(frozen=True, slots=True)
class FetchedFile:
    """A fetched file with its decoded text content."""

    path: str
    content: str


@dataclass(frozen=True, slots=True)
class FetchResult:
    """One item of the content fetch stream: a file or the error it raised."""

    path: str
    file: FetchedFile | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class LineCounts:
    """Per-file line classification returned by a language classifier."""

    code: int = 0
    comments: int = 0
    blanks: int = 0

    @property
    def lines(self) -> int:
        return self.code + self.comments + self.blanks

    def __add__(self, other: LineCounts) -> LineCounts:
        return LineCounts(
            code=self.code + other.code,
            comments=self.comments + other.comments,
            blanks=self.blanks + other.blanks,
        )


@dataclass(frozen=True, slots=True)
class FileReport:
    """Line statistics of one classified file."""

    path: str
    language: LanguageId
    code: int = 0
    comments: int = 0
    blanks: int = 0

    @property
    def lines(self) -> int:
        return self.code + self.comments + self.blanks


@dataclass(frozen=True, slots=True)
class LanguageAggregate:
    """Totals for one language plus the reports they were built from."""

    language: LanguageId
    files: tuple[FileReport, ...] = ()
    code: int = 0
    comments: int = 0
    blanks: int = 0

    @classmethod
    def of(cls, language: LanguageId, reports: Iterable[FileReport]) -> LanguageAggregate:
        files = tuple(reports)
        return cls(
            language=language,
            files=files,
            code=sum(r.code for r in files),
            comments=sum(r.comments for r in files),
            blanks=sum(r.blanks for r in files),
        )

    @property
    def lines(self) -> int:
        return self.code + self.comments + self.blanks

    @property
    def file_count(self) -> int:
        return len(self.files)

    @property
    def counts(self) -> LineCounts:
        return LineCounts(code=self.code, comments=self.comments, blanks=self.blanks)


_SORT_FIELDS = {
    SortKey.FILES: lambda agg: agg.file_count,
    SortKey.LINES: lambda agg: agg.lines,
    SortKey.CODE: lambda agg: agg.code,
    SortKey.COMMENTS: lambda agg: agg.comments,
    SortKey.BLANKS: lambda agg: agg.blanks,
}


@dataclass(frozen=True, slots=True)
class StatisticsResult:
    """The final, immutable output of one statistics request.

    ``languages`` is a read-only mapping whose keys are in language-id order.
    ``skipped`` lists paths dropped under the ``skip`` failure policy; it is
    always empty for fail-fast runs.

    Results hash by repository, ref and skipped paths only; the mapping
    proxy itself is unhashable.
    """

    repository: RepositoryRef
    ref: str = ""
    languages: Mapping[LanguageId, LanguageAggregate] = field(default_factory=dict, hash=False)
    skipped: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        ordered = {key: self.languages[key] for key in sorted(self.languages)}
        object.__setattr__(self, "languages", MappingProxyType(ordered))

    @property
    def total(self) -> LineCounts:
        counts = LineCounts()
        for aggregate in self.languages.values():
            counts = counts + aggregate.counts
        return counts

    @property
    def total_files(self) -> int:
        return sum(agg.file_count for agg in self.languages.values())

    def ranked(self, key: SortKey) -> list[LanguageAggregate]:
        """Aggregates ordered by *key*, largest first, ties by language id."""
        value = _SORT_FIELDS[SortKey(key)]
        return sorted(self.languages.values(), key=lambda agg: (-value(agg), agg.language))


@dataclass(frozen=True, slots=True)
class StatisticsOptions:
    """Per-request options: the ref to inspect and path filters."""

    ref: str | None = None
    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()
