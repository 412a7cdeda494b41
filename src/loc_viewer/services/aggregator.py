"""Statistics aggregation — fold per-file reports into per-language totals.

The fold is order independent: totals depend only on the multiset of
reports, and only the order of each ``files`` tuple follows arrival order.
:func:`merge` and :func:`merge_languages` combine partial results computed
independently (e.g. by separate workers) and are associative and
commutative on the counts.
"""

from __future__ import annotations

from typing import AsyncIterable, Iterable, Mapping

from loc_viewer.domain.entities import (
    FileReport,
    LanguageAggregate,
    LanguageId,
    StatisticsResult,
)
from loc_viewer.domain.value_objects import RepositoryRef


class StatisticsAggregator:
    """Single-owner accumulator fed one report at a time."""

    def __init__(self, repository: RepositoryRef, ref: str = "") -> None:
        self._repository = repository
        self._ref = ref
        self._reports: dict[LanguageId, list[FileReport]] = {}

    def add(self, report: FileReport) -> None:
        self._reports.setdefault(report.language, []).append(report)

    def extend(self, reports: Iterable[FileReport]) -> None:
        for report in reports:
            self.add(report)

    def languages(self) -> dict[LanguageId, LanguageAggregate]:
        return {
            language: LanguageAggregate.of(language, reports)
            for language, reports in self._reports.items()
        }

    def finish(self, skipped: Iterable[str] = ()) -> StatisticsResult:
        """Freeze the accumulated reports into a result."""
        return StatisticsResult(
            repository=self._repository,
            ref=self._ref,
            languages=self.languages(),
            skipped=tuple(sorted(skipped)),
        )


def fold(
    repository: RepositoryRef, reports: Iterable[FileReport], ref: str = ""
) -> StatisticsResult:
    """Fold a finite stream of reports into a result."""
    aggregator = StatisticsAggregator(repository, ref)
    aggregator.extend(reports)
    return aggregator.finish()


async def afold(
    repository: RepositoryRef, reports: AsyncIterable[FileReport], ref: str = ""
) -> StatisticsResult:
    """Asynchronous variant of :func:`fold`, consuming reports as they arrive."""
    aggregator = StatisticsAggregator(repository, ref)
    async for report in reports:
        aggregator.add(report)
    return aggregator.finish()


def merge(a: LanguageAggregate, b: LanguageAggregate) -> LanguageAggregate:
    """Field-wise sum of two aggregates of the same language."""
    if a.language != b.language:
        raise ValueError(f"Cannot merge {a.language!r} with {b.language!r}")
    return LanguageAggregate(
        language=a.language,
        files=a.files + b.files,
        code=a.code + b.code,
        comments=a.comments + b.comments,
        blanks=a.blanks + b.blanks,
    )


def merge_languages(
    left: Mapping[LanguageId, LanguageAggregate],
    right: Mapping[LanguageId, LanguageAggregate],
) -> dict[LanguageId, LanguageAggregate]:
    """Merge two partial language mappings key by key."""
    merged = dict(left)
    for language, aggregate in right.items():
        if language in merged:
            merged[language] = merge(merged[language], aggregate)
        else:
            merged[language] = aggregate
    return merged
