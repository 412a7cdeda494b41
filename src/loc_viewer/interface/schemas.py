"""Pydantic request / response DTOs for the API boundary."""

from __future__ import annotations

from pydantic import BaseModel, field_validator

from loc_viewer.domain.entities import (
    LanguageAggregate,
    SortKey,
    StatisticsOptions,
    StatisticsResult,
)


class StatisticsRequest(BaseModel):
    """Request body for ``POST /statistics``."""

    repository_url: str
    sha: str | None = None
    paths: list[str] = []
    excluded: list[str] = []
    order_by: SortKey | None = None

    @field_validator("repository_url")
    @classmethod
    def _must_not_be_empty(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            msg = "repository_url must not be empty."
            raise ValueError(msg)
        return stripped

    def to_options(self) -> StatisticsOptions:
        return StatisticsOptions(
            ref=self.sha or None,
            include=tuple(self.paths),
            exclude=tuple(self.excluded),
        )


class RepositorySchema(BaseModel):
    host: str
    owner: str
    name: str
    url: str


class FileReportSchema(BaseModel):
    path: str
    code: int
    comments: int
    blanks: int
    lines: int


class LineTotalsSchema(BaseModel):
    files: int
    lines: int
    code: int
    comments: int
    blanks: int


class LanguageSchema(LineTotalsSchema):
    language: str
    reports: list[FileReportSchema]

    @classmethod
    def from_aggregate(cls, aggregate: LanguageAggregate) -> LanguageSchema:
        return cls(
            language=aggregate.language,
            files=aggregate.file_count,
            lines=aggregate.lines,
            code=aggregate.code,
            comments=aggregate.comments,
            blanks=aggregate.blanks,
            reports=[
                FileReportSchema(
                    path=r.path,
                    code=r.code,
                    comments=r.comments,
                    blanks=r.blanks,
                    lines=r.lines,
                )
                for r in aggregate.files
            ],
        )


class StatisticsResponse(BaseModel):
    """Successful response from the statistics endpoints."""

    repository: RepositorySchema
    ref: str
    languages: list[LanguageSchema]
    total: LineTotalsSchema
    skipped: list[str]

    @classmethod
    def from_result(
        cls, result: StatisticsResult, order_by: SortKey | None = None
    ) -> StatisticsResponse:
        if order_by is None:
            aggregates = list(result.languages.values())
        else:
            aggregates = result.ranked(order_by)
        total = result.total
        repo = result.repository
        return cls(
            repository=RepositorySchema(
                host=repo.host, owner=repo.owner, name=repo.name, url=repo.to_url()
            ),
            ref=result.ref,
            languages=[LanguageSchema.from_aggregate(a) for a in aggregates],
            total=LineTotalsSchema(
                files=result.total_files,
                lines=total.lines,
                code=total.code,
                comments=total.comments,
                blanks=total.blanks,
            ),
            skipped=list(result.skipped),
        )


class ErrorResponse(BaseModel):
    """Standard error envelope returned on all failure paths."""

    status: str = "error"
    message: str
