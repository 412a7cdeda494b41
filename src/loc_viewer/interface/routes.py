"""API routes — thin controllers that delegate to the use case."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from loc_viewer.domain.entities import SortKey, StatisticsOptions
from loc_viewer.domain.exceptions import InvalidRepositoryUrlError, InvalidRepositoryUrlReason
from loc_viewer.domain.value_objects import RepositoryRef
from loc_viewer.infrastructure.config import Settings
from loc_viewer.interface.dependencies import get_app_settings, get_use_case
from loc_viewer.interface.schemas import ErrorResponse, StatisticsRequest, StatisticsResponse
from loc_viewer.services.get_statistics import GetStatisticsUseCase

router = APIRouter()

_RESPONSES: dict[int | str, dict[str, Any]] = {
    422: {"model": ErrorResponse, "description": "Invalid repository URL or options"},
    403: {"model": ErrorResponse, "description": "Repository is private"},
    404: {"model": ErrorResponse, "description": "Repository or ref not found"},
    429: {"model": ErrorResponse, "description": "GitHub API rate limit exceeded"},
    502: {"model": ErrorResponse, "description": "Hosting API failure, truncated tree or unreadable file"},
    504: {"model": ErrorResponse, "description": "Statistics run timed out"},
}


@router.get(
    "/statistics/{host}/{owner}/{repo}",
    response_model=StatisticsResponse,
    responses=_RESPONSES,
)
async def statistics_for(
    host: str,
    owner: str,
    repo: str,
    sha: str | None = None,
    paths: list[str] = Query(default=[]),
    excluded: list[str] = Query(default=[]),
    order_by: SortKey | None = None,
    use_case: GetStatisticsUseCase = Depends(get_use_case),
    settings: Settings = Depends(get_app_settings),
) -> StatisticsResponse:
    """Line statistics of ``https://{host}/{owner}/{repo}``."""
    if host.lower() != settings.github_host.lower():
        raise InvalidRepositoryUrlError(
            InvalidRepositoryUrlReason.CANNOT_BE_BASE, f"https://{host}/{owner}/{repo}"
        )
    repository = RepositoryRef.new(owner, repo, host=settings.github_host)
    options = StatisticsOptions(ref=sha or None, include=tuple(paths), exclude=tuple(excluded))
    result = await use_case.execute(repository, options)
    return StatisticsResponse.from_result(result, order_by)


@router.post(
    "/statistics",
    response_model=StatisticsResponse,
    responses=_RESPONSES,
)
async def statistics(
    body: StatisticsRequest,
    use_case: GetStatisticsUseCase = Depends(get_use_case),
    settings: Settings = Depends(get_app_settings),
) -> StatisticsResponse:
    """Line statistics of the repository at ``repository_url``."""
    repository = RepositoryRef.parse(body.repository_url, host=settings.github_host)
    result = await use_case.execute(repository, body.to_options())
    return StatisticsResponse.from_result(result, body.order_by)
