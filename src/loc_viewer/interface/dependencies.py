"""FastAPI dependency injection wiring."""

from __future__ import annotations

from functools import lru_cache

import httpx

from loc_viewer.infrastructure.config import Settings, get_settings
from loc_viewer.infrastructure.github_rest_adapter import GitHubRestAdapter
from loc_viewer.infrastructure.line_classifier import ExtensionLanguageClassifier
from loc_viewer.services.get_statistics import GetStatisticsUseCase

_http_client: httpx.AsyncClient | None = None


async def startup() -> None:
    """Initialise shared resources — called from the lifespan context manager."""
    global _http_client  # noqa: PLW0603

    settings = get_settings()
    _http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.request_timeout_seconds),
        limits=httpx.Limits(max_connections=settings.max_concurrency + 4),
        follow_redirects=True,
    )


async def shutdown() -> None:
    """Release shared resources."""
    global _http_client  # noqa: PLW0603

    if _http_client:
        await _http_client.aclose()
        _http_client = None


@lru_cache(maxsize=1)
def _settings() -> Settings:
    return get_settings()


@lru_cache(maxsize=1)
def _classifier() -> ExtensionLanguageClassifier:
    return ExtensionLanguageClassifier()


def get_app_settings() -> Settings:
    return _settings()


def get_use_case() -> GetStatisticsUseCase:
    """Build the use-case with injected adapters."""
    settings = _settings()

    assert _http_client is not None, "startup() was not called"

    token = settings.github_token.get_secret_value() if settings.github_token else None
    github_adapter = GitHubRestAdapter(
        client=_http_client,
        token=token,
        api_url=settings.github_api_url,
        raw_url=settings.github_raw_url,
    )

    return GetStatisticsUseCase(
        repo_fetcher=github_adapter,
        classifier=_classifier(),
        max_concurrency=settings.max_concurrency,
        content_strategy=settings.content_strategy,
        failure_policy=settings.failure_policy,
        truncation_policy=settings.truncation_policy,
        timeout_seconds=settings.pipeline_timeout_seconds,
    )
