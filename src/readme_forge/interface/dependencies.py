"""FastAPI dependency injection wiring."""

from __future__ import annotations

from functools import lru_cache

import httpx

from readme_forge.infrastructure.config import Settings, get_settings
from readme_forge.infrastructure.github_rest_adapter import GitHubRestAdapter
from readme_forge.infrastructure.openai_adapter import OpenAIAdapter
from readme_forge.infrastructure.request_gate import RequestGate
from readme_forge.services.analysis_cache import AnalysisCache
from readme_forge.services.analysis_scheduler import AnalysisScheduler
from readme_forge.services.file_analyzer import FileAnalyzer
from readme_forge.services.generate_readme import GenerateReadmeUseCase
from readme_forge.services.readme_generator import ReadmeGenerator
from readme_forge.services.summarizer import RepositorySummarizer

_http_client: httpx.AsyncClient | None = None
_openai_adapter: OpenAIAdapter | None = None
_request_gate: RequestGate | None = None
_analysis_cache: AnalysisCache | None = None


async def startup() -> None:
    """Initialise shared resources — called from the lifespan context manager."""
    global _http_client, _openai_adapter, _request_gate, _analysis_cache  # noqa: PLW0603

    settings = get_settings()
    _http_client = httpx.AsyncClient(timeout=httpx.Timeout(settings.http_timeout_seconds))
    _openai_adapter = OpenAIAdapter(
        api_key=settings.openai_api_key.get_secret_value(),
        model=settings.openai_model,
        base_url=settings.openai_base_url,
    )
    # Shared by every request.
    _request_gate = RequestGate(min_interval=settings.request_interval_seconds)
    _analysis_cache = AnalysisCache()


async def shutdown() -> None:
    """Release shared resources."""
    global _http_client, _openai_adapter, _request_gate, _analysis_cache  # noqa: PLW0603

    if _http_client:
        await _http_client.aclose()
        _http_client = None
    if _openai_adapter:
        await _openai_adapter.close()
        _openai_adapter = None
    _request_gate = None
    _analysis_cache = None


def get_analysis_cache() -> AnalysisCache | None:
    """Return the process-wide analysis cache (``None`` before startup)."""
    return _analysis_cache


@lru_cache(maxsize=1)
def _settings() -> Settings:
    return get_settings()


def get_use_case() -> GenerateReadmeUseCase:
    """Build the use case with injected adapters."""
    settings = _settings()

    assert _http_client is not None, "startup() was not called"
    assert _openai_adapter is not None, "startup() was not called"

    token = settings.github_token.get_secret_value() if settings.github_token else None
    github_adapter = GitHubRestAdapter(
        client=_http_client,
        gate=_request_gate,
        token=token,
        base_url=settings.github_api_url,
    )

    analyzer = FileAnalyzer(
        _openai_adapter,
        cache=_analysis_cache,
        content_cap=settings.analysis_content_cap,
    )
    return GenerateReadmeUseCase(
        repo_fetcher=github_adapter,
        scheduler=AnalysisScheduler(analyzer, batch_delay=settings.batch_delay_seconds),
        summarizer=RepositorySummarizer(
            _openai_adapter, max_digest_tokens=settings.max_digest_tokens
        ),
        generator=ReadmeGenerator(_openai_adapter),
        max_files_to_fetch=settings.max_files_to_fetch,
    )
