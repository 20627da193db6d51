"""Builds the per-request collaborators from settings and app-scoped resources."""

from __future__ import annotations

from fastapi import Request

from project_reviewer.infrastructure.cloc_size_counter import ClocSizeCounter
from project_reviewer.infrastructure.config import Settings, get_settings
from project_reviewer.infrastructure.local_structure_provider import LocalStructureProvider
from project_reviewer.infrastructure.openai_adapter import OpenAIAdapter
from project_reviewer.infrastructure.run_cache import RunCache
from project_reviewer.services.review_project import ReviewProjectUseCase


def build_gateway(settings: Settings) -> OpenAIAdapter:
    return OpenAIAdapter(
        api_key=settings.openai_api_key.get_secret_value(),
        model=settings.openai_model,
        base_url=settings.openai_base_url,
        timeout=settings.openai_timeout_seconds,
        max_retries=settings.openai_max_retries,
    )


def build_use_case(settings: Settings, gateway: OpenAIAdapter) -> ReviewProjectUseCase:
    return ReviewProjectUseCase(
        structure_provider=LocalStructureProvider(),
        size_counter=ClocSizeCounter(executable=settings.cloc_executable),
        llm_gateway=gateway,
        max_files_to_review=settings.max_files_to_review,
        max_file_size_bytes=settings.max_file_size_bytes,
        max_file_tokens=settings.max_file_tokens,
        concurrency=settings.review_concurrency,
        run_timeout_seconds=settings.run_timeout_seconds,
    )


def get_use_case(request: Request) -> ReviewProjectUseCase:
    """Use case bound to the gateway opened in the app lifespan."""
    gateway = getattr(request.app.state, "gateway", None)
    if gateway is None:
        raise RuntimeError("LLM gateway is not initialised; is the lifespan running?")
    return build_use_case(get_settings(), gateway)


def get_recorder() -> RunCache | None:
    """A fresh run cache per request, or None when ``CACHE_DIR`` is blank."""
    cache_dir = get_settings().cache_dir
    return RunCache(cache_dir) if cache_dir else None
