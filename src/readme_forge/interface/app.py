"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import Depends, FastAPI

from readme_forge.interface.dependencies import get_analysis_cache, shutdown, startup
from readme_forge.interface.error_handlers import register_error_handlers
from readme_forge.interface.routes import router
from readme_forge.services.analysis_cache import AnalysisCache

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    await startup()
    logger.info("readme-forge ready")
    try:
        yield
    finally:
        await shutdown()


def create_app() -> FastAPI:
    """Build and wire the FastAPI application.

    Routes: ``POST /readme`` (full pipeline), ``POST /analyze`` (summary
    only) and ``GET /health``.
    """
    app = FastAPI(
        title="README Forge",
        version="1.0.0",
        description=(
            "Point it at a public GitHub repository and get back an editable "
            "README draft plus the structured analysis it was written from."
        ),
        lifespan=_lifespan,
    )

    register_error_handlers(app)
    app.include_router(router)

    @app.get("/health", include_in_schema=False)
    async def health(cache: AnalysisCache | None = Depends(get_analysis_cache)) -> dict[str, object]:
        if cache is None:
            return {"status": "ok"}
        return {
            "status": "ok",
            "cached_analyses": len(cache),
            "cache_hits": cache.hits,
            "cache_misses": cache.misses,
        }

    return app
