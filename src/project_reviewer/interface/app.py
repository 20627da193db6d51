"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from project_reviewer.infrastructure.config import get_settings
from project_reviewer.interface.dependencies import build_gateway
from project_reviewer.interface.error_handlers import register_error_handlers
from project_reviewer.interface.routes import router

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    app.state.gateway = build_gateway(settings)
    logger.info("Oracle model: %s", settings.openai_model)
    try:
        yield
    finally:
        await app.state.gateway.close()
        app.state.gateway = None


def create_app() -> FastAPI:
    app = FastAPI(
        title="Project Reviewer",
        version=VERSION,
        description=(
            "Classifies a local codebase, lets an LLM explore and review its key "
            "files, and returns one structured review report."
        ),
        lifespan=_lifespan,
    )
    register_error_handlers(app)
    app.include_router(router)
    return app
