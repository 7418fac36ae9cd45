"""FastAPI application factory with lifespan management."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.config import Config, get_config
from src.matching.finder import MatchFinder
from src.matching.scorer import MatchScorer
from src.matching.service import MatchService
from src.search.repository import (
    ElasticsearchPetRepository,
    InMemoryPetRepository,
    PetRepository,
)
from src.vision.factory import create_visual_similarity
from src.vision.similarity import VisualSimilarity

logger = logging.getLogger(__name__)


def create_repository(config: Config) -> PetRepository:
    """Build the pet repository selected by ``config.repository_backend``.

    Raises:
        ValueError: If the backend name is not recognized.
    """
    backend = config.repository_backend.lower()
    if backend == "memory":
        return InMemoryPetRepository()
    if backend == "elasticsearch":
        from src.search.es_client import create_es_client
        from src.search.indexer import create_index

        es = create_es_client(
            config.elasticsearch_url,
            config.elasticsearch_api_key,
            wait_timeout=config.elasticsearch_wait_seconds,
        )
        create_index(es, config.index_name)
        return ElasticsearchPetRepository(es, index_name=config.index_name)
    raise ValueError(f"Unknown repository backend '{config.repository_backend}'")


def create_match_service(
    config: Config,
    repository: PetRepository,
    visual: VisualSimilarity | None,
) -> MatchService:
    """Wire scorer, finder and service together from configuration."""
    finder = MatchFinder(
        MatchScorer(visual),
        prefilter_ratio=config.prefilter_ratio,
        max_detailed_candidates=config.max_detailed_candidates,
    )
    return MatchService(repository, finder, candidate_pool_size=config.candidate_pool_size)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialize shared resources on startup, clean up on shutdown.

    Components already placed on ``app.state`` (e.g. by the CLI) are
    reused instead of rebuilt.
    """
    config = getattr(app.state, "config", None) or get_config()
    app.state.config = config

    if getattr(app.state, "repository", None) is None:
        app.state.repository = create_repository(config)
    if not hasattr(app.state, "visual_similarity"):
        app.state.visual_similarity = create_visual_similarity(config)

    app.state.match_service = create_match_service(
        config, app.state.repository, app.state.visual_similarity
    )
    logger.info("Match service ready (%s repository)", config.repository_backend)

    yield

    es = getattr(app.state.repository, "es", None)
    if es is not None:
        es.close()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(
        title="Pet Match",
        description="Ranks lost and found pet reports against each other",
        version="0.1.0",
        lifespan=lifespan,
    )

    from src.api.error_handlers import register_exception_handlers
    from src.api.routes import router

    register_exception_handlers(app)
    app.include_router(router)

    return app
