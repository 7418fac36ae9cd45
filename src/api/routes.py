"""FastAPI routes for pet match queries and health check."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from src.api.error_handlers import INVALID_QUERY_CODE
from src.data.schemas import MatchQuery, MatchResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=400, content={"error": message, "code": INVALID_QUERY_CODE}
    )


@router.get(
    "/api/pets/matches",
    response_model=MatchResponse,
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
async def find_pet_matches(
    request: Request,
    pet_id: str | None = Query(default=None, alias="petId"),
    pet_type: str | None = Query(default=None, alias="petType"),
    threshold: int | None = Query(default=None),
    limit: int | None = Query(default=None, ge=0),
    skip_image_analysis: bool = Query(default=False, alias="skipImageAnalysis"),
) -> MatchResponse | JSONResponse:
    """Rank stored reports of the opposite status against one pet.

    Args:
        request: FastAPI request with app state.
        pet_id: Id of the subject pet.
        pet_type: Expected status of the subject pet, "lost" or "found".
        threshold: Minimum match score (defaults from config).
        limit: Maximum number of matches returned (defaults from config).
        skip_image_analysis: Score without consulting the vision service.

    Returns:
        MatchResponse as JSON, or a 400 error body.
    """
    if not pet_id:
        return _bad_request("Pet ID is required")
    if pet_type not in ("lost", "found"):
        return _bad_request("Valid pet type (lost or found) is required")

    config = request.app.state.config
    query = MatchQuery(
        pet_id=pet_id,
        pet_status=pet_type,
        threshold=config.default_threshold if threshold is None else threshold,
        limit=config.default_limit if limit is None else limit,
        skip_image_analysis=skip_image_analysis,
    )

    service = request.app.state.match_service
    return await service.find_matches(query)


@router.get("/health")
async def health_check(request: Request) -> dict:
    """Health check endpoint for monitoring.

    Returns:
        Dict with repository and vision backend status.
    """
    repository = request.app.state.repository
    repository_healthy = repository.ping()
    vision_enabled = request.app.state.visual_similarity is not None
    return {
        "status": "healthy" if repository_healthy else "degraded",
        "repository": "connected" if repository_healthy else "disconnected",
        "image_analysis": "enabled" if vision_enabled else "disabled",
    }
