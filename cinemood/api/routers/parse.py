"""
Parse API router.
Exposes the structured-query parser on its own.
"""
from fastapi import APIRouter, Depends

from cinemood.api.dependencies import get_recommendation_service
from cinemood.core.exceptions import AmbiguousInputError
from cinemood.models.schemas import ErrorResponse, ParseResponse, RecommendationRequest
from cinemood.services.recommendations import RecommendationService

router = APIRouter(prefix="/v1", tags=["parse"])


@router.post(
    "/parse",
    response_model=ParseResponse,
    summary="Parse Mood Description",
    responses={
        400: {"model": ErrorResponse, "description": "Input too vague"},
        422: {"model": ErrorResponse, "description": "Generator output could not be recovered"},
    },
)
async def parse_request(
    body: RecommendationRequest,
    service: RecommendationService = Depends(get_recommendation_service),
) -> ParseResponse:
    """Return the ParsedQuery the recommendation endpoint would use."""
    parsed = await service.parse(body.text, body.mood, body.mood_response)
    if parsed.ambiguous:
        raise AmbiguousInputError(parsed=parsed.model_dump(by_alias=True, mode="json"))
    return ParseResponse(parsed=parsed)
