"""
Recommendations API router.
Implements POST /v1/recommendations.
"""
from fastapi import APIRouter, Depends

from cinemood.api.dependencies import get_recommendation_service
from cinemood.core.exceptions import AmbiguousInputError
from cinemood.models.schemas import ErrorResponse, RecommendationRequest, RecommendationResponse
from cinemood.services.recommendations import RecommendationService

router = APIRouter(prefix="/v1", tags=["recommendations"])


@router.post(
    "/recommendations",
    response_model=RecommendationResponse,
    summary="Get Mood-Based Recommendations",
    description="""
    Recommend movies for a free-text mood description.

    The text is parsed into genres, keywords, tempo, runtime and era, the
    movie catalog is searched across randomized pages, and the candidates are
    reranked. Repeated identical requests intentionally return varied lists.

    **moodResponse:**
    - `match`: reinforce the mood
    - `address`: counterbalance it
    """,
    responses={
        200: {"description": "Ranked movies returned (possibly empty)"},
        400: {"model": ErrorResponse, "description": "Input too vague - ask the user for more detail"},
        422: {"model": ErrorResponse, "description": "Request could not be parsed - ask the user to rephrase"},
    },
)
async def get_recommendations(
    body: RecommendationRequest,
    service: RecommendationService = Depends(get_recommendation_service),
) -> RecommendationResponse:
    """Recommendation endpoint."""
    response = await service.get_recommendations(
        text=body.text,
        mood=body.mood,
        mood_response=body.mood_response,
        limit=body.limit,
    )

    if response.parsed.ambiguous:
        raise AmbiguousInputError(parsed=response.parsed.model_dump(by_alias=True, mode="json"))

    return response
