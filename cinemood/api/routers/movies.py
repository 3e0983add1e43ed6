"""
Movies API router.
"""
from fastapi import APIRouter, Depends, Path

from cinemood.api.dependencies import get_movie_details_service
from cinemood.models.schemas import ErrorResponse, MovieDetails
from cinemood.services.movies import MovieDetailsService

router = APIRouter(prefix="/v1", tags=["movies"])


@router.get(
    "/movies/{movie_id}",
    response_model=MovieDetails,
    summary="Get Movie Details",
    responses={
        404: {"model": ErrorResponse, "description": "Unknown movie id"},
        503: {"model": ErrorResponse, "description": "Movie catalog unavailable"},
    },
)
async def get_movie(
    movie_id: int = Path(..., gt=0, description="Catalog movie id"),
    service: MovieDetailsService = Depends(get_movie_details_service),
) -> MovieDetails:
    """Single movie with poster URL and trailer id."""
    return await service.get_movie(movie_id)
