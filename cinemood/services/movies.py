"""
Movie details lookup with an in-process TTL cache.
"""
import logging
from typing import Optional

from cinemood.core.cache import InMemoryCache
from cinemood.core.exceptions import CatalogUnavailableError, ServiceUnavailableError
from cinemood.models.interfaces import MovieCatalog
from cinemood.models.schemas import MovieDetails
from cinemood.services.tmdb import pick_trailer_key

logger = logging.getLogger(__name__)


class MovieDetailsService:
    """Fetch a single movie, cached for `ttl_seconds`."""

    def __init__(
        self,
        catalog: MovieCatalog,
        cache: Optional[InMemoryCache[MovieDetails]] = None,
        image_base_url: str = "https://image.tmdb.org/t/p/w500",
        ttl_seconds: float = 3600,
    ) -> None:
        self._catalog = catalog
        self._cache = cache if cache is not None else InMemoryCache(default_ttl_seconds=ttl_seconds)
        self._image_base_url = image_base_url.rstrip("/")

    async def get_movie(self, movie_id: int) -> MovieDetails:
        """
        Raises:
            NotFoundError: Unknown movie id
            ServiceUnavailableError: Catalog failed
        """
        try:
            return await self._cache.get_or_fetch(movie_id, lambda: self._fetch(movie_id))
        except CatalogUnavailableError as e:
            logger.error(f"Movie lookup failed for id={movie_id}: {e.message}")
            raise ServiceUnavailableError("movie_catalog") from e

    async def _fetch(self, movie_id: int) -> MovieDetails:
        data = await self._catalog.movie(movie_id)
        videos = (data.get("videos") or {}).get("results")
        poster_path = data.get("poster_path")
        return MovieDetails(
            id=data.get("id", movie_id),
            title=data.get("title") or "",
            overview=data.get("overview") or "",
            poster_path=f"{self._image_base_url}/{poster_path.lstrip('/')}" if poster_path else None,
            vote_average=data.get("vote_average") or 0.0,
            release_date=data.get("release_date"),
            runtime=data.get("runtime"),
            trailer_youtube_id=pick_trailer_key(videos),
        )
