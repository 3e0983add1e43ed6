"""
TMDB API client.

Uses httpx.AsyncClient with the v3 `api_key` query parameter. Every failure
mode (non-2xx, timeout, transport error, malformed JSON) is raised as
CatalogUnavailableError so callers can decide whether to absorb it.
"""
import logging
import re
from typing import Any, Dict, List, Optional

import httpx

from cinemood.config.settings import Settings
from cinemood.core.exceptions import CatalogUnavailableError, ConfigurationError, NotFoundError
from cinemood.core.metrics import CATALOG_FAILURES_TOTAL

logger = logging.getLogger(__name__)

_OFFICIAL_RE = re.compile(r"official", re.IGNORECASE)


def pick_trailer_key(videos: Optional[List[Dict[str, Any]]]) -> Optional[str]:
    """
    Choose the best YouTube video key.

    Preference: official trailer, any trailer, teaser, then any YouTube video.
    """
    youtube = [v for v in videos or [] if isinstance(v, dict) and v.get("site") == "YouTube"]
    if not youtube:
        return None

    def is_official(video: Dict[str, Any]) -> bool:
        return bool(video.get("official")) or bool(_OFFICIAL_RE.search(video.get("name") or ""))

    for accept in (
        lambda v: v.get("type") == "Trailer" and is_official(v),
        lambda v: v.get("type") == "Trailer",
        lambda v: v.get("type") == "Teaser",
        lambda v: True,
    ):
        for video in youtube:
            if accept(video) and video.get("key"):
                return video["key"]
    return None


class TMDBClient:
    """
    Movie catalog client.

    Usage:
        client = TMDBClient(settings)
        page = await client.discover({"with_genres": "35"}, page=1)
        await client.close()
    """

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None) -> None:
        if not settings.TMDB_API_KEY:
            raise ConfigurationError(["TMDB_API_KEY"])
        self._api_key = settings.TMDB_API_KEY
        self._language = settings.TMDB_LANGUAGE
        self._client = http_client or httpx.AsyncClient(
            base_url=settings.TMDB_BASE_URL,
            timeout=settings.TMDB_TIMEOUT_SEC,
            headers={"Accept": "application/json"},
        )

    async def _get(self, endpoint: str, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        query = {"api_key": self._api_key}
        query.update(params or {})

        try:
            response = await self._client.get(path, params=query)
        except httpx.TimeoutException as e:
            raise self._failure(endpoint, "timeout") from e
        except httpx.HTTPError as e:
            raise self._failure(endpoint, f"transport error: {type(e).__name__}") from e

        if response.status_code == 404 and endpoint == "movie":
            raise NotFoundError("Movie", path.rsplit("/", 1)[-1])
        if not response.is_success:
            raise self._failure(endpoint, "upstream error", response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise self._failure(endpoint, "invalid JSON", response.status_code) from e
        if not isinstance(data, dict):
            raise self._failure(endpoint, "unexpected payload", response.status_code)
        return data

    @staticmethod
    def _failure(endpoint: str, reason: str, status: Optional[int] = None) -> CatalogUnavailableError:
        CATALOG_FAILURES_TOTAL.labels(endpoint=endpoint).inc()
        logger.warning(
            f"Catalog {endpoint} request failed: {reason}"
            + (f" (status={status})" if status is not None else ""),
            extra={"endpoint": endpoint},
        )
        return CatalogUnavailableError(endpoint, reason, status)

    async def discover(self, params: Dict[str, Any], page: int) -> Dict[str, Any]:
        return await self._get("discover", "/discover/movie", {**params, "page": page})

    async def search(self, query: str, page: int = 1) -> Dict[str, Any]:
        return await self._get(
            "search",
            "/search/movie",
            {"query": query, "page": page, "language": self._language, "include_adult": "false"},
        )

    async def trailer_key(self, movie_id: int) -> Optional[str]:
        data = await self._get("videos", f"/movie/{movie_id}/videos", {"language": self._language})
        return pick_trailer_key(data.get("results"))

    async def movie(self, movie_id: int) -> Dict[str, Any]:
        return await self._get("movie", f"/movie/{movie_id}", {"append_to_response": "videos"})

    async def close(self) -> None:
        await self._client.aclose()
