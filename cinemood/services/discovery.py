"""
Catalog discovery service.
Fetches candidate movies for a ParsedQuery across randomized catalog pages,
merges keyword search results, deduplicates and pre-scores them.
"""
import asyncio
import logging
import math
import random
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from cinemood.core.exceptions import CatalogUnavailableError
from cinemood.models.interfaces import MovieCatalog
from cinemood.models.schemas import CandidateMovie, ParsedQuery

logger = logging.getLogger(__name__)

MAX_PAGES = 4
MAX_TOTAL_PAGES = 500
MAX_SEARCH_KEYWORDS = 2
TIE_EPSILON = 0.001
TIE_SWAP_PROBABILITY = 0.15
SHORT_KEYWORD_LENGTH = 4

SORT_ORDERS = (
    "popularity.desc",
    "primary_release_date.desc",
    "release_date.desc",
    "vote_average.desc",
    "revenue.desc",
)

GENRE_NAME_TO_ID: Dict[str, int] = {
    "Action": 28,
    "Adventure": 12,
    "Animation": 16,
    "Comedy": 35,
    "Crime": 80,
    "Documentary": 99,
    "Drama": 18,
    "Family": 10751,
    "Fantasy": 14,
    "History": 36,
    "Horror": 27,
    "Music": 10402,
    "Mystery": 9648,
    "Romance": 10749,
    "Science Fiction": 878,
    "TV Movie": 10770,
    "Thriller": 53,
    "War": 10752,
    "Western": 37,
}


def genres_to_ids(genres: Iterable[str]) -> List[int]:
    """Catalog genre ids for names; unknown names are dropped."""
    ids: List[int] = []
    for name in genres or []:
        if not name:
            continue
        genre_id = GENRE_NAME_TO_ID.get(name) or GENRE_NAME_TO_ID.get(name[0].upper() + name[1:])
        if genre_id and genre_id not in ids:
            ids.append(genre_id)
    return ids


def build_discover_params(
    query: ParsedQuery,
    sort_by: str,
    min_vote_count: int = 5,
    language: str = "en-US",
) -> Dict[str, Any]:
    """Translate a ParsedQuery into discover endpoint filters (page excluded)."""
    params: Dict[str, Any] = {
        "sort_by": sort_by,
        "include_adult": "true" if query.adult else "false",
        "include_video": "false",
        "language": language,
        "vote_count.gte": min_vote_count,
    }

    genre_ids = genres_to_ids(query.genres)
    if genre_ids:
        params["with_genres"] = ",".join(str(i) for i in genre_ids)

    if query.runtime_min:
        params["with_runtime.gte"] = query.runtime_min
    if query.runtime_max:
        params["with_runtime.lte"] = query.runtime_max

    if query.era is not None:
        if query.era.from_year:
            params["primary_release_date.gte"] = f"{query.era.from_year}-01-01"
        if query.era.to_year:
            params["primary_release_date.lte"] = f"{query.era.to_year}-12-31"

    return params


def match_keywords(overview: str, keywords: Iterable[str]) -> List[str]:
    """Keywords found in the overview: whole word, or plain substring for short tokens."""
    text = (overview or "").lower()
    if not text:
        return []
    matched = []
    for keyword in keywords or []:
        kw = keyword.lower()
        if not kw:
            continue
        if re.search(rf"\b{re.escape(kw)}\b", text) or (
            len(kw) <= SHORT_KEYWORD_LENGTH and kw in text
        ):
            matched.append(keyword)
    return matched


def combined_score(movie: CandidateMovie) -> float:
    return (
        movie.vote_average * 10
        + math.log1p(max(movie.popularity, 0.0)) * 2
        + len(movie.matched_keywords) * 4
    )


class DiscoveryService:
    """
    Candidate discovery against a MovieCatalog.

    The primary discover call decides success: if it fails the result is an
    empty list. Extra pages, keyword searches and trailer lookups are best
    effort and their failures are skipped.
    """

    def __init__(
        self,
        catalog: MovieCatalog,
        rng: Optional[random.Random] = None,
        min_vote_count: int = 5,
        language: str = "en-US",
        result_cap: int = 60,
        trailer_lookup_enabled: bool = True,
        trailer_lookup_limit: int = 30,
    ) -> None:
        self._catalog = catalog
        self._rng = rng or random.Random()
        self._min_vote_count = min_vote_count
        self._language = language
        self._result_cap = result_cap
        self._trailer_lookup_enabled = trailer_lookup_enabled
        self._trailer_lookup_limit = trailer_lookup_limit

    async def discover(self, query: ParsedQuery, pages: int = MAX_PAGES) -> List[CandidateMovie]:
        """
        Fetch, deduplicate and pre-rank candidates.

        Args:
            query: Non-ambiguous parsed query
            pages: Requested discover pages (capped at 4)

        Returns:
            Up to `result_cap` unique candidates, best first
        """
        requested = max(1, min(MAX_PAGES, pages))
        sort_by = self._rng.choice(SORT_ORDERS)
        params = build_discover_params(query, sort_by, self._min_vote_count, self._language)

        try:
            first = await self._catalog.discover(params, 1)
        except CatalogUnavailableError as e:
            logger.warning(f"Primary discover call failed, returning no candidates: {e.message}")
            return []

        total_pages = self._total_pages(first)
        accumulated: List[Dict[str, Any]] = list(self._results(first))

        other_pages = self._pick_pages(requested, total_pages)
        search_terms = list(query.keywords[:MAX_SEARCH_KEYWORDS])

        tasks = [self._catalog.discover(params, page) for page in other_pages]
        tasks += [self._catalog.search(term) for term in search_terms]
        for outcome in await asyncio.gather(*tasks, return_exceptions=True):
            if isinstance(outcome, BaseException):
                logger.debug(f"Skipping failed secondary catalog fetch: {outcome}")
                continue
            accumulated.extend(self._results(outcome))

        candidates = self._dedupe(accumulated, query.keywords)
        ranked = self._rank(candidates)[: self._result_cap]

        logger.debug(
            f"Discovery sort={sort_by} pages={[1] + other_pages} searches={len(search_terms)} "
            f"raw={len(accumulated)} unique={len(candidates)} returned={len(ranked)}"
        )

        if self._trailer_lookup_enabled and ranked:
            ranked = await self._attach_trailers(ranked)
        return ranked

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _total_pages(payload: Dict[str, Any]) -> int:
        try:
            total = int(payload.get("total_pages") or 1)
        except (TypeError, ValueError):
            total = 1
        return max(1, min(MAX_TOTAL_PAGES, total))

    @staticmethod
    def _results(payload: Any) -> List[Dict[str, Any]]:
        if not isinstance(payload, dict):
            return []
        results = payload.get("results")
        return [r for r in results if isinstance(r, dict)] if isinstance(results, list) else []

    def _pick_pages(self, requested: int, total_pages: int) -> List[int]:
        """Random page numbers besides page 1, so that 1 + len(result) <= requested."""
        wanted = min(requested, total_pages)
        pages = {1}
        while len(pages) < wanted:
            pages.add(1 + self._rng.randrange(total_pages))
        return sorted(pages - {1})

    @staticmethod
    def _dedupe(raw_results: List[Dict[str, Any]], keywords: List[str]) -> List[CandidateMovie]:
        seen = set()
        candidates: List[CandidateMovie] = []
        for raw in raw_results:
            movie_id = raw.get("id")
            if not movie_id or movie_id in seen:
                continue
            try:
                movie = CandidateMovie.model_validate(raw)
            except PydanticValidationError:
                logger.debug(f"Skipping malformed catalog entry id={movie_id}")
                continue
            seen.add(movie_id)
            movie.matched_keywords = match_keywords(movie.overview, keywords)
            candidates.append(movie)
        return candidates

    def _rank(self, candidates: List[CandidateMovie]) -> List[CandidateMovie]:
        scored: List[Tuple[float, CandidateMovie]] = [(combined_score(m), m) for m in candidates]
        scored.sort(key=lambda pair: pair[0], reverse=True)

        # Near-ties occasionally trade places so repeated queries vary
        for i in range(len(scored) - 1):
            if (
                abs(scored[i][0] - scored[i + 1][0]) < TIE_EPSILON
                and self._rng.random() < TIE_SWAP_PROBABILITY
            ):
                scored[i], scored[i + 1] = scored[i + 1], scored[i]

        return [movie for _, movie in scored]

    async def _attach_trailers(self, movies: List[CandidateMovie]) -> List[CandidateMovie]:
        head = movies[: self._trailer_lookup_limit]
        keys = await asyncio.gather(
            *(self._catalog.trailer_key(m.id) for m in head),
            return_exceptions=True,
        )
        with_trailers = [
            movie.model_copy(update={"trailer_youtube_id": key})
            if isinstance(key, str) and key
            else movie
            for movie, key in zip(head, keys)
        ]
        return with_trailers + movies[self._trailer_lookup_limit:]
