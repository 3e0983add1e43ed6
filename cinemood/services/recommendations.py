"""
Recommendation service - main business logic orchestrator.
Runs parse -> discover -> rerank strictly in sequence for one request.
"""
import logging
import time
from typing import Optional

from cinemood.core.telemetry import get_tracer
from cinemood.models.schemas import (
    HistoryEntry,
    MoodResponseMode,
    ParsedQuery,
    RecommendationResponse,
)
from cinemood.services.discovery import MAX_PAGES, DiscoveryService
from cinemood.services.parser import QueryParser
from cinemood.services.reranker import Reranker, RerankContext

logger = logging.getLogger(__name__)


class RecommendationService:
    """
    Mood-based recommendation flow.

    Responsibilities:
    - Parse the request into a ParsedQuery
    - Stop before discovery when the input is ambiguous
    - Discover and rerank candidates
    - Build the history payload for the persistence layer
    """

    def __init__(
        self,
        parser: QueryParser,
        discovery: DiscoveryService,
        reranker: Reranker,
        discovery_pages: int = MAX_PAGES,
    ) -> None:
        self._parser = parser
        self._discovery = discovery
        self._reranker = reranker
        self._discovery_pages = discovery_pages

    async def parse(
        self,
        text: str,
        mood: Optional[str] = None,
        mood_response: MoodResponseMode = MoodResponseMode.MATCH,
    ) -> ParsedQuery:
        """Parse only; the caller decides what to do with an ambiguous result."""
        return await self._parser.parse(text, mood, mood_response)

    async def get_recommendations(
        self,
        text: str,
        mood: Optional[str] = None,
        mood_response: MoodResponseMode = MoodResponseMode.MATCH,
        limit: int = 20,
    ) -> RecommendationResponse:
        """
        Recommend movies for a mood description.

        Returns:
            RecommendationResponse; `results` is empty and `history` is None
            when the parsed query is ambiguous

        Raises:
            ParseError: Generator output could not be recovered
        """
        start_time = time.time()
        mode = MoodResponseMode.normalize(mood_response)
        tracer = get_tracer()

        with tracer.start_as_current_span("recommendations.parse") as span:
            parsed = await self._parser.parse(text, mood, mode)
            span.set_attribute("parsed.ambiguous", parsed.ambiguous)
            span.set_attribute("parsed.mood_response", mode.value)

        if parsed.ambiguous:
            logger.info("Ambiguous input, skipping discovery", extra={"mood": mood, "mood_response": mode.value})
            return RecommendationResponse(results=[], parsed=parsed, mood_response=mode)

        with tracer.start_as_current_span("recommendations.discover") as span:
            candidates = await self._discovery.discover(parsed, pages=self._discovery_pages)
            span.set_attribute("discover.candidates", len(candidates))

        with tracer.start_as_current_span("recommendations.rerank") as span:
            results = self._reranker.rerank(
                candidates,
                RerankContext(
                    user_text=text,
                    parsed=parsed,
                    mood=mood or parsed.inferred_mood,
                    mood_response=mode,
                    limit=limit,
                ),
            )
            span.set_attribute("rerank.results", len(results))

        history = HistoryEntry(
            mood=mood or parsed.inferred_mood or "",
            movie_ids=[str(movie.id) for movie in results],
            mood_response=mode,
        )

        elapsed_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Recommendations served: candidates={len(candidates)}, results={len(results)}, "
            f"elapsed_ms={elapsed_ms:.2f}",
            extra={"mood": history.mood, "mood_response": mode.value},
        )

        return RecommendationResponse(results=results, parsed=parsed, mood_response=mode, history=history)
