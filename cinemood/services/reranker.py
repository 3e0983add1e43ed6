"""
Reranker service.
Second-pass relevance scoring over discovered candidates, with jitter and a
bounded rotation so repeated identical requests do not return identical lists.
"""
import logging
import random
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from cinemood.models.schemas import (
    CandidateMovie,
    MoodResponseMode,
    ParsedQuery,
    RankedMovie,
    ScoredMovie,
    Tempo,
)

logger = logging.getLogger(__name__)

JITTER = 0.001
MAX_ROTATION = 7


@dataclass
class RerankContext:
    """Request context the scoring strategies read from."""

    user_text: str
    parsed: ParsedQuery
    mood: Optional[str] = None
    mood_response: MoodResponseMode = MoodResponseMode.MATCH
    limit: int = 20
    max_popularity: float = 0.0


# =============================================================================
# Scoring Strategy (Strategy Pattern)
# =============================================================================


class ScoringStrategy(ABC):
    """Abstract base class for scoring strategies."""

    @abstractmethod
    def calculate_boost(self, movie: CandidateMovie, context: RerankContext) -> Tuple[float, str]:
        """
        Calculate a score contribution for this strategy.

        Returns:
            Tuple of (boost_value, strategy_name)
        """
        pass


class KeywordScoring(ScoringStrategy):
    """Keywords contained in the title or overview."""

    FULL_MATCH = 3.0
    PARTIAL_MATCH = 0.6

    def calculate_boost(self, movie: CandidateMovie, context: RerankContext) -> Tuple[float, str]:
        haystack = f"{movie.title} {movie.overview}".lower()
        boost = 0.0
        for keyword in context.parsed.keywords:
            kw = keyword.lower()
            if not kw:
                continue
            if kw in haystack:
                boost += self.FULL_MATCH
                continue
            # Weak hit: the stem (keyword minus up to three trailing chars) starts a word
            stem = kw[: max(3, len(kw) - 3)]
            if re.search(rf"\b{re.escape(stem)}", haystack):
                boost += self.PARTIAL_MATCH
        return boost, "keywords"


class PopularityScoring(ScoringStrategy):
    """Popularity relative to the most popular candidate."""

    WEIGHT = 2.0

    def calculate_boost(self, movie: CandidateMovie, context: RerankContext) -> Tuple[float, str]:
        if context.max_popularity <= 0:
            return 0.0, "popularity"
        return movie.popularity / context.max_popularity * self.WEIGHT, "popularity"


class RatingScoring(ScoringStrategy):
    """Average vote scaled to 0-2."""

    def calculate_boost(self, movie: CandidateMovie, context: RerankContext) -> Tuple[float, str]:
        return movie.vote_average / 5.0, "rating"


class TempoScoring(ScoringStrategy):
    """Overview vocabulary that fits the requested pacing."""

    FAST_RE = re.compile(r"\b(?:action|explosion|chase|battle)", re.IGNORECASE)
    SLOW_RE = re.compile(r"\b(?:drama|contemplative|quiet)", re.IGNORECASE)

    def calculate_boost(self, movie: CandidateMovie, context: RerankContext) -> Tuple[float, str]:
        tempo = context.parsed.tempo
        if tempo == Tempo.FAST and self.FAST_RE.search(movie.overview):
            return 0.8, "tempo"
        if tempo == Tempo.SLOW and self.SLOW_RE.search(movie.overview):
            return 0.6, "tempo"
        return 0.0, "tempo"


class LanguageScoring(ScoringStrategy):
    def calculate_boost(self, movie: CandidateMovie, context: RerankContext) -> Tuple[float, str]:
        wanted = (context.parsed.language or "").lower()
        if wanted and (movie.original_language or "").lower() == wanted:
            return 0.5, "language"
        return 0.0, "language"


class EraScoring(ScoringStrategy):
    def calculate_boost(self, movie: CandidateMovie, context: RerankContext) -> Tuple[float, str]:
        era = context.parsed.era
        year = movie.release_year
        if era is not None and year is not None and era.contains(year):
            return 0.7, "era"
        return 0.0, "era"


class AddressPenalty(ScoringStrategy):
    """Flat penalty for counterbalancing requests."""

    def calculate_boost(self, movie: CandidateMovie, context: RerankContext) -> Tuple[float, str]:
        if context.mood_response == MoodResponseMode.ADDRESS:
            return -0.25, "address_penalty"
        return 0.0, "address_penalty"


# =============================================================================
# Reranker
# =============================================================================


class Reranker:
    """
    Main reranking service.
    Orchestrates deduplication, scoring, jitter, rotation and capping.
    """

    def __init__(
        self,
        scoring_strategies: Optional[List[ScoringStrategy]] = None,
        rng: Optional[random.Random] = None,
        image_base_url: str = "https://image.tmdb.org/t/p/w500",
        result_cap: int = 50,
        enforce_limit: bool = False,
    ) -> None:
        """
        Initialize the reranker.

        Args:
            scoring_strategies: Strategies to apply (default: all)
            rng: Random source for jitter and rotation
            image_base_url: Prefix for poster paths
            result_cap: Maximum output length
            enforce_limit: Truncate to the caller's limit instead of result_cap
        """
        self._strategies = scoring_strategies or [
            KeywordScoring(),
            PopularityScoring(),
            RatingScoring(),
            TempoScoring(),
            LanguageScoring(),
            EraScoring(),
            AddressPenalty(),
        ]
        self._rng = rng or random.Random()
        self._image_base_url = image_base_url.rstrip("/")
        self._result_cap = result_cap
        self._enforce_limit = enforce_limit

    def rerank(self, candidates: List[CandidateMovie], context: RerankContext) -> List[RankedMovie]:
        """
        Rank candidates for one request.

        Args:
            candidates: Discovered movies, possibly with duplicates
            context: Text, parsed query, mood and limit of the request

        Returns:
            Ranked movies, best first apart from the diversity rotation
        """
        # Step 1: Deduplicate
        unique = self._dedupe(candidates)
        if not unique:
            return []
        context = replace(context, max_popularity=max(m.popularity for m in unique))

        # Step 2: Score with jitter
        scored = self._score(unique, context)

        # Step 3: Sort by score (descending)
        scored.sort(key=lambda s: s.score, reverse=True)

        # Step 4: Rotate the head to the tail
        offset = self.rotation_offset(len(scored))
        scored = scored[offset:] + scored[:offset]

        # Step 5: Cap
        cap = self._output_cap(context.limit)
        ranked = [self._to_ranked(s) for s in scored[:cap]]

        logger.debug(
            f"Reranked {len(candidates)} candidates -> {len(unique)} unique -> "
            f"returning {len(ranked)} (rotation={offset})"
        )
        return ranked

    def rotation_offset(self, length: int) -> int:
        """Random offset in [0, min(7, length))."""
        bound = min(MAX_ROTATION, length)
        return self._rng.randrange(bound) if bound > 0 else 0

    def _output_cap(self, limit: int) -> int:
        if self._enforce_limit:
            return max(0, limit)
        if self._result_cap != limit:
            logger.debug(f"Result cap {self._result_cap} used instead of requested limit {limit}")
        return self._result_cap

    @staticmethod
    def _dedupe(candidates: List[CandidateMovie]) -> List[CandidateMovie]:
        """Keep the first movie per catalog id; the title stands in only when there is no id."""
        seen = set()
        unique = []
        for movie in candidates:
            key = movie.id or movie.title.strip().lower()
            if key in seen:
                continue
            seen.add(key)
            unique.append(movie)
        return unique

    def _score(self, candidates: List[CandidateMovie], context: RerankContext) -> List[ScoredMovie]:
        scored = []
        for movie in candidates:
            total = 0.0
            breakdown: Dict[str, float] = {}
            for strategy in self._strategies:
                boost, name = strategy.calculate_boost(movie, context)
                total += boost
                breakdown[name] = boost

            jitter = self._rng.uniform(-JITTER, JITTER)
            breakdown["jitter"] = jitter
            scored.append(ScoredMovie(movie=movie, score=total + jitter, score_breakdown=breakdown))
        return scored

    def _poster_url(self, poster_path: Optional[str]) -> Optional[str]:
        if not poster_path:
            return None
        if poster_path.startswith("http"):
            return poster_path
        return f"{self._image_base_url}/{poster_path.lstrip('/')}"

    def _to_ranked(self, scored: ScoredMovie) -> RankedMovie:
        movie = scored.movie
        return RankedMovie(
            id=movie.id,
            title=movie.title,
            overview=movie.overview,
            poster=self._poster_url(movie.poster_path),
            release_date=movie.release_date,
            popularity=movie.popularity,
            score=round(scored.score, 2),
            vote_average=movie.vote_average,
            original_language=movie.original_language,
            runtime=movie.runtime,
            trailer_youtube_id=movie.trailer_youtube_id,
        )
