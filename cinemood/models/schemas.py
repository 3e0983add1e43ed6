"""
Domain models using Pydantic.
All data structures for the mood-based recommendation pipeline.
"""
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# =============================================================================
# Enumerations (Reference Data)
# =============================================================================


class MoodTag(str, Enum):
    """User-facing mood labels."""

    HAPPY = "Happy"
    SAD = "Sad"
    ROMANTIC = "Romantic"
    EXCITED = "Excited"
    RELAXED = "Relaxed"
    ANGRY = "Angry"
    SCARED = "Scared"
    ADVENTUROUS = "Adventurous"
    MYSTERIOUS = "Mysterious"
    # Extended set, used for hinting only
    NOSTALGIC = "Nostalgic"
    CURIOUS = "Curious"
    WHOLESOME = "Wholesome"
    COZY = "Cozy"
    EDGY = "Edgy"
    BORED = "Bored"
    MOTIVATED = "Motivated"
    LONELY = "Lonely"
    HOPEFUL = "Hopeful"
    MELANCHOLIC = "Melancholic"
    PLAYFUL = "Playful"

    @classmethod
    def from_label(cls, label: Optional[str]) -> Optional["MoodTag"]:
        """Case-insensitive lookup; None for blank or unknown labels."""
        if not label:
            return None
        wanted = label.strip().lower()
        for tag in cls:
            if tag.value.lower() == wanted:
                return tag
        return None


class MoodResponseMode(str, Enum):
    """Whether content should reinforce or counterbalance the mood."""

    MATCH = "match"
    ADDRESS = "address"

    @classmethod
    def normalize(cls, value: Any) -> "MoodResponseMode":
        """Anything other than 'address' means match."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str) and value.strip().lower() == cls.ADDRESS.value:
            return cls.ADDRESS
        return cls.MATCH


class Tempo(str, Enum):
    """Requested pacing."""

    SLOW = "slow"
    MEDIUM = "medium"
    FAST = "fast"


# =============================================================================
# Domain Models (Internal)
# =============================================================================


class Era(BaseModel):
    """Release-year range. Serialized with the catalog-style keys `from`/`to`."""

    model_config = ConfigDict(populate_by_name=True)

    from_year: Optional[int] = Field(default=None, alias="from")
    to_year: Optional[int] = Field(default=None, alias="to")

    def contains(self, year: int) -> bool:
        """True when both bounds are set and year falls inside them."""
        if self.from_year is None or self.to_year is None:
            return False
        return self.from_year <= year <= self.to_year


class ParsedQuery(BaseModel):
    """
    Structured, catalog-ready representation of one recommendation request.
    Created fresh per request and discarded after discovery.
    """

    model_config = ConfigDict(populate_by_name=True)

    genres: List[str] = Field(
        default_factory=list,
        max_length=4,
        description="Canonical genre names, deduplicated",
    )
    keywords: List[str] = Field(
        default_factory=list,
        max_length=8,
        description="Single-word lowercase tokens, deduplicated",
    )
    tempo: Optional[Tempo] = None
    runtime_min: Optional[int] = Field(default=None, gt=0)
    runtime_max: Optional[int] = Field(default=None, gt=0)
    era: Optional[Era] = None
    language: Optional[str] = None
    adult: bool = False
    mood_response: MoodResponseMode = Field(
        default=MoodResponseMode.MATCH,
        alias="moodResponse",
        description="Always the caller's requested mode",
    )
    ambiguous: bool = Field(
        default=False,
        description="Input carried no usable signal; do not run discovery",
    )
    inferred_mood: Optional[str] = Field(
        default=None,
        alias="inferredMood",
        description="Explicit or text-inferred mood used for hinting",
    )

    @model_validator(mode="after")
    def _clear_when_ambiguous(self) -> "ParsedQuery":
        if self.ambiguous:
            self.genres = []
            self.keywords = []
        return self


class CandidateMovie(BaseModel):
    """One catalog result. Ephemeral - lives for a single request."""

    id: int = Field(..., description="Catalog-unique movie id")
    title: str = Field(default="", description="Display title")
    overview: str = Field(default="", description="Plot summary")
    popularity: float = Field(default=0.0, description="Catalog popularity (unbounded)")
    vote_average: float = Field(default=0.0, ge=0, le=10)
    vote_count: Optional[int] = None
    release_date: Optional[str] = None
    poster_path: Optional[str] = None
    genre_ids: List[int] = Field(default_factory=list)
    original_language: Optional[str] = None
    runtime: Optional[int] = None
    matched_keywords: List[str] = Field(default_factory=list)
    trailer_youtube_id: Optional[str] = None

    @field_validator("title", "overview", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("popularity", "vote_average", mode="before")
    @classmethod
    def _none_to_zero(cls, value: Any) -> Any:
        return 0.0 if value is None else value

    @field_validator("genre_ids", mode="before")
    @classmethod
    def _none_to_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def release_year(self) -> Optional[int]:
        """Year parsed from release_date, if present."""
        if not self.release_date or len(self.release_date) < 4:
            return None
        try:
            return int(self.release_date[:4])
        except ValueError:
            return None


class ScoredMovie(BaseModel):
    """Internal model for a candidate with its rerank score."""

    movie: CandidateMovie
    score: float
    score_breakdown: Dict[str, float] = Field(default_factory=dict)


class RankedMovie(BaseModel):
    """Reranked movie as returned to callers."""

    id: int
    title: str
    overview: str = ""
    poster: Optional[str] = Field(default=None, description="Absolute poster URL")
    release_date: Optional[str] = None
    popularity: float = 0.0
    score: float = Field(..., description="Rerank score rounded to 2 decimals")
    vote_average: float = 0.0
    original_language: Optional[str] = None
    runtime: Optional[int] = None
    trailer_youtube_id: Optional[str] = None


# =============================================================================
# API Models (External)
# =============================================================================


class RecommendationRequest(BaseModel):
    """Body for the recommendation and parse endpoints."""

    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(default="", max_length=2000, description="Free-text mood description")
    mood: str = Field(default="", max_length=40, description="Selected mood label, may be empty")
    mood_response: MoodResponseMode = Field(
        default=MoodResponseMode.MATCH,
        alias="moodResponse",
    )
    limit: int = Field(default=20, ge=1, le=50, description="Requested number of results")

    @field_validator("mood_response", mode="before")
    @classmethod
    def _normalize_mode(cls, value: Any) -> MoodResponseMode:
        return MoodResponseMode.normalize(value)


class HistoryEntry(BaseModel):
    """Shape handed to the history/favorites store, keyed there by user id."""

    model_config = ConfigDict(populate_by_name=True)

    mood: str
    movie_ids: List[str] = Field(default_factory=list, alias="movieIds")
    mood_response: MoodResponseMode = Field(alias="moodResponse")


class RecommendationResponse(BaseModel):
    """Recommendation endpoint response."""

    model_config = ConfigDict(populate_by_name=True)

    results: List[RankedMovie] = Field(default_factory=list)
    parsed: ParsedQuery
    mood_response: MoodResponseMode = Field(alias="moodResponse")
    history: Optional[HistoryEntry] = None


class ParseResponse(BaseModel):
    """Parse endpoint response."""

    parsed: ParsedQuery


class MovieDetails(BaseModel):
    """Single movie lookup."""

    id: int
    title: str = ""
    overview: str = ""
    poster_path: Optional[str] = Field(default=None, description="Absolute poster URL")
    vote_average: float = 0.0
    release_date: Optional[str] = None
    runtime: Optional[int] = None
    trailer_youtube_id: Optional[str] = None


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: Dict[str, Any] = Field(..., description="Error details")
