"""Models package - domain entities and interfaces."""
from .interfaces import MovieCatalog, TextGenerator
from .schemas import (
    CandidateMovie,
    Era,
    ErrorResponse,
    HistoryEntry,
    MoodResponseMode,
    MoodTag,
    MovieDetails,
    ParsedQuery,
    ParseResponse,
    RankedMovie,
    RecommendationRequest,
    RecommendationResponse,
    ScoredMovie,
    Tempo,
)

__all__ = [
    # Interfaces
    "MovieCatalog",
    "TextGenerator",
    # Schemas
    "CandidateMovie",
    "Era",
    "ErrorResponse",
    "HistoryEntry",
    "MoodResponseMode",
    "MoodTag",
    "MovieDetails",
    "ParseResponse",
    "ParsedQuery",
    "RankedMovie",
    "RecommendationRequest",
    "RecommendationResponse",
    "ScoredMovie",
    "Tempo",
]
