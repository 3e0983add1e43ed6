"""Services package - business logic."""
from .discovery import DiscoveryService
from .generator import OpenAICompatibleGenerator
from .movies import MovieDetailsService
from .parser import ParserStage, QueryParser
from .recommendations import RecommendationService
from .reranker import Reranker, RerankContext
from .tmdb import TMDBClient

__all__ = [
    "DiscoveryService",
    "MovieDetailsService",
    "OpenAICompatibleGenerator",
    "ParserStage",
    "QueryParser",
    "RecommendationService",
    "RerankContext",
    "Reranker",
    "TMDBClient",
]
