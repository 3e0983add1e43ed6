"""
External collaborator interfaces (abstractions).
Using Protocol for structural subtyping (duck typing with type hints).
The parser and discovery services depend on these, never on concrete clients.
"""
from typing import Any, Dict, Optional, Protocol, runtime_checkable


@runtime_checkable
class TextGenerator(Protocol):
    """
    Interface for the one-shot generative parser.
    Production: OpenAI-compatible chat completions client.
    Testing: scripted fake returning canned text.
    """

    async def generate(self, prompt: str, schema: Optional[Dict[str, Any]] = None) -> str:
        """
        Complete a prompt, optionally constrained to a strict JSON schema.

        Args:
            prompt: Full instruction text
            schema: JSON schema for strict structured output, None for free text

        Returns:
            Raw completion text (expected to contain JSON)

        Raises:
            Exception: Any provider failure
        """
        ...


@runtime_checkable
class MovieCatalog(Protocol):
    """
    Interface for the external movie catalog.
    Production: TMDB over httpx.
    Testing: httpx.MockTransport or in-memory fake.
    """

    async def discover(self, params: Dict[str, Any], page: int) -> Dict[str, Any]:
        """
        Fetch one page of the filterable discover listing.

        Raises:
            CatalogUnavailableError: On any failure
        """
        ...

    async def search(self, query: str, page: int = 1) -> Dict[str, Any]:
        """
        Fetch one page of free-text search results.

        Raises:
            CatalogUnavailableError: On any failure
        """
        ...

    async def trailer_key(self, movie_id: int) -> Optional[str]:
        """Best YouTube trailer key for a movie, None if there is none."""
        ...

    async def movie(self, movie_id: int) -> Dict[str, Any]:
        """
        Fetch a single movie with its videos appended.

        Raises:
            NotFoundError: Unknown id
            CatalogUnavailableError: On any other failure
        """
        ...
