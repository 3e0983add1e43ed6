"""
Unit tests for the recommendation orchestrator and movie details service.
"""
from unittest.mock import patch

import httpx
import pytest

from cinemood.core.exceptions import NotFoundError, ParseError, ServiceUnavailableError
from cinemood.models.schemas import MoodResponseMode
from cinemood.services.movies import MovieDetailsService
from tests.fakes import catalog_client, movie_payload, recommendation_service


class CountingCatalog:
    def __init__(self, status=200):
        self.status = status
        self.requests = []

    def __call__(self, request):
        self.requests.append(request.url.path)
        if self.status != 200:
            return httpx.Response(self.status, json={})
        if request.url.path.endswith("/videos"):
            return httpx.Response(200, json={"results": []})
        results = [
            movie_payload(1, title="The Vault", overview="A crew plans one last heist."),
            movie_payload(2, title="Night Shift", overview="A nurse on the late shift."),
        ]
        return httpx.Response(200, json={"total_pages": 1, "results": results})


def make_service(responses, catalog):
    return recommendation_service(responses, catalog, seed=99)


class TestRecommendationService:
    @pytest.mark.asyncio
    async def test_full_flow(self):
        catalog = CountingCatalog()
        service = make_service([{"genres": ["Crime"], "keywords": ["heist"]}], catalog)

        response = await service.get_recommendations("a heist movie", "Excited", MoodResponseMode.MATCH, 10)

        assert sorted(m.id for m in response.results) == [1, 2]
        assert response.mood_response == MoodResponseMode.MATCH
        assert response.history.mood == "Excited"
        assert response.history.movie_ids == [str(m.id) for m in response.results]
        assert response.history.mood_response == MoodResponseMode.MATCH

    @pytest.mark.asyncio
    async def test_history_uses_inferred_mood(self):
        service = make_service([{"genres": ["Drama"], "keywords": ["nurse"]}], CountingCatalog())

        response = await service.get_recommendations("I'm feeling lonely tonight", "", MoodResponseMode.ADDRESS)

        assert response.parsed.inferred_mood == "Lonely"
        assert response.history.mood == "Lonely"
        assert response.history.mood_response == MoodResponseMode.ADDRESS

    @pytest.mark.asyncio
    async def test_ambiguous_skips_discovery(self):
        catalog = CountingCatalog()
        service = make_service([{"ambiguous": True}], catalog)

        response = await service.get_recommendations("ok", "", MoodResponseMode.MATCH)

        assert response.parsed.ambiguous is True
        assert response.results == []
        assert response.history is None
        assert catalog.requests == []

    @pytest.mark.asyncio
    async def test_catalog_outage_returns_empty_results(self):
        service = make_service([{"genres": ["Crime"], "keywords": ["heist"]}], CountingCatalog(status=503))

        response = await service.get_recommendations("a heist movie", "", MoodResponseMode.MATCH)

        assert response.results == []
        assert response.history.movie_ids == []

    @pytest.mark.asyncio
    async def test_parse_error_propagates(self):
        service = make_service([RuntimeError("down"), "no json here"], CountingCatalog())

        with pytest.raises(ParseError):
            await service.get_recommendations("a heist movie", "", MoodResponseMode.MATCH)

    @pytest.mark.asyncio
    async def test_stage_spans(self):
        service = make_service([{"genres": ["Crime"], "keywords": ["heist"]}], CountingCatalog())

        with patch("cinemood.services.recommendations.get_tracer") as mock_get_tracer:
            await service.get_recommendations("a heist movie", "", MoodResponseMode.MATCH)

        span_names = [c.args[0] for c in mock_get_tracer.return_value.start_as_current_span.call_args_list]
        assert span_names == [
            "recommendations.parse",
            "recommendations.discover",
            "recommendations.rerank",
        ]

    @pytest.mark.asyncio
    async def test_parse_only(self):
        catalog = CountingCatalog()
        service = make_service([{"genres": ["Crime"], "keywords": ["heist"]}], catalog)

        parsed = await service.parse("a heist movie", "", MoodResponseMode.MATCH)

        assert parsed.genres == ["Crime"]
        assert catalog.requests == []


class TestMovieDetailsService:
    @staticmethod
    def details_catalog(calls, status=200):
        def handler(request):
            calls.append(request.url.path)
            if status != 200:
                return httpx.Response(status, json={})
            return httpx.Response(
                200,
                json={
                    "id": 42,
                    "title": "Harbor Lights",
                    "overview": "Fishing boats and old secrets.",
                    "poster_path": "/harbor.jpg",
                    "vote_average": 7.4,
                    "release_date": "1999-04-02",
                    "runtime": 104,
                    "videos": {"results": [{"site": "YouTube", "type": "Trailer", "key": "abc"}]},
                },
            )

        return handler

    @pytest.mark.asyncio
    async def test_fetch_and_cache(self):
        calls = []
        service = MovieDetailsService(
            catalog_client(self.details_catalog(calls)),
            image_base_url="https://img.test/w500",
        )

        first = await service.get_movie(42)
        second = await service.get_movie(42)

        assert first == second
        assert first.poster_path == "https://img.test/w500/harbor.jpg"
        assert first.trailer_youtube_id == "abc"
        assert first.runtime == 104
        assert calls == ["/3/movie/42"]

    @pytest.mark.asyncio
    async def test_not_found(self):
        service = MovieDetailsService(catalog_client(self.details_catalog([], status=404)))

        with pytest.raises(NotFoundError):
            await service.get_movie(7)

    @pytest.mark.asyncio
    async def test_catalog_failure_is_unavailable(self):
        calls = []
        service = MovieDetailsService(catalog_client(self.details_catalog(calls, status=500)))

        with pytest.raises(ServiceUnavailableError):
            await service.get_movie(7)
        with pytest.raises(ServiceUnavailableError):
            await service.get_movie(7)
        # Failures are not cached
        assert len(calls) == 2
