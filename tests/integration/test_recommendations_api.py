"""
Integration tests for the recommendation and parse endpoints.
"""
import httpx
from fastapi.testclient import TestClient

from tests.fakes import movie_payload, recommendation_service


def catalog_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path.endswith("/videos"):
        return httpx.Response(200, json={"results": [{"site": "YouTube", "type": "Trailer", "key": "yt1"}]})
    results = [
        movie_payload(10, title="Sunny Side", overview="A cheerful comedy about a seaside cafe.", popularity=80.0),
        movie_payload(11, title="Paper Boats", overview="Two kids build a raft.", popularity=20.0),
        movie_payload(12, title="Loud Week", overview="A family wedding goes wrong.", poster_path=None),
    ]
    return httpx.Response(200, json={"total_pages": 1, "results": results})


def broken_catalog(request: httpx.Request) -> httpx.Response:
    return httpx.Response(503, json={"status_message": "maintenance"})


class TestRecommendationsAPI:
    def test_recommendations_address_mode(self, test_client: TestClient, override_recommendation_service):
        """Happy path: results, parsed query and history payload."""
        override_recommendation_service(
            recommendation_service([{"genres": ["Comedy"], "keywords": ["cafe"]}], catalog_handler)
        )

        response = test_client.post(
            "/v1/recommendations",
            json={"text": "had a rough week", "mood": "Sad", "moodResponse": "address", "limit": 5},
        )

        assert response.status_code == 200
        data = response.json()
        assert sorted(m["id"] for m in data["results"]) == [10, 11, 12]
        assert data["moodResponse"] == "address"
        assert data["parsed"]["moodResponse"] == "address"
        assert data["parsed"]["ambiguous"] is False
        assert "Comedy" in data["parsed"]["genres"]
        assert data["history"]["mood"] == "Sad"
        assert data["history"]["movieIds"] == [str(m["id"]) for m in data["results"]]
        assert data["history"]["moodResponse"] == "address"

    def test_result_fields(self, test_client: TestClient, override_recommendation_service):
        override_recommendation_service(
            recommendation_service([{"genres": ["Comedy"], "keywords": ["cafe"]}], catalog_handler)
        )

        data = test_client.post("/v1/recommendations", json={"text": "seaside cafe", "mood": "Happy"}).json()
        by_id = {m["id"]: m for m in data["results"]}

        assert by_id[10]["poster"] == "https://img.test/w500/poster10.jpg"
        assert by_id[12]["poster"] is None
        assert by_id[10]["trailer_youtube_id"] == "yt1"
        assert isinstance(by_id[10]["score"], float)

    def test_unknown_mood_response_means_match(self, test_client: TestClient, override_recommendation_service):
        override_recommendation_service(
            recommendation_service([{"genres": ["Comedy"], "keywords": ["cafe"]}], catalog_handler)
        )

        response = test_client.post(
            "/v1/recommendations",
            json={"text": "seaside cafe", "mood": "Happy", "moodResponse": "sideways"},
        )

        assert response.status_code == 200
        assert response.json()["moodResponse"] == "match"

    def test_ambiguous_input(self, test_client: TestClient, override_recommendation_service):
        """Vague input is rejected before discovery."""
        override_recommendation_service(recommendation_service([{"ambiguous": True}], catalog_handler))

        response = test_client.post("/v1/recommendations", json={"text": "ok"})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "AMBIGUOUS"
        assert error["details"]["parsed"]["ambiguous"] is True
        assert error["details"]["parsed"]["genres"] == []

    def test_unparseable_generator_output(self, test_client: TestClient, override_recommendation_service):
        override_recommendation_service(
            recommendation_service([RuntimeError("schema rejected"), "I'd rather not say."], catalog_handler)
        )

        response = test_client.post("/v1/recommendations", json={"text": "something scary", "mood": "Scared"})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "PARSE_ERROR"

    def test_generator_down_uses_heuristics(self, test_client: TestClient, override_recommendation_service):
        override_recommendation_service(
            recommendation_service([RuntimeError("down"), RuntimeError("still down")], catalog_handler)
        )

        response = test_client.post(
            "/v1/recommendations",
            json={"text": "a short comedy from the 90s", "mood": "Happy"},
        )

        assert response.status_code == 200
        parsed = response.json()["parsed"]
        assert parsed["runtime_max"] == 90
        assert parsed["era"] == {"from": 1990, "to": 1999}

    def test_catalog_outage_is_empty_success(self, test_client: TestClient, override_recommendation_service):
        override_recommendation_service(
            recommendation_service([{"genres": ["Comedy"], "keywords": ["cafe"]}], broken_catalog)
        )

        response = test_client.post("/v1/recommendations", json={"text": "seaside cafe", "mood": "Happy"})

        assert response.status_code == 200
        assert response.json()["results"] == []

    def test_limit_validation(self, test_client: TestClient):
        response = test_client.post("/v1/recommendations", json={"text": "anything", "limit": 0})
        assert response.status_code == 422


class TestParseAPI:
    def test_parse(self, test_client: TestClient, override_recommendation_service):
        override_recommendation_service(
            recommendation_service(
                [{"genres": ["sci-fi"], "keywords": ["robots"], "tempo": "fast", "language": "ja"}],
                catalog_handler,
            )
        )

        response = test_client.post("/v1/parse", json={"text": "fast robot anime", "mood": "Excited"})

        assert response.status_code == 200
        parsed = response.json()["parsed"]
        assert parsed["genres"] == ["Science Fiction"]
        assert "robots" in parsed["keywords"]
        assert parsed["tempo"] == "fast"
        assert parsed["language"] == "ja"
        assert parsed["moodResponse"] == "match"

    def test_parse_ambiguous(self, test_client: TestClient, override_recommendation_service):
        override_recommendation_service(recommendation_service([{"ambiguous": True}], catalog_handler))

        response = test_client.post("/v1/parse", json={"text": "hmm"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "AMBIGUOUS"

    def test_parse_error(self, test_client: TestClient, override_recommendation_service):
        override_recommendation_service(
            recommendation_service([RuntimeError("down"), "not json"], catalog_handler)
        )

        response = test_client.post("/v1/parse", json={"text": "a heist"})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "PARSE_ERROR"
