"""
Integration tests for the movie details endpoint.
"""
import httpx
from fastapi.testclient import TestClient

from cinemood.services.movies import MovieDetailsService
from tests.fakes import catalog_client


def details_handler(request: httpx.Request) -> httpx.Response:
    movie_id = int(request.url.path.rsplit("/", 1)[-1])
    if movie_id == 404:
        return httpx.Response(404, json={"status_code": 34})
    if movie_id == 503:
        return httpx.Response(503, json={})
    return httpx.Response(
        200,
        json={
            "id": movie_id,
            "title": "Quiet Harbor",
            "overview": "A fisherman and his daughter.",
            "poster_path": "/harbor.jpg",
            "vote_average": 8.1,
            "release_date": "1998-03-12",
            "runtime": 97,
            "videos": {
                "results": [
                    {"site": "YouTube", "type": "Teaser", "key": "teaser1"},
                    {"site": "YouTube", "type": "Trailer", "key": "trailer1", "name": "Official Trailer"},
                ]
            },
        },
    )


class TestMoviesAPI:
    def test_get_movie(self, test_client: TestClient, override_movie_details_service):
        override_movie_details_service(
            MovieDetailsService(catalog_client(details_handler), image_base_url="https://img.test/w500")
        )

        response = test_client.get("/v1/movies/7")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == 7
        assert data["title"] == "Quiet Harbor"
        assert data["poster_path"] == "https://img.test/w500/harbor.jpg"
        assert data["trailer_youtube_id"] == "trailer1"
        assert data["runtime"] == 97

    def test_unknown_movie(self, test_client: TestClient, override_movie_details_service):
        override_movie_details_service(MovieDetailsService(catalog_client(details_handler)))

        response = test_client.get("/v1/movies/404")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_catalog_unavailable(self, test_client: TestClient, override_movie_details_service):
        override_movie_details_service(MovieDetailsService(catalog_client(details_handler)))

        response = test_client.get("/v1/movies/503")

        assert response.status_code == 503
        error = response.json()["error"]
        assert error["code"] == "SERVICE_UNAVAILABLE"
        assert error["details"]["service"] == "movie_catalog"

    def test_invalid_id(self, test_client: TestClient):
        assert test_client.get("/v1/movies/0").status_code == 422
        assert test_client.get("/v1/movies/abc").status_code == 422
