"""
Pytest configuration and fixtures.
"""
import os

# Credentials must exist before the application module is imported
os.environ.setdefault("TMDB_API_KEY", "test-tmdb-key")
os.environ.setdefault("LLM_API_KEY", "test-llm-key")
os.environ.setdefault("ENABLE_PROMETHEUS", "false")

import random  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from cinemood.api.dependencies import (  # noqa: E402
    get_movie_details_service,
    get_recommendation_service,
)
from cinemood.main import app  # noqa: E402
from cinemood.models.schemas import CandidateMovie  # noqa: E402
from tests.fakes import FakeGenerator  # noqa: E402


@pytest.fixture
def rng():
    """Seeded random source."""
    return random.Random(1234)


@pytest.fixture
def fake_generator():
    return FakeGenerator()


@pytest.fixture
def sample_candidates():
    """Three distinct catalog entries."""
    return [
        CandidateMovie(
            id=1,
            title="Laugh Riot",
            overview="A funny road trip comedy about two friends.",
            popularity=120.0,
            vote_average=7.2,
            release_date="2004-06-01",
            poster_path="/laugh.jpg",
            original_language="en",
        ),
        CandidateMovie(
            id=2,
            title="Quiet Harbor",
            overview="A quiet drama about a fisherman and his daughter.",
            popularity=15.0,
            vote_average=8.1,
            release_date="1998-03-12",
            poster_path="/harbor.jpg",
            original_language="fr",
        ),
        CandidateMovie(
            id=3,
            title="Burn Point",
            overview="An explosion sets off a chase across the city.",
            popularity=300.0,
            vote_average=6.4,
            release_date="2019-11-20",
            poster_path=None,
            original_language="en",
        ),
    ]


@pytest.fixture
def test_client():
    """
    TestClient fixture.
    Tests install their own dependency overrides; they are cleared afterwards.
    """
    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def override_recommendation_service():
    """Install a service instance for the recommendation and parse endpoints."""

    def _install(service):
        app.dependency_overrides[get_recommendation_service] = lambda: service

    return _install


@pytest.fixture
def override_movie_details_service():
    def _install(service):
        app.dependency_overrides[get_movie_details_service] = lambda: service

    return _install
