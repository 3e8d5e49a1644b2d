"""
Shared fixtures for movie catalog tests.

Provides mock database, mock LLM client, token service and sample data.
"""

import re
from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from movie_catalog.config import Config
from movie_catalog.database import USER_PRIVATE_FIELDS, new_object_id
from movie_catalog.errors import DuplicateKeyError, StoreError, UpstreamError
from movie_catalog.models import Ranking, Role, StoreStatus
from movie_catalog.passwords import hash_password
from movie_catalog.ranking import DEFAULT_RANKINGS, RankingVocabulary
from movie_catalog.tokens import TokenService

ACCESS_SECRET = "test-access-secret"
REFRESH_SECRET = "test-refresh-secret"
TEST_PASSWORD = "correct-horse-battery"
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)


# =============================================================================
# SAMPLE DATA
# =============================================================================

def create_sample_movie(
    imdb_id: str,
    title: str,
    genres: List[str],
    ranking_value: int = 999,
    ranking_name: str = "Not_Ranked",
    release_year: int = 2000,
) -> dict:
    """Create a sample movie document for testing."""
    return {
        "imdb_id": imdb_id,
        "title": title,
        "poster_url": f"https://img.example.com/{imdb_id}.jpg",
        "youtube_id": f"yt-{imdb_id}",
        "genres": [{"genre_id": str(i), "genre_name": g} for i, g in enumerate(genres, start=1)],
        "release_year": release_year,
        "ranking": {"ranking_name": ranking_name, "ranking_value": ranking_value},
        "admin_review": "",
        "description": f"This is the description for {title}.",
    }


SAMPLE_MOVIES = [
    create_sample_movie("tt0137523", "Fight Club", ["Drama", "Thriller"], 2, "Good", 1999),
    create_sample_movie("tt1375666", "Inception", ["Action", "Sci-Fi"], 1, "Excellent", 2010),
    create_sample_movie("tt0468569", "The Dark Knight", ["Action", "Crime", "Drama"], 1, "Excellent", 2008),
    create_sample_movie("tt0110912", "Pulp Fiction", ["Crime", "Thriller"], 3, "Okay", 1994),
    create_sample_movie("tt0816692", "Interstellar", ["Drama", "Sci-Fi"], 4, "Bad", 2014),
    create_sample_movie("tt0120737", "The Fellowship of the Ring", ["Fantasy"], 1, "Excellent", 2001),
]

SAMPLE_GENRES = [
    {"genre_id": "1", "genre_name": "Comedy"},
    {"genre_id": "2", "genre_name": "Drama"},
    {"genre_id": "3", "genre_name": "Fantasy"},
]


def create_sample_user(
    email: str,
    role: Role = Role.USER,
    genres: Optional[List[str]] = None,
    first_name: str = "Test",
) -> dict:
    """Create a sample user document with a hashed password."""
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return {
        "user_id": new_object_id(),
        "first_name": first_name,
        "last_name": "User",
        "email": email,
        "password": TEST_PASSWORD_HASH,
        "role": role.value,
        "favourite_movies_genres": genres if genres is not None else ["Drama"],
        "access_token": "",
        "refresh_token": "",
        "created_at": now,
        "updated_at": now,
    }


# =============================================================================
# MOCK DATABASE
# =============================================================================

def _field_values(doc, path: str) -> list:
    """Resolve a dotted path, flattening through lists like MongoDB does."""
    values = [doc]
    for part in path.split("."):
        next_values = []
        for value in values:
            if isinstance(value, list):
                value_items = value
            else:
                value_items = [value]
            for item in value_items:
                if isinstance(item, dict) and part in item:
                    next_values.append(item[part])
        values = next_values
    flat = []
    for value in values:
        flat.extend(value if isinstance(value, list) else [value])
    return flat


class MockDatabaseManager:
    """In-memory mock database for testing."""

    USERS = "users"
    MOVIES = "movies"
    GENRES = "genres"
    RANKINGS = "rankings"

    def __init__(self):
        self.users: Dict[str, dict] = {}
        self.movies: Dict[str, dict] = {}
        self.genres: List[dict] = []
        self.rankings: List[Ranking] = []
        self.indexes_created = False
        self.ping_ok = True
        self.closed = False

    def reset(self):
        """Reset all data."""
        self.users.clear()
        self.movies.clear()
        self.genres.clear()
        self.rankings.clear()
        self.indexes_created = False

    # Setup & Status
    def close(self) -> None:
        self.closed = True

    def ping(self) -> None:
        if not self.ping_ok:
            raise StoreError("Error while pinging the database")

    def ensure_indexes(self) -> List[str]:
        self.indexes_created = True
        return ["email_1", "user_id_1", "imdb_id_1", "genres.genre_name_1"]

    def seed_collection(self, name: str, documents: List[dict]) -> int:
        if name == self.RANKINGS:
            if self.rankings:
                return 0
            self.rankings = [Ranking.from_document(d) for d in documents]
        elif name == self.GENRES:
            if self.genres:
                return 0
            self.genres = [dict(d) for d in documents]
        else:
            raise ValueError(f"Unknown collection: {name}")
        return len(documents)

    def get_status(self) -> StoreStatus:
        return StoreStatus(
            users=len(self.users),
            movies=len(self.movies),
            genres=len(self.genres),
            rankings=len(self.rankings),
        )

    # Users
    def email_exists(self, email: str) -> bool:
        return any(u["email"] == email for u in self.users.values())

    def insert_user(self, user: dict) -> str:
        if self.email_exists(user["email"]):
            raise DuplicateKeyError("Duplicate key while creating user")
        self.users[user["user_id"]] = dict(user, id=new_object_id())
        return user["user_id"]

    def get_user_by_email(self, email: str) -> Optional[dict]:
        for user in self.users.values():
            if user["email"] == email:
                return dict(user)
        return None

    def get_user(self, user_id: str, include_private: bool = False) -> Optional[dict]:
        user = self.users.get(user_id)
        if user is None:
            return None
        if include_private:
            return dict(user)
        return self._public(user)

    def list_users(self) -> List[dict]:
        return [self._public(u) for u in self.users.values()]

    def update_user(self, user_id: str, fields: Dict) -> bool:
        user = self.users.get(user_id)
        if user is None:
            return False
        email = fields.get("email")
        if email and any(
            u["email"] == email for uid, u in self.users.items() if uid != user_id
        ):
            raise DuplicateKeyError("Duplicate key while updating user")
        user.update(fields)
        user["updated_at"] = datetime.now(timezone.utc)
        return True

    def delete_user(self, user_id: str) -> bool:
        return self.users.pop(user_id, None) is not None

    def update_tokens(self, user_id: str, access_token: str, refresh_token: str) -> bool:
        user = self.users.get(user_id)
        if user is None:
            return False
        user["access_token"] = access_token
        user["refresh_token"] = refresh_token
        return True

    def get_favourite_genres(self, user_id: str) -> List[str]:
        user = self.users.get(user_id)
        if not user:
            return []
        return [g for g in user.get("favourite_movies_genres") or [] if g]

    # Movies
    def movie_exists(self, imdb_id: str) -> bool:
        return imdb_id in self.movies

    def insert_movie(self, movie: dict) -> str:
        if movie["imdb_id"] in self.movies:
            raise DuplicateKeyError("Duplicate key while inserting movie")
        movie_id = new_object_id()
        self.movies[movie["imdb_id"]] = dict(movie, id=movie_id)
        return movie_id

    def list_movies(self) -> List[dict]:
        return [dict(m) for m in self.movies.values()]

    def get_movie(self, imdb_id: str) -> Optional[dict]:
        movie = self.movies.get(imdb_id)
        return dict(movie) if movie else None

    def search_movies(self, criteria: Dict[str, str]) -> List[dict]:
        patterns = {
            key: re.compile(value, re.IGNORECASE)
            for key, value in criteria.items()
            if value and not key.startswith("$")
        }
        results = []
        for movie in self.movies.values():
            if all(
                any(isinstance(v, str) and p.search(v) for v in _field_values(movie, key))
                for key, p in patterns.items()
            ):
                results.append(dict(movie))
        return results

    def update_movie_review(self, imdb_id: str, admin_review: str, ranking: Ranking) -> bool:
        movie = self.movies.get(imdb_id)
        if movie is None:
            return False
        movie["admin_review"] = admin_review
        movie["ranking"] = ranking.to_dict()
        return True

    def get_movies_by_genres(self, genres: List[str], limit: int) -> List[dict]:
        wanted = set(genres)
        matches = [
            m for m in self.movies.values()
            if wanted & {g["genre_name"] for g in m.get("genres", [])}
        ]
        matches.sort(key=lambda m: m.get("ranking", {}).get("ranking_value", 0))
        return [dict(m) for m in matches[:limit]]

    # Reference data
    def get_genres(self) -> List[dict]:
        return [dict(g) for g in self.genres]

    def get_rankings(self) -> List[Ranking]:
        return list(self.rankings)

    # Helper methods
    def _public(self, user: dict) -> dict:
        return {k: v for k, v in user.items() if k not in USER_PRIVATE_FIELDS}


# =============================================================================
# MOCK LLM CLIENT
# =============================================================================

class MockLLMClient:
    """Mock LLM client that returns canned responses and records prompts."""

    def __init__(self, responses: Optional[List[str]] = None):
        self.responses = list(responses or [])
        self.prompts: List[str] = []
        self.timeouts: List[float] = []
        self.error: Optional[Exception] = None

    def complete(self, prompt: str, timeout: float) -> str:
        self.prompts.append(prompt)
        self.timeouts.append(timeout)
        if self.error is not None:
            raise self.error
        if not self.responses:
            raise UpstreamError("No canned response left")
        return self.responses.pop(0)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def test_config(tmp_path):
    """Configuration with test secrets and templates."""
    return Config(
        mongo_uri="mongodb://localhost:27017",
        mongo_db_name="movie_catalog_test",
        jwt_secret_key=ACCESS_SECRET,
        jwt_refresh_secret_key=REFRESH_SECRET,
        openrouter_api_key="test-key",
        openrouter_model_name="test/model",
        base_prompt_template="Rate as one of {review_sentiment}. Review: {admin_review}",
        recommendation_prompt_template="Suggest {limit} movies for genres: {genres}",
        recommended_movie_limit=5,
        log_dir=tmp_path,
    )


@pytest.fixture
def mock_db():
    """Provide a fresh mock database for each test."""
    return MockDatabaseManager()


@pytest.fixture
def mock_db_with_data(mock_db):
    """Mock database pre-populated with sample movies, genres and rankings."""
    mock_db.seed_collection("rankings", [r.to_dict() for r in DEFAULT_RANKINGS])
    mock_db.seed_collection("genres", SAMPLE_GENRES)
    for movie in SAMPLE_MOVIES:
        mock_db.insert_movie(movie)
    return mock_db


@pytest.fixture
def mock_llm():
    """Provide mock LLM client."""
    return MockLLMClient()


@pytest.fixture
def token_service(mock_db, test_config):
    """Token service with fixed secrets backed by the mock database."""
    return TokenService(test_config.token_settings(), mock_db, log_dir=test_config.log_dir)


@pytest.fixture
def regular_user(mock_db):
    user = create_sample_user("user@example.com", Role.USER, ["Drama"])
    mock_db.insert_user(user)
    return user


@pytest.fixture
def admin_user(mock_db):
    user = create_sample_user("admin@example.com", Role.ADMIN, ["Fantasy"], first_name="Admin")
    mock_db.insert_user(user)
    return user


def issue_for(tokens: TokenService, user: dict):
    """Issue a token pair for a sample user."""
    return tokens.issue(
        user["user_id"],
        user["first_name"],
        user["last_name"],
        user["email"],
        Role(user["role"]),
    )


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers(token_service, regular_user):
    access, _ = issue_for(token_service, regular_user)
    return bearer(access)


@pytest.fixture
def admin_headers(token_service, admin_user):
    access, _ = issue_for(token_service, admin_user)
    return bearer(access)


@pytest.fixture
def api_client(mock_db_with_data, mock_llm, token_service, test_config):
    """Provide FastAPI test client with mocked dependencies."""
    from api.main import app
    from api import dependencies

    # Clear any cached config/db from previous runs
    dependencies.clear_caches()

    app.dependency_overrides[dependencies.get_db] = lambda: mock_db_with_data
    app.dependency_overrides[dependencies.get_config] = lambda: test_config
    app.dependency_overrides[dependencies.get_token_service] = lambda: token_service
    app.dependency_overrides[dependencies.get_llm_client] = lambda: mock_llm
    app.dependency_overrides[dependencies.get_ranking_vocabulary] = (
        lambda: RankingVocabulary.load(mock_db_with_data)
    )

    with TestClient(app) as client:
        yield client

    # Clean up overrides
    app.dependency_overrides.clear()
