"""
Movie Catalog - core services for the movie catalog API.

This package provides:
- Configuration loading from the environment
- MongoDB access for users, movies, genres and rankings
- Access/refresh token issuing and validation
- Review ranking and genre recommendations backed by a language model
- An operator CLI for setup and maintenance
"""

from .config import Config, TokenSettings
from .database import DatabaseManager
from .errors import CatalogError
from .llm import LLMClient
from .models import Identity, Ranking, Role, TokenClaims
from .ranking import RankingVocabulary, classify_review
from .recommendations import recommend_from_catalog, recommend_with_ai
from .tokens import TokenService

__version__ = "1.0.0"
__all__ = [
    "Config",
    "TokenSettings",
    "DatabaseManager",
    "CatalogError",
    "LLMClient",
    "Identity",
    "Ranking",
    "Role",
    "TokenClaims",
    "RankingVocabulary",
    "classify_review",
    "recommend_from_catalog",
    "recommend_with_ai",
    "TokenService",
]
