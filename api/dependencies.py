"""
Dependency injection for the API.

Provides dependencies for database access, configuration and the
process-wide services built from them.
"""

from functools import lru_cache

from movie_catalog.config import Config
from movie_catalog.database import DatabaseManager
from movie_catalog.llm import LLMClient
from movie_catalog.ranking import RankingVocabulary
from movie_catalog.tokens import TokenService


@lru_cache()
def get_config() -> Config:
    """Get cached configuration instance."""
    return Config.from_env()


@lru_cache()
def get_db() -> DatabaseManager:
    """Get cached DatabaseManager instance."""
    config = get_config()
    return DatabaseManager(config)


@lru_cache()
def get_token_service() -> TokenService:
    """Get cached TokenService instance."""
    config = get_config()
    return TokenService(config.token_settings(), get_db(), log_dir=config.log_dir)


@lru_cache()
def get_llm_client() -> LLMClient:
    """Get cached LLMClient instance."""
    config = get_config()
    return LLMClient(config)


@lru_cache()
def get_ranking_vocabulary() -> RankingVocabulary:
    """Load the ranking vocabulary once and share it."""
    return RankingVocabulary.load(get_db())


def clear_caches() -> None:
    """Drop every cached dependency (used by tests and reloads)."""
    for dependency in (
        get_config,
        get_db,
        get_token_service,
        get_llm_client,
        get_ranking_vocabulary,
    ):
        dependency.cache_clear()
