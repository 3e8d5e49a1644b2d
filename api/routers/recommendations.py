"""
Recommendation endpoints.

Both use the caller's favourite genres: one reads the catalog, the other
asks the language model.
"""

import logging

from fastapi import APIRouter, Depends

from api.auth import authenticate
from api.dependencies import get_config, get_db, get_llm_client
from api.schemas.common import DataResponse
from api.schemas.movie import Movie
from movie_catalog.config import Config
from movie_catalog.database import DatabaseManager
from movie_catalog.llm import LLMClient
from movie_catalog.models import Identity
from movie_catalog.recommendations import recommend_from_catalog, recommend_with_ai

router = APIRouter()
logger = logging.getLogger("api.recommendations")


@router.get("/recommendatedmovies", response_model=DataResponse[Movie])
def get_recommended_movies(
    identity: Identity = Depends(authenticate),
    db: DatabaseManager = Depends(get_db),
    config: Config = Depends(get_config),
):
    """
    Movies in the caller's favourite genres, best ranked first.
    """
    movies = recommend_from_catalog(db, identity.user_id, config.recommended_movie_limit)
    return {"data": movies}


@router.get("/recommendations-ai")
def get_ai_recommendations(
    identity: Identity = Depends(authenticate),
    db: DatabaseManager = Depends(get_db),
    llm: LLMClient = Depends(get_llm_client),
    config: Config = Depends(get_config),
):
    """
    Movies suggested by the language model for the caller's favourite genres.

    Suggestions are not catalog entries; each gets a fresh id.
    """
    genres = db.get_favourite_genres(identity.user_id)
    if not genres:
        return {"data": [], "message": "No favorite genres found for user"}

    movies = recommend_with_ai(
        llm,
        genres,
        config.recommendation_prompt_template,
        config.recommended_movie_limit,
        timeout=config.recommendation_timeout,
    )
    return {"data": movies}
