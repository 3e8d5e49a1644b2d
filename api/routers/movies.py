"""
Movie endpoints.

Catalog browsing, search, movie creation and the admin review flow.
"""

import logging
import re

from fastapi import APIRouter, Depends, Request, status

from api.auth import authenticate, require_admin
from api.dependencies import get_config, get_db, get_llm_client, get_ranking_vocabulary
from api.exceptions import ConflictError, NotFoundError, ValidationError
from api.schemas.common import DataResponse
from api.schemas.movie import AdminReviewRequest, AdminReviewResponse, Movie, MovieCreate
from movie_catalog.config import Config
from movie_catalog.database import DatabaseManager
from movie_catalog.errors import DuplicateKeyError
from movie_catalog.llm import LLMClient
from movie_catalog.models import Identity, Ranking
from movie_catalog.ranking import RankingVocabulary, classify_review

router = APIRouter()
logger = logging.getLogger("api.movies")


@router.post("/addmovie", status_code=status.HTTP_201_CREATED)
def add_movie(
    request: MovieCreate,
    identity: Identity = Depends(authenticate),
    db: DatabaseManager = Depends(get_db),
):
    """
    Add a movie to the catalog. IMDb IDs are unique.
    """
    if db.movie_exists(request.imdb_id):
        raise ConflictError(f"Movie {request.imdb_id} already exists")

    try:
        movie_id = db.insert_movie(request.model_dump())
    except DuplicateKeyError:
        raise ConflictError(f"Movie {request.imdb_id} already exists")

    logger.info(f"Movie added: imdb_id={request.imdb_id} by user_id={identity.user_id}")
    return {"data": {"id": movie_id, "imdb_id": request.imdb_id}}


@router.get("/movies", response_model=DataResponse[Movie])
def list_movies(
    identity: Identity = Depends(authenticate),
    db: DatabaseManager = Depends(get_db),
):
    """
    List every movie in the catalog.
    """
    return {"data": db.list_movies()}


@router.get("/movie/{imdb_id}")
def get_movie(
    imdb_id: str,
    identity: Identity = Depends(authenticate),
    db: DatabaseManager = Depends(get_db),
):
    """
    Get a movie by its IMDb ID.
    """
    movie = db.get_movie(imdb_id)
    if not movie:
        raise NotFoundError("Movie", imdb_id)
    return {"data": Movie(**movie)}


@router.get("/searchmovies", response_model=DataResponse[Movie])
def search_movies(
    request: Request,
    identity: Identity = Depends(authenticate),
    db: DatabaseManager = Depends(get_db),
):
    """
    Search movies by arbitrary fields.

    Each query parameter is matched as a case-insensitive regular
    expression against the field of the same name, e.g.
    ``?title=dark&genres.genre_name=crime``.
    """
    criteria = {}
    for key, value in request.query_params.multi_items():
        criteria.setdefault(key, value)

    for key, pattern in criteria.items():
        try:
            re.compile(pattern)
        except re.error as e:
            raise ValidationError(
                f"Invalid search pattern for {key}", details={"pattern": pattern, "reason": str(e)}
            )

    return {"data": db.search_movies(criteria)}


@router.patch("/movie/review/{imdb_id}")
def update_admin_review(
    imdb_id: str,
    request: AdminReviewRequest,
    identity: Identity = Depends(require_admin),
    db: DatabaseManager = Depends(get_db),
    llm: LLMClient = Depends(get_llm_client),
    vocabulary: RankingVocabulary = Depends(get_ranking_vocabulary),
    config: Config = Depends(get_config),
):
    """
    Store an admin review and derive the movie's ranking from it.

    The review text is classified by the language model against the
    ranking vocabulary; the review and resulting ranking are written in
    one update.
    """
    if not db.movie_exists(imdb_id):
        raise NotFoundError("Movie", imdb_id)

    result = classify_review(
        request.admin_review,
        vocabulary,
        llm,
        config.base_prompt_template,
        timeout=config.review_timeout,
    )

    ranking = Ranking(result.ranking_name, result.ranking_value)
    if not db.update_movie_review(imdb_id, request.admin_review, ranking):
        raise NotFoundError("Movie", imdb_id)

    logger.info(
        f"Admin review stored: imdb_id={imdb_id} "
        f"ranking={result.ranking_name}({result.ranking_value})"
    )
    return {"data": AdminReviewResponse(**result.to_dict())}
