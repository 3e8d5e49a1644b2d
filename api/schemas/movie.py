"""
Movie-related Pydantic schemas.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from api.schemas.genre import Genre
from movie_catalog.models import NEUTRAL_RANKING_VALUE, NOT_RANKED_NAME, UNRANKED_VALUE


class Ranking(BaseModel):
    """Ranking label and value."""

    ranking_name: str = ""
    ranking_value: int = UNRANKED_VALUE


class RankingInput(BaseModel):
    """Ranking supplied with a new movie. Zero is reserved for unknown labels."""

    ranking_name: str = Field(..., min_length=2, max_length=100)
    ranking_value: int = Field(..., ge=1)


def _not_ranked() -> RankingInput:
    return RankingInput(ranking_name=NOT_RANKED_NAME, ranking_value=NEUTRAL_RANKING_VALUE)


class MovieCreate(BaseModel):
    """Request to add a movie."""

    imdb_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=2, max_length=200)
    poster_url: str = Field(..., min_length=1)
    youtube_id: str = Field(..., min_length=1)
    genres: List[Genre] = Field(..., min_length=1)
    release_year: int = Field(..., ge=1888, le=2100)
    ranking: RankingInput = Field(default_factory=_not_ranked)
    admin_review: str = ""
    description: str = Field(..., min_length=10, max_length=5000)


class Movie(BaseModel):
    """Movie as returned by the API."""

    id: Optional[str] = None
    imdb_id: str = ""
    title: str = ""
    poster_url: str = ""
    youtube_id: str = ""
    genres: List[Genre] = []
    release_year: Optional[int] = None
    ranking: Ranking = Field(default_factory=Ranking)
    admin_review: str = ""
    description: str = ""


class AdminReviewRequest(BaseModel):
    """Admin review text to classify."""

    admin_review: str = Field(..., min_length=1)


class AdminReviewResponse(BaseModel):
    """Classification stored for a movie."""

    ranking_name: str
    ranking_value: int
    admin_review: str
