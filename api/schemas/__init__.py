"""Pydantic schemas for API request and response validation."""

from api.schemas.common import DataResponse, ErrorResponse, MessageResponse
from api.schemas.genre import Genre
from api.schemas.movie import (
    AdminReviewRequest,
    AdminReviewResponse,
    Movie,
    MovieCreate,
    Ranking,
    RankingInput,
)
from api.schemas.user import (
    LoginResponse,
    UserCreate,
    UserIdResponse,
    UserLogin,
    UserLogout,
    UserResponse,
    UserUpdate,
)

__all__ = [
    # Common
    "DataResponse",
    "ErrorResponse",
    "MessageResponse",
    # Genre
    "Genre",
    # Movie
    "AdminReviewRequest",
    "AdminReviewResponse",
    "Movie",
    "MovieCreate",
    "Ranking",
    "RankingInput",
    # User
    "LoginResponse",
    "UserCreate",
    "UserIdResponse",
    "UserLogin",
    "UserLogout",
    "UserResponse",
    "UserUpdate",
]
