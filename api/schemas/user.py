"""
User-related Pydantic schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from movie_catalog.models import Role


class UserCreate(BaseModel):
    """Registration request."""

    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=8)
    role: Role = Role.USER
    favourite_movies_genres: List[str] = Field(default_factory=list)


class UserLogin(BaseModel):
    """Login credentials."""

    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=8)


class UserLogout(BaseModel):
    """Logout request."""

    user_id: str = Field(..., min_length=1)


class UserUpdate(BaseModel):
    """Partial profile update. Unset fields are left unchanged."""

    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = Field(None, min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    password: Optional[str] = Field(None, min_length=8)
    role: Optional[Role] = None
    favourite_movies_genres: Optional[List[str]] = None


class UserResponse(BaseModel):
    """User as returned by the API (no credentials or tokens)."""

    id: Optional[str] = None
    user_id: str
    first_name: str
    last_name: str
    email: str
    role: Role
    favourite_movies_genres: List[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LoginResponse(BaseModel):
    """Login result with the issued token pair."""

    user_id: str
    first_name: str
    last_name: str
    email: str
    role: Role
    access_token: str
    refresh_token: str
    favourite_movies_genres: List[str] = []


class UserIdResponse(BaseModel):
    """Simple response with just user ID."""

    user_id: str
