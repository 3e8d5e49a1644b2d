"""
Genre-related Pydantic schemas.
"""

from pydantic import BaseModel, Field


class Genre(BaseModel):
    """Genre reference."""

    genre_id: str = Field(..., min_length=1)
    genre_name: str = Field(..., min_length=2, max_length=100)
