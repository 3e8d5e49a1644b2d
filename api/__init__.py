"""
Movie Catalog REST API.

This module provides a FastAPI-based REST API for the movie catalog,
including public session endpoints and token-protected endpoints for
users, movies, admin reviews and recommendations.
"""

from api.main import app

__all__ = ["app"]
