"""
Genre endpoints.
"""

from fastapi import APIRouter, Depends

from api.auth import authenticate
from api.dependencies import get_db
from api.schemas.common import DataResponse
from api.schemas.genre import Genre
from movie_catalog.database import DatabaseManager
from movie_catalog.models import Identity

router = APIRouter()


@router.get("/genres", response_model=DataResponse[Genre])
def list_genres(
    identity: Identity = Depends(authenticate),
    db: DatabaseManager = Depends(get_db),
):
    """
    Get list of all genres.
    """
    return {"data": db.get_genres()}
