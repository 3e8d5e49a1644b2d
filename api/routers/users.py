"""
User management endpoints.

Handles listing, fetching, updating and deleting users. Users may modify
their own record; admins may modify any record and change roles.
"""

import logging

from fastapi import APIRouter, Depends

from api.auth import authenticate
from api.dependencies import get_db
from api.exceptions import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from api.schemas.common import DataResponse, MessageResponse
from api.schemas.user import UserResponse, UserUpdate
from movie_catalog.database import DatabaseManager
from movie_catalog.errors import DuplicateKeyError
from movie_catalog.models import Identity
from movie_catalog.passwords import hash_password

router = APIRouter()
logger = logging.getLogger("api.users")


@router.get("/users", response_model=DataResponse[UserResponse])
def list_users(
    identity: Identity = Depends(authenticate),
    db: DatabaseManager = Depends(get_db),
):
    """
    List all users.
    """
    return {"data": db.list_users()}


@router.get("/user/{user_id}")
def get_user(
    user_id: str,
    identity: Identity = Depends(authenticate),
    db: DatabaseManager = Depends(get_db),
):
    """
    Get a single user by ID.
    """
    user = db.get_user(user_id)
    if not user:
        raise NotFoundError("User", user_id)
    return {"data": UserResponse(**user)}


@router.put("/user/{user_id}", response_model=MessageResponse)
def update_user(
    user_id: str,
    request: UserUpdate,
    identity: Identity = Depends(authenticate),
    db: DatabaseManager = Depends(get_db),
):
    """
    Partially update a user.

    Only the fields present in the body are changed. Passwords are hashed
    before storage; role changes require ADMIN.
    """
    if not identity.can_manage(user_id):
        logger.warning(f"Update denied: caller={identity.user_id} target={user_id}")
        raise UnauthorizedError()

    fields = request.model_dump(exclude_unset=True, exclude_none=True)
    if not fields:
        raise ValidationError("No fields to update")

    if "role" in fields:
        if not identity.is_admin:
            raise UnauthorizedError("Only admins can change roles")
        fields["role"] = fields["role"].value
    if "password" in fields:
        fields["password"] = hash_password(fields["password"])

    try:
        updated = db.update_user(user_id, fields)
    except DuplicateKeyError:
        raise ConflictError("User with this email already exists")

    if not updated:
        raise NotFoundError("User", user_id)

    logger.info(f"User updated: user_id={user_id} fields={sorted(fields)}")
    return MessageResponse(message="User updated successfully")


@router.delete("/user/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: str,
    identity: Identity = Depends(authenticate),
    db: DatabaseManager = Depends(get_db),
):
    """
    Delete a user.
    """
    if not identity.can_manage(user_id):
        logger.warning(f"Delete denied: caller={identity.user_id} target={user_id}")
        raise UnauthorizedError()

    if not db.delete_user(user_id):
        raise NotFoundError("User", user_id)

    logger.info(f"User deleted: user_id={user_id}")
    return MessageResponse(message="User deleted successfully")
