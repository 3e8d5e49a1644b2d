"""
Authentication endpoints.

Handles registration, login, logout and token refresh. These routes are
public; everything else under /api/v1 requires an access token.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response, status

from api.auth import ACCESS_COOKIE, REFRESH_COOKIE
from api.dependencies import get_config, get_db, get_token_service
from api.exceptions import ConflictError, UnauthorizedError, ValidationError
from api.schemas.common import MessageResponse
from api.schemas.user import (
    LoginResponse,
    UserCreate,
    UserIdResponse,
    UserLogin,
    UserLogout,
)
from movie_catalog.config import Config
from movie_catalog.database import DatabaseManager, new_object_id
from movie_catalog.errors import ConfigError, DuplicateKeyError, TokenError
from movie_catalog.models import Role, SecretKind, utcnow
from movie_catalog.passwords import hash_password, verify_password
from movie_catalog.tokens import TokenService

router = APIRouter()
logger = logging.getLogger("api.auth")


def set_token_cookies(
    response: Response,
    tokens: TokenService,
    config: Config,
    access_token: str,
    refresh_token: str,
) -> None:
    """Attach both tokens as HttpOnly cookies."""
    for name, value, ttl in (
        (ACCESS_COOKIE, access_token, tokens.settings.access_ttl),
        (REFRESH_COOKIE, refresh_token, tokens.settings.refresh_ttl),
    ):
        response.set_cookie(
            key=name,
            value=value,
            max_age=int(ttl.total_seconds()),
            path="/",
            httponly=True,
            secure=config.cookie_secure,
            samesite="none" if config.cookie_secure else "lax",
        )


def clear_token_cookies(response: Response, config: Config) -> None:
    """Expire both token cookies."""
    for name in (ACCESS_COOKIE, REFRESH_COOKIE):
        response.delete_cookie(
            key=name,
            path="/",
            httponly=True,
            secure=config.cookie_secure,
            samesite="none" if config.cookie_secure else "lax",
        )


@router.post("/register", response_model=UserIdResponse, status_code=status.HTTP_201_CREATED)
def register(
    request: UserCreate,
    db: DatabaseManager = Depends(get_db),
    config: Config = Depends(get_config),
):
    """
    Register a new user.

    Emails are unique. Self-registration as ADMIN is only allowed when
    ALLOW_ADMIN_REGISTRATION is enabled.
    """
    if request.role is Role.ADMIN and not config.allow_admin_registration:
        raise ValidationError("Registering as ADMIN is not allowed")

    if db.email_exists(request.email):
        logger.warning("Registration rejected: email already in use")
        raise ConflictError("User with this email already exists")

    now = utcnow()
    user = {
        "user_id": new_object_id(),
        "first_name": request.first_name,
        "last_name": request.last_name,
        "email": request.email,
        "password": hash_password(request.password),
        "role": request.role.value,
        "favourite_movies_genres": request.favourite_movies_genres,
        "access_token": "",
        "refresh_token": "",
        "created_at": now,
        "updated_at": now,
    }

    try:
        user_id = db.insert_user(user)
    except DuplicateKeyError:
        raise ConflictError("User with this email already exists")

    logger.info(f"New user registered: user_id={user_id} role={request.role.value}")
    return UserIdResponse(user_id=user_id)


@router.post("/login", response_model=LoginResponse)
def login(
    request: UserLogin,
    response: Response,
    db: DatabaseManager = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
    config: Config = Depends(get_config),
):
    """
    Log in with email and password.

    Issues a new token pair, stores it on the user (replacing any previous
    pair) and returns it both as cookies and in the body.
    """
    user = db.get_user_by_email(request.email)
    if not user or not verify_password(request.password, user.get("password", "")):
        logger.warning("Login failed: invalid email or password")
        raise UnauthorizedError("Invalid email or password")

    role = Role(user.get("role", Role.USER.value))
    access_token, refresh_token = tokens.issue(
        user["user_id"],
        user.get("first_name", ""),
        user.get("last_name", ""),
        user["email"],
        role,
    )
    tokens.persist(user["user_id"], access_token, refresh_token)
    set_token_cookies(response, tokens, config, access_token, refresh_token)

    logger.info(f"User logged in: user_id={user['user_id']}")
    return LoginResponse(
        user_id=user["user_id"],
        first_name=user.get("first_name", ""),
        last_name=user.get("last_name", ""),
        email=user["email"],
        role=role,
        access_token=access_token,
        refresh_token=refresh_token,
        favourite_movies_genres=user.get("favourite_movies_genres") or [],
    )


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: UserLogout,
    response: Response,
    tokens: TokenService = Depends(get_token_service),
    config: Config = Depends(get_config),
):
    """
    Log out a user.

    Clears the stored token pair and the cookies. Tokens a client still
    holds remain valid until they expire.
    """
    tokens.persist(request.user_id, "", "")
    clear_token_cookies(response, config)

    logger.info(f"User logged out: user_id={request.user_id}")
    return MessageResponse(message="Successfully logged out")


@router.post("/refresh-token", response_model=MessageResponse)
def refresh_token(
    request: Request,
    response: Response,
    db: DatabaseManager = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
    config: Config = Depends(get_config),
):
    """
    Exchange the refresh token cookie for a new token pair.
    """
    token = request.cookies.get(REFRESH_COOKIE)
    if not token:
        raise UnauthorizedError("Refresh token not found")

    try:
        claims = tokens.validate(token, SecretKind.REFRESH)
    except (TokenError, ConfigError) as e:
        logger.warning(f"Refresh rejected: {e.message}")
        raise UnauthorizedError("Invalid refresh token")

    user = db.get_user(claims.user_id)
    if not user:
        raise UnauthorizedError("User not found")

    access_token, new_refresh_token = tokens.issue(
        user["user_id"],
        user.get("first_name", ""),
        user.get("last_name", ""),
        user["email"],
        Role(user.get("role", Role.USER.value)),
    )
    tokens.persist(user["user_id"], access_token, new_refresh_token)
    set_token_cookies(response, tokens, config, access_token, new_refresh_token)

    logger.info(f"Tokens refreshed: user_id={user['user_id']}")
    return MessageResponse(message="Tokens refreshed successfully")
