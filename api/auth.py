"""
Authentication dependencies.

Protected routes depend on ``authenticate``, which resolves the caller's
``Identity`` once per request and hands it to the handler as a parameter.
Admin-only routes depend on ``require_admin`` instead.
"""

import logging

from fastapi import Depends, Request

from api.dependencies import get_token_service
from api.exceptions import UnauthorizedError
from api.logging_config import set_user_id
from movie_catalog.errors import ConfigError, ContextMissingError, TokenError
from movie_catalog.models import Identity, SecretKind
from movie_catalog.tokens import TokenService

logger = logging.getLogger("api.auth")

ACCESS_COOKIE = "access_token"
REFRESH_COOKIE = "refresh_token"
BEARER_PREFIX = "Bearer "


def extract_token(request: Request) -> str:
    """
    Read the access token from the cookie, else the Authorization header.

    Returns an empty string when neither is present.
    """
    cookie_token = request.cookies.get(ACCESS_COOKIE)
    if cookie_token:
        return cookie_token

    header = request.headers.get("Authorization", "")
    if len(header) > len(BEARER_PREFIX) and header.startswith(BEARER_PREFIX):
        return header[len(BEARER_PREFIX):]
    return header


async def authenticate(
    request: Request,
    tokens: TokenService = Depends(get_token_service),
) -> Identity:
    """
    Validate the caller's access token and return their identity.

    Raises:
        UnauthorizedError: If the token is missing or fails validation.
    """
    token = extract_token(request)
    if not token:
        raise UnauthorizedError()

    try:
        claims = tokens.validate(token, SecretKind.ACCESS)
    except (TokenError, ConfigError) as e:
        logger.warning(f"Rejected token on {request.url.path}: {e.message}")
        raise UnauthorizedError()

    identity = Identity(user_id=claims.user_id, role=claims.role)
    request.state.identity = identity
    set_user_id(identity.user_id)
    return identity


async def require_admin(identity: Identity = Depends(authenticate)) -> Identity:
    """Allow only ADMIN callers."""
    if not identity.is_admin:
        raise UnauthorizedError()
    return identity


def identity_from_request(request: Request) -> Identity:
    """
    Read the identity recorded by ``authenticate``.

    Raises:
        ContextMissingError: If authentication has not run for this request.
    """
    identity = getattr(request.state, "identity", None)
    if identity is None:
        raise ContextMissingError("identity not found in request state")
    return identity
