"""
Access and refresh token handling.

Tokens are HS256 JWTs built from one claim set. Access and refresh tokens
are signed with different secrets. The latest pair per user is written to
the store so that a new login overwrites the previous session; validation
itself only checks signature, algorithm and expiry.
"""

from datetime import datetime
from typing import Callable, Tuple

import jwt

from .config import TokenSettings
from .errors import ConfigError, ExpiredError, InvalidSignatureError
from .models import Role, SecretKind, TokenClaims, utcnow
from .utils import setup_logger


class TokenService:
    """Issues, persists and validates token pairs."""

    def __init__(
        self,
        settings: TokenSettings,
        db=None,
        clock: Callable[[], datetime] = utcnow,
        log_dir=None,
    ):
        self.settings = settings
        self.db = db
        self.clock = clock
        self.logger = setup_logger("tokens", log_dir)

    def _secret(self, kind: SecretKind) -> str:
        if kind is SecretKind.ACCESS:
            secret, name = self.settings.secret_key, "JWT_SECRET_KEY"
        elif kind is SecretKind.REFRESH:
            secret, name = self.settings.refresh_secret_key, "JWT_REFRESH_SECRET_KEY"
        else:
            raise ValueError(f"Unhandled secret kind: {kind!r}")
        if not secret:
            raise ConfigError(f"{name} is not set")
        return secret

    def issue(
        self,
        user_id: str,
        first_name: str,
        last_name: str,
        email: str,
        role: Role,
    ) -> Tuple[str, str]:
        """
        Build a signed (access, refresh) token pair.

        Raises:
            ConfigError: If either signing secret is unset.
        """
        access_secret = self._secret(SecretKind.ACCESS)
        refresh_secret = self._secret(SecretKind.REFRESH)

        now = self.clock()
        claims = TokenClaims(
            user_id=user_id,
            first_name=first_name,
            last_name=last_name,
            email=email,
            role=Role(role),
            issuer=self.settings.issuer,
            issued_at=now,
            expires_at=now + self.settings.access_ttl,
        )
        access_token = jwt.encode(
            claims.to_payload(), access_secret, algorithm=self.settings.algorithm
        )

        claims.expires_at = now + self.settings.refresh_ttl
        refresh_token = jwt.encode(
            claims.to_payload(), refresh_secret, algorithm=self.settings.algorithm
        )

        return access_token, refresh_token

    def persist(self, user_id: str, access_token: str, refresh_token: str) -> bool:
        """
        Overwrite the user's stored token pair.

        Passing empty strings clears the stored session (logout). Tokens
        already held by a client stay valid until they expire.
        """
        if self.db is None:
            raise ConfigError("Token service has no store to persist to")
        updated = self.db.update_tokens(user_id, access_token, refresh_token)
        if not updated:
            self.logger.warning(f"Token update matched no user: user_id={user_id}")
        return updated

    def validate(self, token: str, kind: SecretKind = SecretKind.ACCESS) -> TokenClaims:
        """
        Verify a token against the access or refresh secret.

        Raises:
            ConfigError: If the matching secret is unset.
            ExpiredError: If the token has expired.
            InvalidSignatureError: For any other verification failure.
        """
        secret = self._secret(kind)
        label = "refresh token" if kind is SecretKind.REFRESH else "token"

        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self.settings.algorithm],
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise ExpiredError(f"{label} expired")
        except jwt.InvalidTokenError as e:
            raise InvalidSignatureError(f"invalid {label}: {e}")

        try:
            claims = TokenClaims.from_payload(payload)
        except ValueError as e:
            raise InvalidSignatureError(f"invalid {label} claims: {e}")

        if claims.expires_at is None or claims.expires_at <= self.clock():
            raise ExpiredError(f"{label} expired")

        return claims
