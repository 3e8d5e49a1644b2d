"""
Data models for the movie catalog.

Provides dataclasses and enumerations shared by the store, the token
service and the API layer.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

NEUTRAL_RANKING_VALUE = 999
NEUTRAL_RANKING_NAME = "Neutral"
NOT_RANKED_NAME = "Not_Ranked"
UNRANKED_VALUE = 0


class Role(str, Enum):
    """User roles."""

    ADMIN = "ADMIN"
    USER = "USER"
    GUEST = "GUEST"


class SecretKind(str, Enum):
    """Which signing secret a token belongs to."""

    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class Ranking:
    """One entry of the ranking vocabulary."""

    ranking_name: str
    ranking_value: int

    @property
    def is_neutral(self) -> bool:
        return self.ranking_value == NEUTRAL_RANKING_VALUE

    def to_dict(self) -> dict:
        return {"ranking_name": self.ranking_name, "ranking_value": self.ranking_value}

    @classmethod
    def from_document(cls, doc: dict) -> "Ranking":
        return cls(
            ranking_name=doc.get("ranking_name", ""),
            ranking_value=int(doc.get("ranking_value", UNRANKED_VALUE)),
        )


@dataclass
class TokenClaims:
    """Claims carried by access and refresh tokens."""

    user_id: str
    first_name: str
    last_name: str
    email: str
    role: Role
    issuer: str = ""
    issued_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    def to_payload(self) -> dict:
        """Convert to a JWT payload."""
        payload = {
            "user_id": self.user_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "role": self.role.value,
            "iss": self.issuer,
        }
        if self.issued_at:
            payload["iat"] = self.issued_at
        if self.expires_at:
            payload["exp"] = self.expires_at
        return payload

    @classmethod
    def from_payload(cls, payload: dict) -> "TokenClaims":
        """Create TokenClaims from a decoded JWT payload."""
        return cls(
            user_id=payload.get("user_id", ""),
            first_name=payload.get("first_name", ""),
            last_name=payload.get("last_name", ""),
            email=payload.get("email", ""),
            role=Role(payload.get("role", Role.GUEST.value)),
            issuer=payload.get("iss", ""),
            issued_at=_from_timestamp(payload.get("iat")),
            expires_at=_from_timestamp(payload.get("exp")),
        )


@dataclass(frozen=True)
class Identity:
    """The authenticated caller of a request."""

    user_id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return is_admin_role(self.role)

    def can_manage(self, user_id: str) -> bool:
        """Whether this caller may modify the given user's record."""
        if self.role is Role.ADMIN:
            return True
        if self.role is Role.USER or self.role is Role.GUEST:
            return self.user_id == user_id
        raise ValueError(f"Unhandled role: {self.role!r}")


def is_admin_role(role: Role) -> bool:
    """Exhaustive role check for admin-only operations."""
    if role is Role.ADMIN:
        return True
    if role is Role.USER or role is Role.GUEST:
        return False
    raise ValueError(f"Unhandled role: {role!r}")


@dataclass
class ReviewResult:
    """Outcome of classifying an admin review."""

    ranking_name: str
    ranking_value: int
    admin_review: str = ""

    def to_dict(self) -> dict:
        return {
            "ranking_name": self.ranking_name,
            "ranking_value": self.ranking_value,
            "admin_review": self.admin_review,
        }


@dataclass
class StoreStatus:
    """Document counts per collection."""

    users: int = 0
    movies: int = 0
    genres: int = 0
    rankings: int = 0

    def to_dict(self) -> dict:
        return {
            "users": self.users,
            "movies": self.movies,
            "genres": self.genres,
            "rankings": self.rankings,
        }


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def _from_timestamp(value) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromtimestamp(int(value), tz=timezone.utc)
