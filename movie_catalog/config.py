"""
Configuration management for the movie catalog.

Loads configuration from environment variables and provides
a centralized Config dataclass for all settings.
"""

import os
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .errors import ConfigError

DEFAULT_ORIGIN = "http://localhost:5173"
DEFAULT_RECOMMENDATION_LIMIT = 5


@dataclass(frozen=True)
class TokenSettings:
    """Signing settings handed to the token service."""

    secret_key: str = ""
    refresh_secret_key: str = ""
    algorithm: str = "HS256"
    issuer: str = "movie-catalog"
    access_ttl: timedelta = timedelta(hours=24)
    refresh_ttl: timedelta = timedelta(days=7)


@dataclass
class Config:
    """Centralized configuration from environment variables."""

    # Database
    mongo_uri: str
    mongo_db_name: str

    # JWT settings
    jwt_secret_key: str = ""
    jwt_refresh_secret_key: str = ""

    # OpenRouter (OpenAI-compatible) text generation
    openrouter_api_key: str = ""
    openrouter_model_name: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"

    # Prompt templates
    base_prompt_template: str = ""
    recommendation_prompt_template: str = ""

    recommended_movie_limit: int = DEFAULT_RECOMMENDATION_LIMIT
    allow_admin_registration: bool = False
    cookie_secure: bool = True

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 5000
    api_debug: bool = False

    # Timeouts (seconds)
    store_timeout: float = 100.0
    token_store_timeout: float = 10.0
    review_timeout: float = 30.0
    recommendation_timeout: float = 60.0

    # Paths
    log_dir: Path = field(default_factory=lambda: Path.cwd() / "logs")

    # CORS settings
    allowed_origins: List[str] = field(default_factory=lambda: [DEFAULT_ORIGIN])

    @classmethod
    def from_env(cls, env_path: Optional[str] = None) -> "Config":
        """
        Load configuration from environment variables.

        Args:
            env_path: Optional path to .env file. If not provided,
                     looks for .env in the current directory.

        Returns:
            Config instance with loaded values.

        Raises:
            ConfigError: If required environment variables are missing.
        """
        if env_path:
            load_dotenv(env_path)
        else:
            load_dotenv()

        # Required variables
        mongo_uri = os.getenv("MONGO_URI", "")
        mongo_db_name = os.getenv("MONGO_DB_NAME", "")

        if not mongo_uri:
            raise ConfigError("MONGO_URI environment variable is required")
        if not mongo_db_name:
            raise ConfigError("MONGO_DB_NAME environment variable is required")

        return cls(
            mongo_uri=mongo_uri,
            mongo_db_name=mongo_db_name,
            jwt_secret_key=os.getenv("JWT_SECRET_KEY", ""),
            jwt_refresh_secret_key=os.getenv("JWT_REFRESH_SECRET_KEY", ""),
            openrouter_api_key=os.getenv("OPENROUTER_API_KEY", ""),
            openrouter_model_name=os.getenv("OPENROUTER_MODEL_NAME", ""),
            openrouter_base_url=os.getenv(
                "OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1"
            ),
            base_prompt_template=os.getenv("BASE_PROMPT_TEMPLATE", ""),
            recommendation_prompt_template=os.getenv("RECOMMENDATION_PROMPT_TEMPLATE", ""),
            recommended_movie_limit=parse_limit(os.getenv("RECOMMENDED_MOVIE_LIMIT")),
            allow_admin_registration=_env_flag("ALLOW_ADMIN_REGISTRATION", False),
            cookie_secure=_env_flag("COOKIE_SECURE", True),
            api_host=os.getenv("API_HOST", "0.0.0.0"),
            api_port=int(os.getenv("API_PORT", "5000")),
            api_debug=_env_flag("API_DEBUG", False),
            log_dir=Path(os.getenv("LOG_DIR", str(Path.cwd() / "logs"))),
            allowed_origins=parse_origins(os.getenv("ALLOWED_ORIGINS")),
        )

    def token_settings(self) -> TokenSettings:
        """Build the signing settings for the token service."""
        return TokenSettings(
            secret_key=self.jwt_secret_key,
            refresh_secret_key=self.jwt_refresh_secret_key,
        )


def parse_limit(value: Optional[str], default: int = DEFAULT_RECOMMENDATION_LIMIT) -> int:
    """Parse a positive integer limit, falling back to the default."""
    if not value:
        return default
    try:
        parsed = int(value.strip())
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def parse_origins(value: Optional[str]) -> List[str]:
    """Split a comma-separated origin list, defaulting to the local frontend."""
    origins = [o.strip() for o in (value or "").split(",") if o.strip()]
    return origins or [DEFAULT_ORIGIN]


def allowed_origins_from_env() -> List[str]:
    """Read ALLOWED_ORIGINS without requiring the rest of the configuration."""
    load_dotenv()
    return parse_origins(os.getenv("ALLOWED_ORIGINS"))
