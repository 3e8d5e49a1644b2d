"""
Configuration loading tests.
"""

import pytest

from movie_catalog.config import (
    DEFAULT_ORIGIN,
    Config,
    allowed_origins_from_env,
    parse_limit,
    parse_origins,
)
from movie_catalog.errors import ConfigError

REQUIRED = {"MONGO_URI": "mongodb://localhost:27017", "MONGO_DB_NAME": "catalog"}


@pytest.fixture
def env(monkeypatch):
    """Environment with the catalog variables unset; restored after the test."""
    for name in (
        "MONGO_URI", "MONGO_DB_NAME", "ALLOWED_ORIGINS", "RECOMMENDED_MOVIE_LIMIT",
        "ALLOW_ADMIN_REGISTRATION", "COOKIE_SECURE", "JWT_SECRET_KEY",
    ):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)

    def set_env(**values):
        for key, value in values.items():
            monkeypatch.setenv(key, value)

    return set_env


class TestFromEnv:

    def test_required_store_settings(self, env):
        with pytest.raises(ConfigError, match="MONGO_URI"):
            Config.from_env()

        env(MONGO_URI="mongodb://localhost:27017")
        with pytest.raises(ConfigError, match="MONGO_DB_NAME"):
            Config.from_env()

    def test_defaults(self, env):
        env(**REQUIRED)
        config = Config.from_env()

        assert config.allowed_origins == [DEFAULT_ORIGIN]
        assert config.recommended_movie_limit == 5
        assert config.allow_admin_registration is False
        assert config.cookie_secure is True
        assert config.openrouter_base_url == "https://openrouter.ai/api/v1"
        assert config.jwt_secret_key == ""

    def test_overrides(self, env):
        env(
            ALLOWED_ORIGINS=" https://a.example.com ,https://b.example.com,",
            RECOMMENDED_MOVIE_LIMIT="8",
            ALLOW_ADMIN_REGISTRATION="true",
            JWT_SECRET_KEY="s3cret",
            **REQUIRED,
        )
        config = Config.from_env()

        assert config.allowed_origins == ["https://a.example.com", "https://b.example.com"]
        assert config.recommended_movie_limit == 8
        assert config.allow_admin_registration is True
        assert config.token_settings().secret_key == "s3cret"

    def test_dotenv_file(self, env, tmp_path):
        env_file = tmp_path / "custom.env"
        env_file.write_text("MONGO_URI=mongodb://db:27017\nMONGO_DB_NAME=fromfile\n")

        config = Config.from_env(str(env_file))

        assert config.mongo_db_name == "fromfile"

    def test_allowed_origins_without_store_settings(self, env):
        env(ALLOWED_ORIGINS="https://app.example.com")
        assert allowed_origins_from_env() == ["https://app.example.com"]


@pytest.mark.parametrize("value,expected", [
    (None, 5),
    ("", 5),
    ("12", 12),
    ("0", 5),
    ("-3", 5),
    ("many", 5),
])
def test_parse_limit(value, expected):
    assert parse_limit(value) == expected


def test_parse_origins_empty():
    assert parse_origins(" , ") == [DEFAULT_ORIGIN]
