"""Unit tests for application settings."""

from pathlib import Path

from tours_api.core.config import Settings


def test_password_placeholder_substituted():
    settings = Settings(
        _env_file=None,
        database_url="postgresql+asyncpg://tours:<PASSWORD>@db:5432/tours",
        database_password="s3cret",
    )

    assert settings.resolved_database_url == "postgresql+asyncpg://tours:s3cret@db:5432/tours"


def test_url_without_password_is_unchanged():
    settings = Settings(_env_file=None, database_url="sqlite+aiosqlite:///tours.db")

    assert settings.resolved_database_url == "sqlite+aiosqlite:///tours.db"


def test_database_env_alias(monkeypatch):
    """Test the URL can also come from the DATABASE variable."""
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("DATABASE", "postgresql+asyncpg://u:<PASSWORD>@h/db")
    monkeypatch.setenv("DATABASE_PASSWORD", "pw")

    settings = Settings(_env_file=None)

    assert settings.resolved_database_url == "postgresql+asyncpg://u:pw@h/db"


def test_cors_origins_from_env(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")

    settings = Settings(_env_file=None)

    assert settings.cors_origins == ["http://a.test", "http://b.test"]


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.port == 3000
    assert settings.debug is (settings.environment == "development")
    assert isinstance(settings.seed_data_path, Path)
    assert settings.seed_data_path.name == "tours-simple.json"
