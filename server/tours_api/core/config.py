"""Configuration settings for the tours API."""

from pathlib import Path
from typing import Annotated

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode

PASSWORD_PLACEHOLDER = "<PASSWORD>"

DEFAULT_SEED_DATA_PATH = Path(__file__).resolve().parents[2] / "dev-data" / "tours-simple.json"


class Settings(BaseSettings):
    """Application settings with Pydantic validation."""

    # Database settings
    database_url: str = Field(
        default="postgresql+asyncpg://tours:<PASSWORD>@localhost:5432/tours",
        validation_alias=AliasChoices("database_url", "database"),
        description="Async database URL, may contain a <PASSWORD> placeholder"
    )

    database_password: str | None = Field(
        default=None,
        description="Credential substituted for <PASSWORD> in the database URL"
    )

    # Environment settings
    environment: str = Field(
        default="development",
        description="Application environment"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Application log level"
    )

    # CORS settings
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default=["http://localhost:3000", "http://localhost:8001"],
        description="Allowed CORS origins"
    )

    # Server settings
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=3000, description="Server port")

    # Observability settings
    otlp_endpoint: str | None = Field(
        default=None,
        description="OTLP collector endpoint; exporting is disabled when unset"
    )

    # Seed script settings
    seed_data_path: Path = Field(
        default=DEFAULT_SEED_DATA_PATH,
        description="JSON file read by the seed script"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        valid_environments = ["development", "test", "staging", "production"]
        if v.lower() not in valid_environments:
            raise ValueError(f"Environment must be one of: {valid_environments}")
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level value."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Parse CORS origins from string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    @property
    def resolved_database_url(self) -> str:
        """Database URL with the password placeholder filled in."""
        if self.database_password is None:
            return self.database_url
        return self.database_url.replace(PASSWORD_PLACEHOLDER, self.database_password)

    @property
    def debug(self) -> bool:
        """Return True if in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Return True if in production mode."""
        return self.environment == "production"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


# Global settings instance
settings = Settings()
