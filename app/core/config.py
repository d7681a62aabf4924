"""
Configuration management for the HRMS leave service
"""
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import Optional, List

APP_ENVIRONMENTS = ("local", "staging", "prod")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
MIN_PROD_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Leave service settings, read from the environment or .env"""

    # Persistence
    DATABASE_URL: str = Field(..., description="Database URL (PostgreSQL in production, SQLite locally)")
    SQL_ECHO: bool = Field(default=False, description="Log every SQL statement (debugging only)")

    # Bearer tokens are issued by the identity provider and verified here
    JWT_SECRET_KEY: str = Field(..., description="Shared secret used to verify bearer tokens")
    JWT_ALGORITHM: str = Field(default="HS256", description="JWT algorithm")
    JWT_EXPIRE_MINUTES: int = Field(default=120, description="Lifetime of locally minted tokens (scripts, tests)")

    # Runtime
    APP_ENV: str = Field(default="local", description="Application environment: local, staging, prod")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level: DEBUG, INFO, WARNING, ERROR")
    ALLOWED_ORIGINS: str = Field(
        default="*",
        description="Comma-separated CORS origins; '*' is accepted outside prod only"
    )
    VERSION: Optional[str] = Field(default=None, description="Build version (git SHA or semver)")

    # Leave engine
    REVIEW_MAX_RETRIES: int = Field(default=3, ge=1, description="Attempts for a review unit of work")
    LEAVE_REVIEW_LINK: str = Field(default="/admin/leaves", description="Link in reviewer notifications")
    LEAVE_HISTORY_LINK: str = Field(default="/leaves/history", description="Link in requester notifications")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True

    @field_validator("APP_ENV")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        if v not in APP_ENVIRONMENTS:
            raise ValueError(f"APP_ENV must be one of {list(APP_ENVIRONMENTS)}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {list(LOG_LEVELS)}")
        return level

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    def validate_production(self) -> None:
        """
        Refuse unsafe settings in prod

        Raises:
            ValueError: Listing every problem found
        """
        if self.APP_ENV != "prod":
            return

        problems = []
        if len(self.JWT_SECRET_KEY) < MIN_PROD_SECRET_LENGTH:
            problems.append(
                f"JWT_SECRET_KEY must be at least {MIN_PROD_SECRET_LENGTH} characters in production"
            )
        if not self.get_allowed_origins_list() or self.ALLOWED_ORIGINS.strip() == "*":
            problems.append("ALLOWED_ORIGINS must list explicit origins (not '*') in production")
        if problems:
            raise ValueError("; ".join(problems))

    def get_allowed_origins_list(self) -> List[str]:
        """CORS origins as a list; ['*'] when unrestricted"""
        if self.ALLOWED_ORIGINS.strip() == "*":
            return ["*"]
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]


settings = Settings()

if settings.APP_ENV == "prod":
    settings.validate_production()
