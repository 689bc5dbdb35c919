"""Configuration management for payskill."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Application Constants
class Constants:
    """Application-wide constants."""

    # Phone numbers
    PHONE_DIGITS: int = 10

    # Video uploads
    MAX_VIDEO_SIZE_BYTES: int = 50 * 1024 * 1024  # 50 MiB
    DEFAULT_VIDEO_EXTENSION: str = "mp4"
    UPLOADS_URL_PREFIX: str = "/uploads/videos"

    # Login attempts
    ATTEMPT_TIMESTAMP_FORMAT: str = "%Y-%m-%d %H:%M:%S"

    # Rate Limiting Windows
    RATE_LIMIT_WINDOW_SECONDS: int = 60

    # Redis Configuration
    REDIS_MAX_CONNECTIONS: int = 10

    # Pagination Defaults
    DEFAULT_PER_PAGE_LIMIT: int = 100
    SAMPLE_USERS_LIMIT: int = 3

    # Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent.parent
    UPLOADS_DIR: Path = PROJECT_ROOT / "public" / "uploads" / "videos"
    LEVELS_FILE: Path = PROJECT_ROOT / "levels.json"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage Configuration
    database_url: str | None = Field(default=None, description="Directory holding the SQLite database files")
    database_name: str | None = Field(default=None, description="Database name (file stem inside DATABASE_URL)")

    # Authentication Gate
    approved_phones: list[str] = Field(
        default=["1234567890", "9842470497", "9998887776"],
        description="Allow-list of 10-digit phone numbers permitted to sign in",
    )
    referral_code: str = Field(default="far55", description="Referral code shared by every approved phone")
    priority_phone: str = Field(default="9842470497", description="Phone that uses its own referral code")
    priority_referral_code: str = Field(default="99", description="Referral code for the priority phone")
    conceal_auth_failures: bool = Field(
        default=False,
        description="Answer referral and allow-list failures as pending instead of rejecting them",
    )
    attempt_timezone: str = Field(default="Asia/Kolkata", description="Timezone for login attempt timestamps")

    # Files
    uploads_dir: Path = Field(default=Constants.UPLOADS_DIR, description="Directory uploaded videos are written to")
    levels_file: Path = Field(default=Constants.LEVELS_FILE, description="Per-phone level overrides (levels.json)")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")

    # Redis Configuration (optional)
    redis_url: str | None = Field(default=None, description="Redis connection URL (e.g., redis://localhost:6379)")
    login_rate_limit_per_phone: int = Field(
        default=10, description="Maximum login submissions per phone per rate limit window"
    )

    def require_credential(self, field_name: str, service_name: str) -> str:
        """Validate that a required setting is present, raising a clear error if missing.

        Args:
            field_name: Name of the field to check
            service_name: Human-readable name for the error message

        Returns:
            The configured value

        Raises:
            ValueError: If the value is None or empty
        """
        value = getattr(self, field_name)
        if not value:
            raise ValueError(
                f"{service_name} not configured. Set {field_name.upper()} environment variable or add to .env file."
            )
        return value

    @property
    def database_path(self) -> Path:
        """Resolved SQLite file path built from DATABASE_URL and DATABASE_NAME."""
        database_url = self.require_credential("database_url", "Database connection string")
        database_name = self.require_credential("database_name", "Database name")
        return Path(database_url) / f"{database_name}.sqlite3"


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
