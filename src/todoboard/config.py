"""Configuration management for todoboard."""

from pathlib import Path
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="TODOBOARD_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Application
    app_name: str = "todoboard"
    debug: bool = False
    log_level: str = "INFO"

    # Paths
    data_dir: Path = Path("data")

    # Database
    database_url: str = "sqlite+aiosqlite:///data/todoboard.db"

    # API server
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Authentication (optional - disabled by default)
    # Set TODOBOARD_API_KEY to require an API key on every /api route
    api_key: str | None = None

    # User the CLI acts as when --user is not given
    default_user_id: str | None = None

    # Remote API used by the HTTP sync backend
    api_base_url: str = "http://127.0.0.1:8000"
    api_timeout_seconds: float = 10.0

    # Rate limiting (requests per minute)
    rate_limit_enabled: bool = True
    rate_limit_default: str = "60/minute"

    # CORS (Cross-Origin Resource Sharing)
    cors_enabled: bool = True
    cors_allow_origins: list[str] = []  # Empty = same-origin only; use ["*"] for any origin
    cors_allow_methods: list[str] = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
    cors_allow_headers: list[str] = ["*"]
    cors_allow_credentials: bool = False

    def setup_directories(self) -> None:
        """Ensure required directories exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    settings = Settings()
    settings.setup_directories()
    return settings
