"""Field client configuration."""
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Field client settings, read from SURVEY_CLIENT_* variables."""

    # Server
    BASE_URL: str = "http://localhost:8000"
    REQUEST_TIMEOUT_SECONDS: float = 10.0

    # Local storage
    DATA_DIR: Path = Path(".survey-client")

    # Sync
    SYNC_INTERVAL_SECONDS: float = 30.0
    # Must not exceed the server's SYNC_MAX_BATCH_SIZE
    SYNC_BATCH_SIZE: int = 500

    # Device description sent with each response
    APP_VERSION: str = "1.0.0"
    PLATFORM: str = "python"

    model_config = SettingsConfigDict(
        env_prefix="SURVEY_CLIENT_",
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )
