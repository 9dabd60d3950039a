"""Application configuration pulled from environment variables via pydantic."""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration for the layers service."""
    model_config = SettingsConfigDict(env_prefix="LAYERS_", extra="ignore")

    forecast_source: str = "open_meteo"  # options: open_meteo, file
    forecast_file_path: str | None = None
    default_zip: str = "98102"
    api_key: str | None = None
    request_timeout_seconds: float = 10.0
    retry_attempts: int = 5
    retry_backoff_factor: float = 0.2
    forecast_days: int = 2
    log_level: str = "INFO"

    @field_validator("default_zip", mode="after")
    @classmethod
    def strip_zip(cls, v: str) -> str:
        """Normalize whitespace around the configured ZIP code."""
        return str(v).strip()


settings = Settings()


if __name__ == "__main__":
    logger.logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4)}")
