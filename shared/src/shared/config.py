"""Settings base: environment variables first, then a local .env file."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseAppSettings(BaseSettings):
    """Unknown keys are ignored so one .env can feed several services."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # read by shared.logging.configure_logging at app creation
    log_level: str = "info"
    json_logs: bool = True
