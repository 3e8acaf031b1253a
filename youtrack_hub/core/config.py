from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # YouTrack
    youtrack_base_url: str = Field(
        description="REST API base URL (e.g., https://example.youtrack.cloud/api/)",
    )
    youtrack_token: SecretStr = Field(description="Permanent token used as a Bearer credential")

    # Network
    proxy_url: str | None = Field(
        default=None,
        description="HTTP/HTTPS proxy URL (e.g., http://proxy.example.com:8080)",
    )
    request_timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    max_retries: int = Field(default=3, ge=1, description="Attempts per request on 429/timeouts")
    page_size: int = Field(default=100, ge=1, le=1000, description="$top used when paginating")

    # History scanning
    state_field_name: str = Field(default="State")
    resolved_state_name: str = Field(
        default="Available",
        description="State value that marks an issue as resolved",
    )

    # App
    log_file: str | None = Field(default=None, description="Optional rotated log file path")
    debug: bool = Field(default=False)

    @computed_field
    @property
    def log_directory(self) -> Path | None:
        if not self.log_file:
            return None
        return Path(self.log_file).parent


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore
