from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    http_host: str = "0.0.0.0"
    http_port: int = 8000

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "docscan"
    db_username: str = "docscan"
    db_password: str = "secret"

    analysis_provider: str = "document_intelligence"
    analysis_endpoint: str = ""
    analysis_fallback_endpoints: Annotated[list[str], NoDecode] = Field(default_factory=list)
    analysis_model_id: str = ""
    analysis_api_key: str = ""
    analysis_api_version: str = "2024-02-29"
    analysis_poll_interval_ms: int = Field(default=1000, ge=0)
    analysis_max_poll_attempts: int = Field(default=10, ge=1)
    analysis_timeout_seconds: int = 30

    max_upload_size_bytes: int = 4 * 1024 * 1024
    allowed_content_types: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: [
            "image/jpeg",
            "image/png",
            "image/gif",
            "image/bmp",
            "image/tiff",
            "application/pdf",
        ]
    )
    max_pdf_pages: int | None = None
    pdf_engine: str = "pdfplumber"

    auth_provider: str = "disabled"
    auth_tokens: Annotated[list[str], NoDecode] = Field(default_factory=list)

    @field_validator(
        "analysis_fallback_endpoints",
        "allowed_content_types",
        "auth_tokens",
        mode="before",
    )
    @classmethod
    def _split_comma_separated(cls, value: object) -> object:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value
