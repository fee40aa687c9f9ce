"""Service configuration settings."""

from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Service configuration
    service_name: str = "consultation-service"
    environment: str = "development"
    port: int = 8003

    # Upstream consultation portal
    upstream_base_url: str = "https://samradapi.island.is"
    graphql_url: str = "https://island.is/api/graphql"
    relay_prefix: str = "https://corsproxy.io/?"

    # Bulk case listing (single page, no pagination loop)
    case_page_size: int = 1500
    case_order_by: str = "LastUpdated"

    # Generative AI
    gemini_api_key: Optional[str] = None
    analysis_model: str = "gemini-2.5-flash"
    image_model: str = "imagen-4.0-generate-001"
    max_chat_sessions: int = 200

    # CORS configuration
    cors_origins: str = "*"

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",")]


# Global settings instance
settings = Settings()
