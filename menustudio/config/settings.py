from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Required for cross-tenant reads in edge functions
    supabase_storage_bucket: str = "menu-photos"

    # AI gateway (OpenAI-compatible chat completions)
    ai_gateway_url: str = "https://ai.gateway.lovable.dev/v1/chat/completions"
    ai_gateway_key: Optional[str] = None
    chat_model: str = "google/gemini-3-flash-preview"
    brain_model: str = "google/gemini-2.5-pro"
    image_model: str = "google/gemini-3-pro-image-preview"

    # Native Gemini API, used by edit-image
    gemini_api_key: Optional[str] = None
    gemini_api_url: str = "https://generativelanguage.googleapis.com/v1beta/models"
    gemini_image_model: str = "gemini-3-pro-image-preview"

    # AWS S3 (optional; generated images go to Supabase Storage when unset)
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_region: str = "us-east-1"
    s3_bucket_name: Optional[str] = None

    # Retry / resilience
    retry_max_attempts: int = 5
    retry_initial_delay_ms: int = 1000
    retry_max_delay_ms: int = 10000
    gateway_max_attempts: int = 3
    gateway_timeout_seconds: float = 120.0

    # Menu photos
    trash_retention_days: int = 30

    # App
    app_name: str = "menustudio-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def s3_configured(self) -> bool:
        return all([self.aws_access_key_id, self.aws_secret_access_key, self.s3_bucket_name])

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
