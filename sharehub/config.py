from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    # Application settings
    app_name: str = "ShareHub"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"
    port: int = 8000

    # Database settings
    database_url: str = "sqlite+aiosqlite:///./sharehub.db"

    # Security settings
    secret_key: str = "change-me"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # Links embedded in QR codes and token sheets
    frontend_url: str = "http://localhost:3000"

    # Object storage
    storage_dir: str = "./storage"
    signed_url_ttl_seconds: int = 3600
    slide_max_size: int = 100 * 1024 * 1024
    photo_max_size: int = 50 * 1024 * 1024

    # Rate limiting (fixed window, per client IP)
    rate_limit_enabled: bool = True
    rate_limit_public: str = "100/15minutes"
    rate_limit_upload: str = "20/hour"
    rate_limit_authenticated: str = "500/15minutes"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Activity log retention (-1 keeps records indefinitely)
    activity_log_retention_days: int = 90
    activity_log_prune_enabled: bool = False

    # Token usage tracking queue
    usage_queue_size: int = 1000
    usage_max_retries: int = 3

    # CORS settings
    cors_origins: list[str] = ["http://localhost:3000"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


settings = Settings()
