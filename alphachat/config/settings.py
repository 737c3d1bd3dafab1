"""
Configuration Settings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # App info
    app_name: str = "AlphaChat API"
    app_version: str = "1.0.0"
    debug: bool = False

    # Security
    secret_key: str = "change-this-secret-key-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24  # 1 day

    # Admin account ensured at startup when both are set
    admin_username: Optional[str] = None
    admin_password: Optional[str] = None

    # Storage
    local_storage_path: str = "./data"

    # Temporary chat sessions
    session_ttl_hours: int = 24
    max_extend_hours: int = 168  # 7 days
    max_message_length: int = 4000

    # Cleanup scheduler
    cleanup_enabled: bool = True
    cleanup_interval_seconds: float = 60 * 60
    cleanup_startup_delay_seconds: float = 5.0

    # AI providers (a provider without a key is reported as unavailable)
    openai_api_key: Optional[str] = None
    openai_base_url: str = "https://api.openai.com/v1"
    gemini_api_key: Optional[str] = None
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_model: str = "gemini-pro"  # remote model behind the "gemini-pro" catalog entry
    image_model: str = "dall-e-3"  # served by the OpenAI key
    deepseek_api_key: Optional[str] = None
    deepseek_base_url: str = "https://api.deepseek.com/v1"
    provider_timeout_seconds: float = 120.0

    # Free tier daily limits
    free_daily_chat_limit: int = 50
    free_daily_image_limit: int = 5
    free_daily_video_limit: int = 2

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
    ]

    # Logging configuration
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file_path: str = "./logs/alphachat.log"
    log_file_enabled: bool = True
    log_console_enabled: bool = True
    log_json_format: bool = True  # JSON for files, human-readable for console
    log_api_requests: bool = True


settings = Settings()
