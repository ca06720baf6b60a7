"""Application configuration using pydantic-settings."""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Literal, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )
    
    # Database
    database_url: str = "sqlite:///./data/injoyplan.db"
    
    # Calendar: "today" is midnight in this zone
    timezone: str = "America/Lima"
    
    # Pagination
    default_page_size: int = 20
    max_page_size: int = 100
    
    # Email
    email_provider: Literal["resend", "mock"] = "mock"
    resend_api_key: Optional[str] = None
    resend_from_email: str = "onboarding@resend.dev"
    complaints_email: str = "delivered@resend.dev"
    
    # Logging
    log_level: str = "INFO"
    
    # API
    api_host: str = "0.0.0.0"
    api_port: int = 4201
    cors_origins: List[str] = [
        "http://localhost:4200",
        "http://localhost:3000",
        "http://localhost:5173",
        "https://injoyplan.com",
        "https://www.injoyplan.com",
    ]


settings = Settings()
