"""
Application Configuration
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # MongoDB Configuration
    mongodb_uri: str
    database_name: str = "helpdesk"

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_reload: bool = True
    environment: str = "development"

    # CORS
    cors_allowed_origins: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Rate limiting (slowapi limit string applied to every route)
    rate_limit_default: str = "100/minute"

    # Ticket lifecycle
    ticket_id_seed: str = "7654567897"
    ticket_update_max_retries: int = 3
    assignee_pool: List[str] = [
        "Helpdesk Team",
        "Technical Support",
        "IT Support Team",
        "Customer Service",
        "Operations Team",
        "System Admin",
        "Network Team",
    ]

    # Uploads
    max_upload_size: int = 5 * 1024 * 1024
    max_upload_files: int = 5
    upload_url_prefix: str = "/uploads"
    allowed_upload_types: List[str] = [
        "image/jpeg",
        "image/jpg",
        "image/png",
        "application/pdf",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/json",
        "video/mp4",
    ]

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()
