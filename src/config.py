"""Application configuration"""

import os
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "TallerJYM"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    SHOP_NAME: str = os.getenv("SHOP_NAME", "TALLER JYM")

    # API
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))
    API_BASE_URL: str = os.getenv("API_BASE_URL", "http://localhost:8000")
    API_TIMEOUT_SECONDS: float = float(os.getenv("API_TIMEOUT_SECONDS", "30"))

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./taller.db")

    # Object storage (local by default, Azure Blob Storage when enabled)
    USE_AZURE_STORAGE: bool = os.getenv("USE_AZURE_STORAGE", "False").lower() == "true"
    AZURE_STORAGE_ACCOUNT_NAME: Optional[str] = os.getenv("AZURE_STORAGE_ACCOUNT_NAME")
    AZURE_STORAGE_CONNECTION_STRING: Optional[str] = os.getenv("AZURE_STORAGE_CONNECTION_STRING")
    AZURE_STORAGE_CONTAINER_IMAGES: str = os.getenv("AZURE_STORAGE_CONTAINER_IMAGES", "images")
    LOCAL_STORAGE_PATH: str = os.getenv("LOCAL_STORAGE_PATH", "./storage")
    PUBLIC_MEDIA_URL: str = os.getenv("PUBLIC_MEDIA_URL", "http://localhost:8000/media")

    # Photo compression
    IMAGE_MAX_SIZE_MB: float = float(os.getenv("IMAGE_MAX_SIZE_MB", "0.2"))
    IMAGE_MAX_DIMENSION: int = int(os.getenv("IMAGE_MAX_DIMENSION", "1920"))

    # Documents
    RECEIPT_PREFIX: str = os.getenv("RECEIPT_PREFIX", "Recibo_JYM")
    REPORT_PREFIX: str = os.getenv("REPORT_PREFIX", "Reporte_JYM")

    # Sharing
    SHARE_TITLE: str = os.getenv("SHARE_TITLE", "Registro Taller JYM")
    SHARE_TIMEOUT_SECONDS: float = float(os.getenv("SHARE_TIMEOUT_SECONDS", "30"))
    WHATSAPP_BASE_URL: str = os.getenv("WHATSAPP_BASE_URL", "https://wa.me")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE: Optional[str] = os.getenv("LOG_FILE")

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
