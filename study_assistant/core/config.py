"""Study assistant service configuration settings."""
from pydantic_settings import BaseSettings
from typing import List, Optional
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings."""

    # Service info
    SERVICE_NAME: str = "study-assistant"
    VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Database
    DATABASE_URL: str = "sqlite:///./study_assistant.db"
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 10
    DATABASE_POOL_TIMEOUT: int = 30
    DATABASE_POOL_RECYCLE: int = 1800

    # Celery
    CELERY_BROKER_URL: str = "redis://localhost:6379/1"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/2"
    CELERY_WORKER_CONCURRENCY: int = 4

    # Storage
    STORAGE_TYPE: str = "local"  # local, minio
    STORAGE_BASE_PATH: str = "/data/documents"
    S3_ENDPOINT: str = "http://minio:9000"
    S3_ACCESS_KEY: str = "minioadmin"
    S3_SECRET_KEY: str = "minioadmin"
    S3_BUCKET: str = "documents"

    # OCR settings
    OCR_DEFAULT_LANGUAGE: str = "swe"
    OCR_FALLBACK_LANGUAGE: str = "eng"
    OCR_CONTRAST_FACTOR: float = 1.5
    OCR_MAX_IMAGE_DIMENSION: int = 3000
    PDF_RASTER_MAX_DIMENSION: int = 2000
    TESSERACT_CMD: Optional[str] = None

    # Token budget
    RATE_LIMITING_ENABLED: bool = True
    DAILY_TOKEN_LIMIT: int = 1_000_000

    # AI providers
    AI_PROVIDER: str = "anthropic"  # anthropic, gemini
    AI_PROVIDER_PRIORITY: List[str] = ["anthropic", "gemini"]
    AI_REQUEST_TIMEOUT: float = 120.0

    ANTHROPIC_API_KEY: str = ""
    ANTHROPIC_MODEL: str = "claude-3-5-sonnet-20241022"
    ANTHROPIC_MAX_TOKENS: int = 4000
    ANTHROPIC_BASE_URL: str = "https://api.anthropic.com"

    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.0-flash-exp"
    GEMINI_MAX_TOKENS: int = 4000
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com"

    # Rendering
    ANSWER_KEY_MARKERS: List[str] = ["Facit", "Answer Key", "Svar:"]
    RENDER_FONT_PATH: str = "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"
    RENDER_FONT_BOLD_PATH: str = "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"
    RENDER_FONT_ITALIC_PATH: str = "/usr/share/fonts/truetype/dejavu/DejaVuSans-Oblique.ttf"
    RENDER_SCALE: float = 2.0

    # Upload limit (enforced by the upload service)
    MAX_UPLOAD_SIZE_MB: int = 50

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
