"""
Configuration management using Pydantic Settings.
All environment variables are loaded and validated here.
"""

from typing import List, Literal, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ================================
    # Application Configuration
    # ================================
    APP_NAME: str = "Park Admin"
    APP_ENV: Literal["development", "staging", "production", "test"] = "development"
    DEBUG: bool = True
    SECRET_KEY: str = Field(..., min_length=32)

    # API Configuration
    API_V1_PREFIX: str = "/api/v1"
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:8080"

    @field_validator("ALLOWED_ORIGINS")
    @classmethod
    def parse_origins(cls, v: str) -> List[str]:
        """Parse comma-separated origins into list."""
        return [origin.strip() for origin in v.split(",") if origin.strip()]

    # ================================
    # Database Configuration
    # ================================
    DATABASE_URL: str = Field(..., description="Async SQLAlchemy connection string")
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 5

    # ================================
    # JWT Configuration
    # ================================
    JWT_SECRET_KEY: str = Field(..., min_length=32)
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 720  # 12 hours, one working day

    # ================================
    # Google Identity
    # ================================
    GOOGLE_CLIENT_ID: Optional[str] = None

    # Emails that are allowed in as administrators on first login
    ADMIN_EMAILS: str = ""

    @property
    def admin_email_list(self) -> List[str]:
        """Parse ADMIN_EMAILS into a lower-cased list."""
        return [
            email.strip().lower()
            for email in self.ADMIN_EMAILS.split(",")
            if email.strip()
        ]

    # ================================
    # Image CDN (Cloudinary)
    # ================================
    CLOUDINARY_CLOUD_NAME: Optional[str] = None
    CLOUDINARY_API_KEY: Optional[str] = None
    CLOUDINARY_API_SECRET: Optional[str] = None
    CLOUDINARY_FOLDER: str = "park-admin"
    CLOUDINARY_UPLOAD_PREFIX: str = "https://api.cloudinary.com"

    # Upload/delete policy. Timeouts are per attempt.
    CDN_UPLOAD_TIMEOUT_SECONDS: float = 120.0
    CDN_DELETE_TIMEOUT_SECONDS: float = 30.0
    CDN_RETRY_ATTEMPTS: int = Field(0, ge=0)
    CDN_MAX_CONCURRENT_UPLOADS: int = Field(5, ge=1)
    CDN_MAX_IMAGES_PER_RECORD: int = Field(5, ge=1)
    CDN_MAX_IMAGE_BYTES: int = 15 * 1024 * 1024

    # ================================
    # Logging Configuration
    # ================================
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.APP_ENV == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.APP_ENV == "production"

    @property
    def is_sqlite(self) -> bool:
        """True when DATABASE_URL points at SQLite (tests, local demos)."""
        return self.DATABASE_URL.startswith("sqlite")

    @property
    def cloudinary_configured(self) -> bool:
        return bool(
            self.CLOUDINARY_CLOUD_NAME
            and self.CLOUDINARY_API_KEY
            and self.CLOUDINARY_API_SECRET
        )


# Global settings instance
settings = Settings()
