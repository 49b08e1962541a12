"""
Core settings and environment variables for GEOCITY.
Uses pydantic-settings for type-safe environment variable loading.
"""

from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Create a .env file in the root directory to configure these.
    """

    # Application
    APP_NAME: str = "GEOCITY"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS - Frontend URLs allowed to access this API (comma separated)
    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    # Firebase
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None  # Path to service account JSON
    FIREBASE_STORAGE_BUCKET: Optional[str] = None
    FIREBASE_DATABASE_URL: Optional[str] = None  # Realtime Database (sensor data)
    FIREBASE_WEB_API_KEY: Optional[str] = None  # Identity Toolkit (email/password + Google sign-in)

    # Mock mode for local development and tests without Firebase credentials
    USE_MOCK_DB: bool = False
    MOCK_DB_PATH: Optional[str] = None
    MOCK_UPLOAD_DIR: str = "./uploads"

    # AI image analysis
    AI_ENABLED: bool = True
    AI_PROVIDER: str = "gemini"  # "gemini" or "openai"
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-1.5-flash"
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    AI_TIMEOUT_SECONDS: float = 20.0

    # Geocoding
    # - GEOCODING_PROVIDER: "google" (needs GOOGLE_MAPS_API_KEY) or "nominatim"
    GEOCODING_PROVIDER: str = "google"
    GOOGLE_MAPS_API_KEY: Optional[str] = None

    # Discord notifications
    DISCORD_WEBHOOK_URL: Optional[str] = None

    # Report expiration
    DEFAULT_EXPIRATION_HOURS: float = 1  # Applied to new reports without a value
    FALLBACK_EXPIRATION_HOURS: float = 24  # Applied to stored reports missing the field

    # Background sweeper for expired reports
    AUTO_CLEANUP_ENABLED: bool = True
    AUTO_CLEANUP_INTERVAL_SECONDS: int = 60

    # Shared secret for cron triggers (unset = open)
    CRON_SECRET: Optional[str] = None

    # Map
    MAP_VIEW_RADIUS_KM: float = 10.0

    @property
    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"  # Allow extra env vars to prevent crashes


# Global settings instance
settings = Settings()
