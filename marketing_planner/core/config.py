"""
Application configuration management using Pydantic Settings.
Handles environment-based configuration for the database, draft storage, AI providers and logging.
"""
import os
from typing import Optional, List
from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Application settings
    APP_NAME: str = "Marketing Plan Generator API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Server settings
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Database settings
    MONGODB_URL: str = "mongodb://localhost:27017"
    DATABASE_NAME: str = "marketing_plan_generator"
    MONGODB_TIMEOUT_MS: int = 5000

    # Redis settings (questionnaire drafts)
    REDIS_URL: Optional[str] = os.getenv("REDIS_URL")
    REDIS_DB: int = 0
    DRAFT_TTL_SECONDS: int = int(os.getenv("DRAFT_TTL_SECONDS", str(30 * 24 * 3600)))
    DRAFT_KEY_PREFIX: str = "questionnaire_draft"

    # Development fallback: keep drafts on the local filesystem when Redis is not configured
    USE_LOCAL_DRAFTS: bool = False
    LOCAL_DRAFT_DIR: str = os.getenv("LOCAL_DRAFT_DIR", "./.local_drafts")

    # In-memory questionnaire sessions; evicted ones resume from their draft
    SESSION_IDLE_SECONDS: int = 3600
    MAX_ACTIVE_SESSIONS: int = 1000

    # CORS settings
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
    ]
    ALLOWED_METHODS: List[str] = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    ALLOWED_HEADERS: List[str] = ["*"]

    # AI Provider settings
    GEMINI_API_KEY: Optional[str] = os.getenv("GEMINI_API_KEY")
    GROQ_API_KEY: Optional[str] = os.getenv("GROQ_API_KEY")
    OPENAI_API_KEY: Optional[str] = os.getenv("OPENAI_API_KEY")

    # AI Configuration
    PRIMARY_AI_PROVIDER: str = "gemini"
    SECONDARY_AI_PROVIDER: str = "openai"
    TERTIARY_AI_PROVIDER: str = "groq"

    # Model names (configurable via env)
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
    GROQ_MODEL: str = os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

    # AI Response Configuration
    AI_MAX_TOKENS: int = 4000
    AI_TEMPERATURE: float = 0.7
    AI_TIMEOUT_SECONDS: int = 120

    # Plan generation
    PLAN_VERSION: str = "1.0"

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @field_validator("MONGODB_URL")
    def validate_mongodb_url(cls, v):
        """Validate MongoDB URL format."""
        if not v.startswith(("mongodb://", "mongodb+srv://")):
            raise ValueError("MONGODB_URL must start with 'mongodb://' or 'mongodb+srv://'")
        return v

    @field_validator("REDIS_URL")
    def validate_redis_url(cls, v):
        """Validate Redis URL format."""
        if v is None or v == "":
            return v
        if not v.startswith("redis://") and not v.startswith("rediss://"):
            raise ValueError("REDIS_URL must start with 'redis://' or 'rediss://'")
        return v

    @field_validator("LOG_LEVEL")
    def validate_log_level(cls, v):
        """Ensure the log level is one logging understands."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError("LOG_LEVEL must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL")
        return level

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


# Global settings instance
settings = Settings()
