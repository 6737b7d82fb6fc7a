"""Configuration settings for TaskFlow."""

import os
import secrets
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./taskflow.db")
    DB_TIMEOUT_SECONDS: float = float(os.getenv("DB_TIMEOUT_SECONDS", "5"))

    # JWT (access and refresh tokens are signed with separate secrets)
    JWT_ACCESS_SECRET: str = os.getenv("JWT_ACCESS_SECRET", "")
    JWT_REFRESH_SECRET: str = os.getenv("JWT_REFRESH_SECRET", "")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15"))
    REFRESH_TOKEN_EXPIRE_DAYS: int = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7"))
    REFRESH_TOKEN_ROTATION: bool = os.getenv("REFRESH_TOKEN_ROTATION", "false").lower() == "true"

    # AI assistant (OpenAI-compatible chat completions, Groq by default)
    GROQ_API_KEY: str = os.getenv("GROQ_API_KEY", "")
    AI_BASE_URL: str = os.getenv("AI_BASE_URL", "https://api.groq.com/openai/v1")
    AI_MODEL: str = os.getenv("AI_MODEL", "llama-3.3-70b-versatile")
    AI_TIMEOUT_SECONDS: float = float(os.getenv("AI_TIMEOUT_SECONDS", "30"))

    # Passwords
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))

    # HTTP
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:5173")
    RATE_LIMIT_DEFAULT: str = os.getenv("RATE_LIMIT_DEFAULT", "100/15minutes")

    # Application
    APP_ENV: str = os.getenv("APP_ENV", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    def __init__(self) -> None:
        if not self.JWT_ACCESS_SECRET:
            self.JWT_ACCESS_SECRET = secrets.token_urlsafe(32)
            self._generated_secrets = ["JWT_ACCESS_SECRET"]
        else:
            self._generated_secrets = []
        if not self.JWT_REFRESH_SECRET:
            self.JWT_REFRESH_SECRET = secrets.token_urlsafe(32)
            self._generated_secrets.append("JWT_REFRESH_SECRET")

    def validate(self) -> list[str]:
        """Validate settings and return list of warnings."""
        warnings = [
            f"{name} is not set - using auto-generated key (not persistent across restarts)"
            for name in self._generated_secrets
        ]
        if self.JWT_ACCESS_SECRET == self.JWT_REFRESH_SECRET:
            warnings.append("JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must differ")
        if not 4 <= self.BCRYPT_ROUNDS <= 31:
            warnings.append(f"BCRYPT_ROUNDS={self.BCRYPT_ROUNDS} is outside bcrypt's 4-31 range")
        if not self.GROQ_API_KEY:
            warnings.append("GROQ_API_KEY is not set - AI assistant endpoints are disabled")
        return warnings


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
