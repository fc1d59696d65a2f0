from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "MapShare API"
    ENV: str = "development"
    LOG_LEVEL: str = Field("INFO", env="LOG_LEVEL")

    # Public frontend URL, used to build invitation links
    APP_BASE_URL: str = Field("http://localhost:3000", env="APP_BASE_URL")

    # -------------------------------------------------
    # CORS
    # -------------------------------------------------
    BACKEND_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # Database (SQLModel / SQLAlchemy URL)
    # -------------------------------------------------
    DATABASE_URL: Optional[str] = Field(None, env="DATABASE_URL")

    # -------------------------------------------------
    # Auth (bearer JWT)
    # -------------------------------------------------
    JWT_SECRET: Optional[str] = Field(None, env="JWT_SECRET")
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(60, env="ACCESS_TOKEN_EXPIRE_MINUTES")

    # -------------------------------------------------
    # Invitations
    # -------------------------------------------------
    INVITATION_TTL_DAYS: int = Field(7, env="INVITATION_TTL_DAYS", description="Days before a pending invitation expires (default: 7)")
    INVITATION_CLEANUP_HOURS: int = Field(24, env="INVITATION_CLEANUP_HOURS", description="Interval of the expiry sweep (default: 24)")

    # -------------------------------------------------
    # SMTP Email Notifications
    # -------------------------------------------------
    SMTP_HOST: Optional[str] = Field(None, env="SMTP_HOST")
    SMTP_PORT: Optional[int] = Field(None, env="SMTP_PORT")
    SMTP_USER: Optional[str] = Field(None, env="SMTP_USER")
    SMTP_PASS: Optional[str] = Field(None, env="SMTP_PASS")
    SMTP_FROM: Optional[str] = Field(None, env="SMTP_FROM")

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    class Config:
        case_sensitive = True


# Instantiate settings
settings = Settings()

# Normalise CORS origins
settings.BACKEND_CORS_ORIGINS = sorted({o.rstrip("/") for o in settings.BACKEND_CORS_ORIGINS})
