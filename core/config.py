from typing import List, Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "EasyPrint API"
    ENV: str = "development"

    # -------------------------------------------------
    # Database
    # -------------------------------------------------
    DATABASE_URL: str = ""

    # -------------------------------------------------
    # Tokens (session cookie + WordPress bridge bearer)
    # -------------------------------------------------
    SESSION_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    SESSION_COOKIE_NAME: str = "session"
    SESSION_EXPIRE_DAYS: int = 30
    BRIDGE_TOKEN_EXPIRE_DAYS: int = 7

    # -------------------------------------------------
    # CORS
    # -------------------------------------------------
    BACKEND_CORS_ORIGINS: List[str] = []

    # Comma-separated allow-list, checked by the WordPress bridge only
    ALLOWED_ORIGINS: str = ""

    # -------------------------------------------------
    # Supabase Storage
    # -------------------------------------------------
    SUPABASE_URL: Optional[str] = None
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None
    STORAGE_BUCKET: str = "easyprint-files"
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    # -------------------------------------------------
    # Background jobs
    # -------------------------------------------------
    ENABLE_SCHEDULER: bool = False

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    class Config:
        case_sensitive = True

    @property
    def database_url(self) -> str:
        url = self.DATABASE_URL.strip()

        # Hosted Postgres often hands out 'postgres://'
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql+psycopg2://", 1)

        if not url:
            url = "sqlite:///./local.db"

        return url

    @property
    def bridge_allowed_origins(self) -> List[str]:
        return [o.strip().rstrip("/") for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]


# Instantiate settings
settings = Settings()
