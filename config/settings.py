from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import List
import os
from pathlib import Path


class Settings(BaseSettings):
    """Application settings - reads from environment variables"""

    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""  # anon key, used for auth flows
    supabase_service_key: str = ""
    db_schema: str = "public"

    # Web
    site_url: str = "http://localhost:8080"
    port: int = 8080
    session_cookie: str = "playr_session"

    # App Settings
    admin_user_ids: List[str] = []
    draft_dir: str = ".drafts"

    # Environment
    env: str = "development"
    debug: bool = False

    @field_validator('admin_user_ids', mode='before')
    @classmethod
    def parse_admin_ids(cls, v):
        if isinstance(v, str):
            return [x.strip() for x in v.split(",") if x.strip()]
        if isinstance(v, list):
            return [str(x) for x in v]
        return []

    @field_validator('site_url', mode='after')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env" if Path(".env").exists() else None,
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,  # SUPABASE_URL == supabase_url
    )


# Create settings instance
settings = Settings()

if os.getenv("DEBUG", "").lower() == "true":
    print(f"Settings loaded:")
    print(f"  SUPABASE_URL: {'set' if settings.supabase_url else 'MISSING'}")
    print(f"  SUPABASE_KEY: {'set' if settings.supabase_key else 'MISSING'}")
    print(f"  ADMIN_USER_IDS: {len(settings.admin_user_ids)} configured")
